"""Mock chat model for offline testing."""

from __future__ import annotations

import json
from typing import Any

from mediaagent.models.base import BaseChatModel, ModelResponse

_NO_OP_PLAN = {
    "overview": "No API key configured; nothing will be executed.",
    "followUp": "Set OPENAI_API_KEY to plan real commands.",
    "steps": [
        {
            "command": "none",
            "arguments": [],
            "reasoning": "Offline mock planner.",
            "outputs": [],
        }
    ],
}


class MockChatModel(BaseChatModel):
    """Deterministic mock model used when no API key is available."""

    model = "mock"

    def __init__(self, scripted: list[ModelResponse | str] | None = None) -> None:
        self._scripted = list(scripted or [])
        self.calls: list[dict[str, Any]] = []

    def chat(
        self,
        messages: list[dict[str, Any]],
        response_format: dict[str, Any] | None = None,
    ) -> ModelResponse:
        self.calls.append({"messages": messages, "response_format": response_format})
        if self._scripted:
            item = self._scripted.pop(0)
            if isinstance(item, ModelResponse):
                return item
            return ModelResponse(text=item, raw={"output_text": item})
        text = json.dumps(_NO_OP_PLAN)
        return ModelResponse(text=text, raw={"output_text": text})
