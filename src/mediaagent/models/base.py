"""Base model interfaces."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel


class ModelResponse(BaseModel):
    text: str = ""
    raw: dict[str, Any] | None = None


class BaseChatModel(ABC):
    """Abstract chat model interface."""

    model: str = "unknown"

    @abstractmethod
    def chat(
        self,
        messages: list[dict[str, Any]],
        response_format: dict[str, Any] | None = None,
    ) -> ModelResponse:
        """Send chat request and return model response."""
        raise NotImplementedError
