"""OpenAI-compatible chat model client."""

from __future__ import annotations

import json
import time
from typing import Any
from urllib.parse import urlparse, urlunparse

import httpx

from mediaagent.models.base import BaseChatModel, ModelResponse
from mediaagent.util.logging import get_logger, redact

logger = get_logger(__name__)


class OpenAICompatError(RuntimeError):
    """Raised when the OpenAI-compatible backend returns an error."""


class OpenAICompatChatModel(BaseChatModel):
    """HTTP client for OpenAI-compatible chat/completions."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        model: str,
        timeout_seconds: int = 60,
        max_response_bytes: int = 2_000_000,
        max_attempts: int = 3,
        extra_headers: dict[str, str] | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        normalized = base_url.strip()
        if not normalized.startswith(("http://", "https://")):
            normalized = f"http://{normalized}"
        self.base_url = normalized.rstrip("/")
        self.api_key = api_key
        self.model = model
        self.timeout_seconds = timeout_seconds
        self.max_response_bytes = max_response_bytes
        self.max_attempts = max_attempts
        self.extra_headers = extra_headers or {}
        self.transport = transport

    def _build_url(self) -> str:
        parsed = urlparse(self.base_url)
        path = parsed.path.rstrip("/")
        if path.endswith("/chat/completions"):
            final_path = path
        elif path.endswith("/v1"):
            final_path = f"{path}/chat/completions"
        else:
            final_path = f"{path}/v1/chat/completions"
        return urlunparse(parsed._replace(path=final_path, params="", query="", fragment=""))

    def _request_payload(
        self, messages: list[dict[str, Any]], response_format: dict[str, Any] | None
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {"model": self.model, "messages": messages}
        if response_format is not None:
            payload["response_format"] = response_format
        return payload

    def chat(
        self,
        messages: list[dict[str, Any]],
        response_format: dict[str, Any] | None = None,
    ) -> ModelResponse:
        url = self._build_url()
        headers = {"Authorization": f"Bearer {self.api_key}", **self.extra_headers}
        payload = self._request_payload(messages, response_format)
        timeout = httpx.Timeout(self.timeout_seconds)

        last_error: Exception | None = None
        for attempt in range(self.max_attempts):
            try:
                with httpx.Client(timeout=timeout, transport=self.transport) as client:
                    response = client.post(url, headers=headers, json=payload)
                if response.status_code == 429 or response.status_code >= 500:
                    raise OpenAICompatError(
                        f"Retryable error {response.status_code}: {response.text[:200]}"
                    )
                response.raise_for_status()
                if len(response.content) > self.max_response_bytes:
                    raise OpenAICompatError("Response too large")
                try:
                    data = response.json()
                except json.JSONDecodeError as exc:
                    raise OpenAICompatError("Malformed JSON response") from exc
                choice = (data.get("choices") or [{}])[0]
                content = (choice.get("message") or {}).get("content")
                return ModelResponse(text=content if isinstance(content, str) else "", raw=data)
            except httpx.HTTPStatusError as exc:
                raise OpenAICompatError(
                    f"Request rejected with status {exc.response.status_code}"
                ) from exc
            except (httpx.HTTPError, OpenAICompatError) as exc:
                last_error = exc
                logger.info(
                    "Chat request attempt %s failed: %s",
                    attempt + 1,
                    redact(str(exc), [self.api_key]),
                )
                if attempt == self.max_attempts - 1:
                    break
                time.sleep(2**attempt)
        raise OpenAICompatError(f"OpenAI-compatible request failed: {last_error}")
