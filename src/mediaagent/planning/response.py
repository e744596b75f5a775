"""Extract plan JSON from chat-model responses."""

from __future__ import annotations

import json
import re
from typing import Any, Mapping

from mediaagent.errors import ResponseParseError

_FENCE_RE = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL | re.IGNORECASE)
_TRAILING_COMMA_RE = re.compile(r",\s*([}\]])")


def extract_response_text(response: Any) -> str:
    """Return the first text chunk found in a Responses or Chat Completions payload."""
    if not isinstance(response, Mapping):
        raise ResponseParseError("Model response is not an object")

    output_text = response.get("output_text")
    if isinstance(output_text, str):
        return output_text

    for item in response.get("output") or []:
        if not isinstance(item, Mapping):
            continue
        for chunk in item.get("content") or []:
            if isinstance(chunk, Mapping) and isinstance(chunk.get("text"), str):
                return chunk["text"]

    for choice in response.get("choices") or []:
        message = choice.get("message") if isinstance(choice, Mapping) else None
        content = message.get("content") if isinstance(message, Mapping) else None
        if isinstance(content, str):
            return content
        if isinstance(content, list):
            for part in content:
                if (
                    isinstance(part, Mapping)
                    and part.get("type") == "text"
                    and isinstance(part.get("text"), str)
                ):
                    return part["text"]

    raise ResponseParseError("No text content found in model response")


def _extract_object_block(text: str) -> str:
    start = text.find("{")
    if start < 0:
        raise ResponseParseError("No JSON object found in model response")
    depth = 0
    in_string = False
    escape = False
    for idx in range(start, len(text)):
        char = text[idx]
        if in_string:
            if escape:
                escape = False
            elif char == "\\":
                escape = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return text[start : idx + 1]
    raise ResponseParseError("Unbalanced JSON braces in model response")


def parse_plan_text(text: str) -> dict[str, Any]:
    """Decode a plan object, tolerating code fences and surrounding prose."""
    try:
        payload = json.loads(text)
    except json.JSONDecodeError:
        match = _FENCE_RE.search(text)
        candidate = match.group(1) if match else text
        block = _TRAILING_COMMA_RE.sub(r"\1", _extract_object_block(candidate))
        try:
            payload = json.loads(block)
        except json.JSONDecodeError as exc:
            raise ResponseParseError(f"Failed to parse plan JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise ResponseParseError("Plan JSON must be an object")
    return payload
