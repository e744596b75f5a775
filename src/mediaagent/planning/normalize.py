"""Shape normalisation applied to planner payloads before validation."""

from __future__ import annotations

import copy
from typing import Any

_LEGACY_STEP_KEYS = ("command", "arguments", "reasoning", "outputs", "id", "title", "note")


def normalize_plan_structure(payload: Any) -> Any:
    """Return a multi-step payload for either supported plan shape.

    ``{"steps": [...]}`` is copied as is. The older single-command shape
    (``command``/``arguments``/``reasoning``/``followUp``/``outputs`` at the top
    level) becomes a one-step plan whose overview is the command reasoning.
    Any other value is returned untouched and left for the validator to reject.
    """
    if not isinstance(payload, dict):
        return payload
    if "steps" in payload:
        return copy.deepcopy(payload)
    if not isinstance(payload.get("command"), str):
        return payload

    step = {key: copy.deepcopy(payload[key]) for key in _LEGACY_STEP_KEYS if key in payload}
    reasoning = payload.get("reasoning")
    return {
        "steps": [step],
        "overview": reasoning if isinstance(reasoning, str) else "",
        "followUp": payload.get("followUp", ""),
    }
