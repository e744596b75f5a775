"""JSON payloads describing task outcomes for the HTTP layer and CLI."""

from __future__ import annotations

from typing import Any

from mediaagent.agent import TaskResult
from mediaagent.errors import MediaAgentTaskError
from mediaagent.execution.results import CommandExecutionResult
from mediaagent.plans import CommandPlan
from mediaagent.tracking import TaskPhase


def _jsonable(value: Any) -> Any:
    if isinstance(value, (CommandPlan, CommandExecutionResult)):
        return value.to_payload()
    return value


def phases_payload(phases: list[TaskPhase | dict[str, Any]]) -> list[dict[str, Any]]:
    return [phase.to_payload() if isinstance(phase, TaskPhase) else phase for phase in phases]


def success_payload(outcome: TaskResult, include_debug: bool = False) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "status": "success",
        "plan": outcome.plan.to_payload(),
        "rawPlan": _jsonable(outcome.raw_plan),
        "result": outcome.result.to_payload(),
        "phases": phases_payload(outcome.phases),
    }
    if include_debug:
        payload["debug"] = outcome.debug
    return payload


def failure_payload(error: MediaAgentTaskError, include_debug: bool = False) -> dict[str, Any]:
    context = error.context
    plan = _jsonable(context.get("plan"))
    raw_plan = context.get("raw_plan")
    payload: dict[str, Any] = {
        "status": "failed",
        "error": str(error),
        "detail": error.detail,
        "phases": phases_payload(error.phases),
        "plan": plan,
        "rawPlan": _jsonable(raw_plan) if raw_plan is not None else plan,
        "responseText": context.get("response_text"),
        "result": _jsonable(context.get("result")),
    }
    if include_debug:
        payload["debug"] = context.get("debug")
    return payload
