"""Coarse phase tracking for a single task run."""

from __future__ import annotations

import traceback
from datetime import datetime, timezone
from typing import Any, Literal, Sequence

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from mediaagent.util.logging import get_logger

logger = get_logger(__name__)

PhaseStatus = Literal["pending", "in_progress", "success", "failed"]

DEFAULT_TASK_PHASES: tuple[tuple[str, str], ...] = (
    ("plan", "Plan commands"),
    ("execute", "Execute commands"),
    ("summarize", "Summarize results"),
)


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PhaseError(_CamelModel):
    message: str
    stack: str | None = None
    name: str = "Error"


class PhaseLog(_CamelModel):
    at: str
    message: str


class TaskPhase(_CamelModel):
    id: str
    title: str
    status: PhaseStatus = "pending"
    started_at: str | None = None
    finished_at: str | None = None
    error: PhaseError | None = None
    meta: dict[str, Any] = Field(default_factory=dict)
    logs: list[PhaseLog] = Field(default_factory=list)

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class TaskPhaseTracker:
    """Records status, timing, metadata and log lines per phase.

    Owned by exactly one task run. Unknown phase ids are ignored.
    """

    def __init__(self, phases: Sequence[tuple[str, str]] = DEFAULT_TASK_PHASES) -> None:
        self._phases = [TaskPhase(id=phase_id, title=title) for phase_id, title in phases]

    def start(self, phase_id: str, meta: dict[str, Any] | None = None) -> None:
        phase = self._find(phase_id)
        if phase is None:
            return
        phase.status = "in_progress"
        phase.started_at = phase.started_at or utc_now()
        phase.meta.update(meta or {})
        logger.info("Phase %s started", phase_id)

    def complete(self, phase_id: str, meta: dict[str, Any] | None = None) -> None:
        phase = self._find(phase_id)
        if phase is None:
            return
        phase.status = "success"
        phase.finished_at = utc_now()
        phase.meta.update(meta or {})
        logger.info("Phase %s completed", phase_id)

    def fail(
        self,
        phase_id: str,
        error: BaseException | str,
        meta: dict[str, Any] | None = None,
    ) -> None:
        phase = self._find(phase_id)
        if phase is None:
            return
        phase.status = "failed"
        phase.finished_at = utc_now()
        phase.meta.update(meta or {})
        if isinstance(error, str):
            phase.error = PhaseError(message=error)
        else:
            stack = "".join(traceback.format_exception(type(error), error, error.__traceback__))
            phase.error = PhaseError(
                message=str(error) or type(error).__name__,
                stack=stack,
                name=type(error).__name__,
            )
        logger.warning("Phase %s failed: %s", phase_id, phase.error.message)

    def log(self, phase_id: str, message: str) -> None:
        phase = self._find(phase_id)
        if phase is None:
            return
        phase.logs.append(PhaseLog(at=utc_now(), message=message))

    def get_phases(self) -> list[TaskPhase]:
        return [phase.model_copy(deep=True) for phase in self._phases]

    def _find(self, phase_id: str) -> TaskPhase | None:
        return next((phase for phase in self._phases if phase.id == phase_id), None)
