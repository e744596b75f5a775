"""Execution result models."""

from __future__ import annotations

from typing import Literal

from mediaagent.plans import PlanModel

StepStatus = Literal["executed", "skipped"]
SkipReason = Literal["no_op_command", "dry_run", "previous_step_failed"]


class CommandStepResult(PlanModel):
    status: StepStatus
    command: str
    arguments: tuple[str, ...] = ()
    reasoning: str = ""
    exit_code: int | None = None
    timed_out: bool = False
    stdout: str = ""
    stderr: str = ""
    skip_reason: SkipReason | None = None

    @property
    def failed(self) -> bool:
        return self.status == "executed" and (self.timed_out or self.exit_code != 0)


class DescribedOutput(PlanModel):
    path: str
    description: str
    absolute_path: str
    exists: bool
    size: int | None = None
    public_path: str | None = None

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


class CommandExecutionResult(PlanModel):
    exit_code: int | None
    timed_out: bool
    stdout: str
    stderr: str
    resolved_outputs: tuple[DescribedOutput, ...] = ()
    dry_run: bool = False
    steps: tuple[CommandStepResult, ...] = ()

    def first_failed_step(self) -> tuple[int, CommandStepResult] | None:
        for index, step in enumerate(self.steps):
            if step.failed:
                return index, step
        return None

    def to_payload(self) -> dict:
        payload = self.model_dump(by_alias=True, mode="json")
        for step in payload["steps"]:
            if step.get("skipReason") is None:
                step.pop("skipReason", None)
        return payload
