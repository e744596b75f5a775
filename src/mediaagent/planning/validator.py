"""Structural and path-containment validation of planner output."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

from mediaagent.errors import (
    InvalidArgumentsError,
    InvalidOutputError,
    InvalidPlanError,
    InvalidStepError,
    PathEscapesOutputDirError,
    PlanValidationError,
    UnknownCommandError,
)
from mediaagent.plans import CommandOutputPlan, CommandPlan, CommandStepPlan
from mediaagent.tools.registry import ToolRegistry


@dataclass(frozen=True)
class PlanValidationResult:
    ok: bool
    plan: CommandPlan | None = None
    error: PlanValidationError | None = None


def is_within_directory(path: Path, directory: Path) -> bool:
    """True when ``path`` is ``directory`` or lies below it."""
    try:
        relative = os.path.relpath(path, directory)
    except ValueError:
        # different drives on Windows
        return False
    if os.path.isabs(relative):
        return False
    return relative != os.pardir and not relative.startswith(os.pardir + os.sep)


def _optional_text(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


class PlanValidator:
    """Gate between untrusted planner output and anything that touches disk.

    Builds a new :class:`CommandPlan` from a raw mapping. The raw payload is
    never modified. Every output path must resolve inside ``output_dir``.
    """

    def __init__(self, registry: ToolRegistry) -> None:
        self.registry = registry

    def validate(self, raw_plan: Any, output_dir: Any) -> CommandPlan:
        if not isinstance(raw_plan, Mapping):
            raise InvalidPlanError("Command plan is invalid.")
        if not isinstance(output_dir, str) or not output_dir.strip():
            raise InvalidPlanError("Output directory is not specified.")
        root = Path(output_dir).resolve()

        raw_steps = raw_plan.get("steps")
        if not isinstance(raw_steps, list) or not raw_steps:
            raise InvalidPlanError("Command steps are missing.")

        steps = [self._validate_step(raw_step, index, root) for index, raw_step in enumerate(raw_steps)]
        overview = raw_plan.get("overview")
        follow_up = raw_plan.get("followUp", raw_plan.get("follow_up"))
        return CommandPlan(
            steps=tuple(steps),
            overview=overview if isinstance(overview, str) else "",
            follow_up=follow_up if isinstance(follow_up, str) else "",
        )

    def check(self, raw_plan: Any, output_dir: Any) -> PlanValidationResult:
        """Non-raising variant of :meth:`validate`."""
        try:
            plan = self.validate(raw_plan, output_dir)
        except PlanValidationError as exc:
            return PlanValidationResult(ok=False, error=exc)
        return PlanValidationResult(ok=True, plan=plan)

    def _validate_step(self, raw_step: Any, index: int, root: Path) -> CommandStepPlan:
        if not isinstance(raw_step, Mapping):
            raise InvalidStepError(index)

        command = raw_step.get("command")
        if not isinstance(command, str) or not self.registry.has_command(command):
            raise UnknownCommandError(command, index)

        arguments = raw_step.get("arguments")
        if not isinstance(arguments, list) or not all(isinstance(arg, str) for arg in arguments):
            raise InvalidArgumentsError(index)

        reasoning = raw_step.get("reasoning")
        raw_outputs = raw_step.get("outputs")
        if not isinstance(raw_outputs, list):
            raw_outputs = []
        outputs = [
            self._validate_output(raw_output, index, output_index, root)
            for output_index, raw_output in enumerate(raw_outputs)
        ]
        return CommandStepPlan(
            command=command,
            arguments=tuple(arguments),
            reasoning=reasoning if isinstance(reasoning, str) else "",
            outputs=tuple(outputs),
            id=_optional_text(raw_step.get("id")),
            title=_optional_text(raw_step.get("title")),
            note=_optional_text(raw_step.get("note")),
        )

    def _validate_output(
        self, raw_output: Any, step_index: int, output_index: int, root: Path
    ) -> CommandOutputPlan:
        if not isinstance(raw_output, Mapping):
            raise InvalidOutputError(step_index, output_index)
        raw_path = raw_output.get("path")
        if not isinstance(raw_path, str) or not raw_path.strip():
            raise InvalidOutputError(step_index, output_index, "path is missing")

        # relative paths resolve against the process cwd, like the spawned command would
        absolute = Path(raw_path.strip()).resolve()
        if not is_within_directory(absolute, root):
            raise PathEscapesOutputDirError(raw_path, step_index, output_index)

        description = raw_output.get("description")
        return CommandOutputPlan(
            path=str(absolute),
            description=description if isinstance(description, str) else "",
        )


def validate_plan_payload(
    payload: Any, output_dir: str, registry: ToolRegistry | None = None
) -> CommandPlan:
    """Validate a raw plan payload against the default catalog."""
    return PlanValidator(registry or ToolRegistry.create_default()).validate(payload, output_dir)
