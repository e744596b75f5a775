"""Error taxonomy for planning, validation and task runs."""

from __future__ import annotations

from typing import Any


class PlanValidationError(ValueError):
    """Raised when a planner-produced plan is malformed or unsafe."""

    code = "invalid_plan"


class InvalidPlanError(PlanValidationError):
    code = "invalid_plan"


class InvalidStepError(PlanValidationError):
    code = "invalid_step"

    def __init__(self, index: int) -> None:
        super().__init__(f"Command step ({index + 1}) is invalid.")
        self.index = index


class UnknownCommandError(PlanValidationError):
    code = "unknown_command"

    def __init__(self, command: Any, index: int) -> None:
        super().__init__(f"Unknown command in step ({index + 1}): {command}")
        self.command = command
        self.index = index


class InvalidArgumentsError(PlanValidationError):
    code = "invalid_arguments"

    def __init__(self, index: int) -> None:
        super().__init__(f"Step ({index + 1}) arguments must be an array of strings.")
        self.index = index


class InvalidOutputError(PlanValidationError):
    code = "invalid_output"

    def __init__(self, step_index: int, output_index: int, reason: str = "is invalid") -> None:
        super().__init__(f"Step ({step_index + 1}) outputs[{output_index}] {reason}.")
        self.step_index = step_index
        self.output_index = output_index


class PathEscapesOutputDirError(PlanValidationError):
    code = "path_escapes_output_dir"

    def __init__(self, path: str, step_index: int, output_index: int) -> None:
        super().__init__(f"Output path lies outside of the output directory: {path}")
        self.path = path
        self.step_index = step_index
        self.output_index = output_index


class ResponseParseError(ValueError):
    """Raised when model output cannot be turned into a plan payload."""


class PlanningError(RuntimeError):
    """Planner failure carrying whatever the model produced before it broke."""

    def __init__(
        self,
        message: str,
        raw_plan: Any = None,
        response_text: str | None = None,
        debug: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.raw_plan = raw_plan
        self.response_text = response_text
        self.debug = debug


class MediaAgentTaskError(RuntimeError):
    """Task failure with the phase history and diagnostic context of the run."""

    def __init__(
        self,
        message: str,
        phases: list[Any],
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.phases = phases
        self.context = context or {}

    @property
    def detail(self) -> str:
        cause = self.__cause__
        if cause is None:
            return str(self)
        return f"{self}: {cause}"
