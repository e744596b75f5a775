"""Validated command plan models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from mediaagent.tools.registry import NO_OP_COMMAND


class PlanModel(BaseModel):
    """Frozen model serialised with camelCase keys."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class CommandOutputPlan(PlanModel):
    path: str
    description: str = ""


class CommandStepPlan(PlanModel):
    command: str
    arguments: tuple[str, ...] = ()
    reasoning: str = ""
    outputs: tuple[CommandOutputPlan, ...] = ()
    id: str | None = None
    title: str | None = None
    note: str | None = None

    @property
    def is_no_op(self) -> bool:
        return self.command == NO_OP_COMMAND


class CommandPlan(PlanModel):
    steps: tuple[CommandStepPlan, ...] = Field(min_length=1)
    overview: str = ""
    follow_up: str = ""

    def all_outputs(self) -> list[CommandOutputPlan]:
        return [output for step in self.steps for output in step.outputs]
