"""Chat-model backed planner producing validated command plans."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol

from mediaagent.errors import PlanningError, PlanValidationError, ResponseParseError
from mediaagent.models.base import BaseChatModel
from mediaagent.planning.normalize import normalize_plan_structure
from mediaagent.planning.prompt import PromptBuilder, build_response_format
from mediaagent.planning.response import extract_response_text, parse_plan_text
from mediaagent.planning.validator import PlanValidator
from mediaagent.plans import CommandPlan
from mediaagent.tools.registry import ToolRegistry
from mediaagent.util.logging import get_logger, preview

if TYPE_CHECKING:
    from mediaagent.agent import AgentRequest

logger = get_logger(__name__)


@dataclass(frozen=True)
class PlannerResult:
    plan: CommandPlan
    raw_plan: Any
    debug: dict[str, Any] | None = None


class Planner(Protocol):
    def plan(
        self,
        request: "AgentRequest",
        *,
        debug: bool = False,
        include_raw_response: bool = False,
    ) -> PlannerResult: ...


class LLMPlanner:
    """Asks a chat model for a plan and validates it before returning."""

    def __init__(
        self,
        model: BaseChatModel,
        registry: ToolRegistry,
        prompt_builder: PromptBuilder | None = None,
        validator: PlanValidator | None = None,
    ) -> None:
        self.model = model
        self.registry = registry
        self.prompt_builder = prompt_builder or PromptBuilder(registry)
        self.validator = validator or PlanValidator(registry)

    def plan(
        self,
        request: "AgentRequest",
        *,
        debug: bool = False,
        include_raw_response: bool = False,
    ) -> PlannerResult:
        developer_prompt = self.prompt_builder.build(request)
        messages = [
            {"role": "system", "content": developer_prompt},
            {"role": "user", "content": request.task},
        ]
        logger.info("Requesting plan from %s for task: %s", self.model.model, preview(request.task))
        response = self.model.chat(messages, response_format=build_response_format(self.registry))

        try:
            response_text = extract_response_text(response.raw) if response.raw else response.text
        except ResponseParseError:
            response_text = response.text
        debug_info: dict[str, Any] | None = None
        if debug:
            debug_info = {
                "model": self.model.model,
                "developerPrompt": developer_prompt,
                "responseText": response_text,
            }
            if include_raw_response:
                debug_info["rawResponse"] = response.raw

        try:
            parsed = parse_plan_text(response_text)
        except ResponseParseError as exc:
            raise PlanningError(
                f"Failed to parse model response as JSON: {exc}",
                response_text=response_text,
                debug=debug_info,
            ) from exc
        if debug_info is not None:
            debug_info["parsed"] = parsed

        try:
            plan = self.validator.validate(normalize_plan_structure(parsed), request.output_dir)
        except PlanValidationError as exc:
            raise PlanningError(
                str(exc), raw_plan=parsed, response_text=response_text, debug=debug_info
            ) from exc
        logger.info(
            "Plan accepted with %s step(s): %s",
            len(plan.steps),
            ", ".join(step.command for step in plan.steps),
        )
        return PlannerResult(plan=plan, raw_plan=parsed, debug=debug_info)
