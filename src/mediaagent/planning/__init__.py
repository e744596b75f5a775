"""Planning package."""

from mediaagent.planning.normalize import normalize_plan_structure
from mediaagent.planning.planner import LLMPlanner, Planner, PlannerResult
from mediaagent.planning.prompt import PromptBuilder, build_response_format
from mediaagent.planning.response import extract_response_text, parse_plan_text
from mediaagent.planning.validator import PlanValidationResult, PlanValidator

__all__ = [
    "LLMPlanner",
    "PlanValidationResult",
    "PlanValidator",
    "Planner",
    "PlannerResult",
    "PromptBuilder",
    "build_response_format",
    "extract_response_text",
    "normalize_plan_structure",
    "parse_plan_text",
]
