"""Task orchestration: plan, execute, summarize."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from mediaagent.errors import MediaAgentTaskError
from mediaagent.execution.executor import CommandExecutor
from mediaagent.execution.results import CommandExecutionResult
from mediaagent.planning.planner import Planner
from mediaagent.plans import CommandPlan
from mediaagent.tools.registry import ToolRegistry
from mediaagent.tracking import TaskPhase, TaskPhaseTracker
from mediaagent.util.logging import get_logger, preview

logger = get_logger(__name__)


class AgentFile(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    original_name: str
    absolute_path: str
    size: int
    mime_type: str | None = None


class AgentRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    task: str
    files: list[AgentFile] = []
    output_dir: str


@dataclass
class TaskResult:
    plan: CommandPlan
    raw_plan: Any
    result: CommandExecutionResult
    phases: list[TaskPhase] = field(default_factory=list)
    debug: dict[str, Any] | None = None


def describe_execution_failure(result: CommandExecutionResult) -> str | None:
    """Return why an execution result does not count as a successful task."""
    failed = result.first_failed_step()
    if failed is not None:
        index, step = failed
        if step.timed_out:
            return f"Step {index + 1} ({step.command}) timed out"
        return f"Step {index + 1} ({step.command}) exited with code {step.exit_code}"
    if result.timed_out:
        return "Command execution timed out"
    if result.exit_code not in (0, None):
        return f"Command execution exited with code {result.exit_code}"
    return None


class MediaAgent:
    """Runs one media task end to end and reports every phase."""

    def __init__(
        self,
        planner: Planner,
        executor: CommandExecutor,
        registry: ToolRegistry,
    ) -> None:
        self.planner = planner
        self.executor = executor
        self.registry = registry

    def run_task(
        self,
        request: AgentRequest,
        *,
        cwd: str | None = None,
        timeout_seconds: float | None = None,
        public_root: str | None = None,
        dry_run: bool = False,
        debug: bool = False,
        include_raw_response: bool = False,
    ) -> TaskResult:
        tracker = TaskPhaseTracker()
        logger.info("Task started: %s", preview(request.task))

        tracker.start("plan", {"task": request.task[:120]})
        try:
            planned = self.planner.plan(
                request, debug=debug, include_raw_response=include_raw_response
            )
        except Exception as exc:
            tracker.fail("plan", exc)
            raise MediaAgentTaskError(
                "Plan phase failed",
                tracker.get_phases(),
                context={
                    "raw_plan": getattr(exc, "raw_plan", None),
                    "debug": getattr(exc, "debug", None),
                    "response_text": getattr(exc, "response_text", None),
                },
            ) from exc
        plan = planned.plan
        raw_plan = planned.raw_plan if planned.raw_plan is not None else plan.to_payload()
        tracker.complete(
            "plan",
            {
                "steps": len(plan.steps),
                "commands": [step.command for step in plan.steps],
            },
        )

        tracker.start("execute", {"dryRun": dry_run})
        if dry_run:
            tracker.log("execute", "Dry-run mode enabled; skipping command execution.")
        context = {"plan": plan, "raw_plan": raw_plan, "debug": planned.debug}
        try:
            result = self.executor.execute(
                plan,
                cwd=cwd,
                timeout_seconds=timeout_seconds,
                public_root=public_root,
                dry_run=dry_run,
            )
        except Exception as exc:
            tracker.fail("execute", exc)
            raise MediaAgentTaskError(
                "Execution phase failed", tracker.get_phases(), context=context
            ) from exc

        for number, step in enumerate(result.steps, start=1):
            if step.status == "skipped":
                tracker.log("execute", f"Step {number} ({step.command}) skipped: {step.skip_reason}")
            else:
                tracker.log("execute", f"Step {number} ({step.command}) exit code {step.exit_code}")
        execution_meta = {
            "exitCode": result.exit_code,
            "timedOut": result.timed_out,
            "dryRun": result.dry_run,
        }
        failure = describe_execution_failure(result)
        if failure is not None:
            tracker.fail("execute", failure, execution_meta)
            raise MediaAgentTaskError(
                "Execution phase failed",
                tracker.get_phases(),
                context={**context, "result": result},
            ) from RuntimeError(failure)
        tracker.complete("execute", execution_meta)

        tracker.start("summarize")
        tracker.complete("summarize", {"outputs": len(result.resolved_outputs)})
        logger.info("Task finished with %s declared output(s)", len(result.resolved_outputs))
        return TaskResult(
            plan=plan,
            raw_plan=raw_plan,
            result=result,
            phases=tracker.get_phases(),
            debug=planned.debug,
        )
