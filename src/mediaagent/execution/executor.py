"""Ordered, fail-fast execution of validated command plans."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Sequence

from mediaagent.execution.process import ProcessRunner, child_environment, run_process
from mediaagent.execution.results import (
    CommandExecutionResult,
    CommandStepResult,
    DescribedOutput,
    SkipReason,
)
from mediaagent.plans import CommandOutputPlan, CommandPlan, CommandStepPlan
from mediaagent.util.logging import get_logger

logger = get_logger(__name__)

DEFAULT_TIMEOUT_SECONDS = 5 * 60


class CommandExecutor:
    """Runs plan steps one after another as child processes.

    A failed or timed-out step stops any further spawning; the remaining
    steps are still reported, as skipped. Declared outputs of every step are
    stat-ed once all steps are settled.
    """

    def __init__(
        self,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        runner: ProcessRunner = run_process,
        scrub_secrets: bool = True,
    ) -> None:
        self.timeout_seconds = timeout_seconds
        self.runner = runner
        self.scrub_secrets = scrub_secrets

    def execute(
        self,
        plan: CommandPlan,
        *,
        cwd: str | None = None,
        timeout_seconds: float | None = None,
        public_root: str | None = None,
        dry_run: bool = False,
    ) -> CommandExecutionResult:
        if not isinstance(plan, CommandPlan):
            raise TypeError("execute() requires a CommandPlan produced by PlanValidator")
        workdir = cwd or os.getcwd()
        timeout = timeout_seconds if timeout_seconds is not None else self.timeout_seconds
        public = Path(public_root).resolve() if public_root else None

        self.ensure_output_directories(plan.all_outputs())

        env = child_environment(self.scrub_secrets)
        results: list[CommandStepResult] = []
        failed = False
        for index, step in enumerate(plan.steps):
            if failed:
                results.append(self._skipped(step, "previous_step_failed"))
            elif dry_run:
                results.append(self._skipped(step, "dry_run"))
            elif step.is_no_op:
                results.append(self._skipped(step, "no_op_command"))
            else:
                result = self._run_step(index, step, workdir, timeout, env)
                results.append(result)
                failed = result.failed

        executed = [result for result in results if result.status == "executed"]
        return CommandExecutionResult(
            exit_code=_aggregate_exit_code(executed),
            timed_out=any(result.timed_out for result in executed),
            stdout=_join_streams(results, "stdout"),
            stderr=_join_streams(results, "stderr"),
            resolved_outputs=tuple(self.describe_outputs(plan.all_outputs(), public)),
            dry_run=dry_run or all(step.is_no_op for step in plan.steps),
            steps=tuple(results),
        )

    def _run_step(
        self,
        index: int,
        step: CommandStepPlan,
        cwd: str,
        timeout: float,
        env: dict[str, str],
    ) -> CommandStepResult:
        logger.info("Running step %s: %s (%s args)", index + 1, step.command, len(step.arguments))
        outcome = self.runner(step.command, step.arguments, cwd, timeout, env=env)
        if outcome.timed_out:
            logger.warning("Step %s (%s) timed out after %ss", index + 1, step.command, timeout)
        elif outcome.exit_code != 0:
            logger.warning(
                "Step %s (%s) exited with code %s", index + 1, step.command, outcome.exit_code
            )
        return CommandStepResult(
            status="executed",
            command=step.command,
            arguments=step.arguments,
            reasoning=step.reasoning,
            exit_code=outcome.exit_code,
            timed_out=outcome.timed_out,
            stdout=outcome.stdout,
            stderr=outcome.stderr,
        )

    @staticmethod
    def _skipped(step: CommandStepPlan, reason: SkipReason) -> CommandStepResult:
        return CommandStepResult(
            status="skipped",
            command=step.command,
            arguments=step.arguments,
            reasoning=step.reasoning,
            skip_reason=reason,
        )

    @staticmethod
    def ensure_output_directories(outputs: Sequence[CommandOutputPlan]) -> None:
        for directory in sorted({Path(item.path).resolve().parent for item in outputs}):
            directory.mkdir(parents=True, exist_ok=True)

    @staticmethod
    def describe_outputs(
        outputs: Sequence[CommandOutputPlan], public_root: Path | None
    ) -> list[DescribedOutput]:
        described = []
        for item in outputs:
            absolute = Path(item.path).resolve()
            exists = absolute.exists()
            size = absolute.stat().st_size if exists else None
            public_path = None
            if public_root is not None:
                try:
                    public_path = absolute.relative_to(public_root).as_posix()
                except ValueError:
                    public_path = None
            described.append(
                DescribedOutput(
                    path=item.path,
                    description=item.description,
                    absolute_path=str(absolute),
                    exists=exists,
                    size=size,
                    public_path=public_path,
                )
            )
        return described


def _aggregate_exit_code(executed: list[CommandStepResult]) -> int | None:
    if not executed:
        return None
    for result in executed:
        if result.failed:
            return result.exit_code
    return 0


def _join_streams(results: list[CommandStepResult], stream: str) -> str:
    blocks = []
    for number, result in enumerate(results, start=1):
        text = getattr(result, stream)
        if result.status == "executed" and text:
            blocks.append(f"[step {number}]\n{text.rstrip()}")
    return "\n".join(blocks)
