"""Child-process helpers for running planned commands."""

from __future__ import annotations

import errno
import os
import subprocess
from dataclasses import dataclass
from typing import Mapping, Protocol, Sequence

EXIT_PERMISSION_DENIED = 126
EXIT_COMMAND_NOT_FOUND = 127
KILL_GRACE_SECONDS = 5.0


@dataclass(frozen=True)
class ProcessResult:
    exit_code: int | None
    stdout: str
    stderr: str
    timed_out: bool = False

    @property
    def failed(self) -> bool:
        return self.timed_out or self.exit_code != 0


class ProcessRunner(Protocol):
    def __call__(
        self,
        command: str,
        arguments: Sequence[str],
        cwd: str,
        timeout_seconds: float,
        env: Mapping[str, str] | None = None,
    ) -> ProcessResult: ...


def run_process(
    command: str,
    arguments: Sequence[str],
    cwd: str,
    timeout_seconds: float,
    env: Mapping[str, str] | None = None,
) -> ProcessResult:
    """Run ``command`` with an argument vector, never through a shell.

    The child is killed once ``timeout_seconds`` elapse; whatever it wrote
    until then is kept. Spawn failures come back as a result with a shell-style
    exit code and the OS error on stderr.
    """
    try:
        process = subprocess.Popen(
            [command, *arguments],
            cwd=cwd,
            env=dict(env) if env is not None else None,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            encoding="utf-8",
            errors="replace",
            shell=False,
        )
    except OSError as exc:
        return ProcessResult(exit_code=_spawn_exit_code(exc), stdout="", stderr=f"{exc}\n")

    timed_out = False
    try:
        stdout, stderr = process.communicate(timeout=timeout_seconds)
    except subprocess.TimeoutExpired:
        timed_out = True
        process.kill()
        stdout, stderr = _drain_after_kill(process)
    return ProcessResult(
        exit_code=None if timed_out else process.returncode,
        stdout=stdout or "",
        stderr=stderr or "",
        timed_out=timed_out,
    )


def _drain_after_kill(process: subprocess.Popen) -> tuple[str, str]:
    try:
        return process.communicate(timeout=KILL_GRACE_SECONDS)
    except subprocess.TimeoutExpired as exc:
        # a grandchild still holds the pipes open
        for pipe in (process.stdout, process.stderr):
            if pipe is not None:
                pipe.close()
        process.wait()
        return _as_text(exc.stdout), _as_text(exc.stderr)


def _as_text(chunk: bytes | str | None) -> str:
    if chunk is None:
        return ""
    if isinstance(chunk, bytes):
        return chunk.decode("utf-8", errors="replace")
    return chunk


def _spawn_exit_code(exc: OSError) -> int:
    if isinstance(exc, FileNotFoundError) or exc.errno == errno.ENOENT:
        return EXIT_COMMAND_NOT_FOUND
    if isinstance(exc, PermissionError) or exc.errno == errno.EACCES:
        return EXIT_PERMISSION_DENIED
    return 1


def child_environment(scrub_secrets: bool = True) -> dict[str, str]:
    """Environment inherited by planned commands."""
    env = os.environ.copy()
    if not scrub_secrets:
        return env
    return {key: value for key, value in env.items() if not _is_sensitive_key(key)}


def _is_sensitive_key(key: str) -> bool:
    upper = key.upper()
    return upper.startswith(("OPENAI_", "API_KEY", "TOKEN", "SECRET"))
