"""Spawn planned invocations and capture their output unmodified."""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from typing import TYPE_CHECKING

from nativeargs.core.instrumentation import increment_counter, timed_operation
from nativeargs.core.planner import build_plan

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence
    from pathlib import Path

    from nativeargs.core.config import EngineSettings
    from nativeargs.core.planner import InvocationPlan


@dataclass(frozen=True)
class ProcessResult:
    """Captured result of a subprocess execution."""

    returncode: int
    stdout: bytes
    stderr: bytes

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    def stdout_text(self) -> str:
        """Decode stdout as UTF-8 with replacement."""
        return self.stdout.decode("utf-8", errors="replace")

    def stderr_text(self) -> str:
        """Decode stderr as UTF-8 with replacement."""
        return self.stderr.decode("utf-8", errors="replace")


@dataclass(frozen=True)
class ProcessExecutionError(RuntimeError):
    """Structured process failure with machine-readable code and command context."""

    code: str
    command: str
    returncode: int | None = None
    timed_out: bool = False
    stdout: str | None = None
    stderr: str | None = None
    detail: str | None = None

    def __str__(self) -> str:
        parts = [f"[{self.code}] {self.command}"]
        if self.returncode is not None:
            parts.append(f"(rc={self.returncode})")
        if self.timed_out:
            parts.append("(timed out)")

        message = " ".join(parts)
        detail = self.detail or self.stderr or self.stdout
        if detail:
            return f"{message}: {detail}"
        return message


def _normalize_cwd(cwd: str | Path | None) -> str | None:
    if cwd is None:
        return None
    return str(cwd)


def _normalize_env(env: Mapping[str, str] | None) -> dict[str, str] | None:
    if env is None:
        return None
    return dict(env)


def _fields(plan: InvocationPlan) -> dict[str, object]:
    return {"profile": str(plan.profile), "command": plan.program}


def run_plan_capture(
    plan: InvocationPlan,
    *,
    cwd: str | Path | None = None,
    env: Mapping[str, str] | None = None,
    input: bytes | None = None,
    timeout: float | None = None,
) -> ProcessResult:
    """Spawn *plan* and capture stdout/stderr.

    A nonzero exit status is returned as data. Timeouts and spawn failures
    propagate as ``subprocess.TimeoutExpired`` and ``OSError``.
    """
    if plan.pipe_input and input is None:
        raise ValueError(f"{plan.program} expects its input on stdin")

    fields = _fields(plan)
    increment_counter("core.process.calls", fields=fields)
    with timed_operation("core.process.duration_ms", fields=fields):
        try:
            completed = subprocess.run(
                plan.spawn_args(),
                cwd=_normalize_cwd(cwd),
                env=_normalize_env(env),
                input=input,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                timeout=timeout,
                check=False,
            )
        except subprocess.TimeoutExpired:
            increment_counter("core.process.timeouts", fields=fields)
            raise

    result = ProcessResult(
        returncode=completed.returncode,
        stdout=completed.stdout or b"",
        stderr=completed.stderr or b"",
    )
    if result.returncode != 0:
        increment_counter(
            "core.process.nonzero_returncode",
            fields={**fields, "returncode": result.returncode},
        )
    return result


def _build_nonzero_error(*, command: str, result: ProcessResult) -> ProcessExecutionError:
    stderr_text = result.stderr_text().strip()
    stdout_text = result.stdout_text().strip()
    detail = stderr_text or stdout_text or "process exited with a non-zero status"
    return ProcessExecutionError(
        code="PROCESS_NONZERO_EXIT",
        command=command,
        returncode=result.returncode,
        stdout=stdout_text or None,
        stderr=stderr_text or None,
        detail=detail,
    )


def run_plan(
    plan: InvocationPlan,
    *,
    cwd: str | Path | None = None,
    env: Mapping[str, str] | None = None,
    input: bytes | None = None,
    timeout: float | None = None,
    check: bool = False,
) -> ProcessResult:
    """Spawn *plan*; with ``check=True`` every failure becomes ``ProcessExecutionError``."""
    if not check:
        return run_plan_capture(plan, cwd=cwd, env=env, input=input, timeout=timeout)

    command = plan.display()
    try:
        result = run_plan_capture(plan, cwd=cwd, env=env, input=input, timeout=timeout)
    except subprocess.TimeoutExpired as exc:
        raise ProcessExecutionError(
            code="PROCESS_TIMEOUT",
            command=command,
            timed_out=True,
            detail="process execution exceeded timeout",
        ) from exc
    except OSError as exc:
        raise ProcessExecutionError(
            code="PROCESS_OS_ERROR",
            command=command,
            detail=str(exc),
        ) from exc

    if result.returncode != 0:
        raise _build_nonzero_error(command=command, result=result)
    return result


def invoke(
    executable: str,
    args: Sequence[str | None] = (),
    *,
    settings: EngineSettings | None = None,
    cwd: str | Path | None = None,
    env: Mapping[str, str] | None = None,
    input: bytes | None = None,
    timeout: float | None = None,
    check: bool = False,
) -> ProcessResult:
    """Plan and run *executable* so it receives exactly *args*."""
    plan = build_plan(executable, args, settings=settings)
    return run_plan(plan, cwd=cwd, env=env, input=input, timeout=timeout, check=check)


__all__ = [
    "ProcessExecutionError",
    "ProcessResult",
    "invoke",
    "run_plan",
    "run_plan_capture",
]
