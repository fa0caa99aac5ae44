"""Verify argument round trips against the diagnostic echo program.

``direct`` invokes the echo program itself. On Windows the arguments can also
travel through a temporary batch-file wrapper (``batch``) or a Windows Script
Host script (``wsh``), which exercises those profiles' encoding rules.
"""

from __future__ import annotations

import platform
import sys
from contextlib import contextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

from nativeargs.core.command_utils import is_windows
from nativeargs.core.config import EngineSettings
from nativeargs.core.errors import UnsupportedCombination
from nativeargs.core.native_shell import batch_script_encoding
from nativeargs.core.planner import build_plan
from nativeargs.core.process import run_plan
from nativeargs.core.tempscript import temporary_script
from nativeargs.echo import RAW_FLAG, parse_raw

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence

    from nativeargs.core.planner import InvocationPlan
    from nativeargs.core.process import ProcessResult

type DiagnosticVia = Literal["direct", "batch", "wsh"]

ECHO_MODULE = "nativeargs.echo"

_WSH_DECORATED = """\
Set args = WScript.Arguments
WScript.Echo args.Count & " argument(s) received (enclosed in <...> for delineation):"
WScript.Echo ""
For Each arg In args
  WScript.Echo "  <" & arg & ">"
Next
"""

_WSH_RAW = """\
For Each arg In WScript.Arguments
  WScript.Echo arg
Next
"""


@dataclass(frozen=True, slots=True)
class DiagnosticReport:
    """What the echo program reported for one set of arguments."""

    plan: InvocationPlan
    result: ProcessResult
    raw: bool

    @property
    def output(self) -> str:
        return self.result.stdout_text().replace("\r\n", "\n")

    def received(self) -> list[str]:
        """Return the arguments the echo program saw (raw mode only)."""
        if not self.raw:
            raise ValueError("received() needs a raw-mode report")
        return parse_raw(self.output)

    def round_trips(self, expected: Sequence[str | None]) -> bool:
        return self.received() == [arg for arg in expected if arg is not None]


def _echo_prefix(raw: bool) -> list[str]:
    prefix = ["-m", ECHO_MODULE]
    if raw:
        prefix.append(RAW_FLAG)
    return prefix


def _batch_wrapper(raw: bool) -> str:
    python = sys.executable
    flags = " ".join(_echo_prefix(raw))
    return f'@echo off\n"{python}" {flags} %*\n'


@contextmanager
def diagnostic_invocation(
    args: Sequence[str | None],
    *,
    via: DiagnosticVia = "direct",
    raw: bool = False,
    settings: EngineSettings | None = None,
    system: str | None = None,
) -> Iterator[InvocationPlan]:
    """Yield the plan that sends *args* to the echo program *via* the given route."""
    settings = settings or EngineSettings()
    system = system or platform.system()
    if via != "direct" and not is_windows(system):
        raise UnsupportedCombination(f"--via {via} needs Windows, current platform is {system}")

    if via == "batch":
        with temporary_script(
            _batch_wrapper(raw),
            suffix=".cmd",
            encoding=batch_script_encoding(),
            newline="\r\n",
        ) as path:
            yield build_plan(str(path), args, settings=settings, system=system, resolve=False)
        return
    if via == "wsh":
        script = _WSH_RAW if raw else _WSH_DECORATED
        with temporary_script(script, suffix=".vbs", encoding="utf-16", newline="\r\n") as path:
            yield build_plan(str(path), args, settings=settings, system=system, resolve=False)
        return
    yield build_plan(
        sys.executable,
        [*_echo_prefix(raw), *args],
        settings=settings,
        system=system,
        resolve=False,
    )


def debug_arguments(
    args: Sequence[str | None],
    *,
    via: DiagnosticVia = "direct",
    raw: bool = False,
    settings: EngineSettings | None = None,
    timeout: float | None = None,
) -> DiagnosticReport:
    """Send *args* to the echo program and return what it reported."""
    with diagnostic_invocation(args, via=via, raw=raw, settings=settings) as plan:
        result = run_plan(plan, timeout=timeout)
    return DiagnosticReport(plan=plan, result=result, raw=raw)


def verify_round_trip(
    args: Sequence[str | None],
    *,
    via: DiagnosticVia = "direct",
    settings: EngineSettings | None = None,
) -> bool:
    """Return True when the echo program receives exactly *args* (absent values dropped)."""
    return debug_arguments(args, via=via, raw=True, settings=settings).round_trips(args)


__all__ = [
    "DiagnosticReport",
    "DiagnosticVia",
    "debug_arguments",
    "diagnostic_invocation",
    "verify_round_trip",
]
