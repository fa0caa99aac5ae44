"""Run a command line through the platform's native shell.

POSIX hosts use ``sh`` or ``bash`` (``native_shell`` setting) with the extra
arguments bound to ``$1``, ``$2``, ... Windows uses ``cmd.exe``, where extra
arguments are encoded and appended to the command line. With the
``script_file`` strategy the command line is written to a temporary script
that exists only for the duration of the call.
"""

from __future__ import annotations

import platform
import sys
from contextlib import contextmanager
from typing import TYPE_CHECKING

from nativeargs.core.command_utils import get_comspec, is_windows
from nativeargs.core.config import EngineSettings
from nativeargs.core.encoder import encode
from nativeargs.core.errors import UnsupportedCombination
from nativeargs.core.planner import build_plan
from nativeargs.core.process import run_plan
from nativeargs.core.profiles import EscapeConvention, QuotingProfile
from nativeargs.core.tempscript import temporary_script

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping, Sequence
    from pathlib import Path

    from nativeargs.core.planner import InvocationPlan
    from nativeargs.core.process import ProcessResult

# Value of $0 for `sh -c`, so $1 is the first caller argument.
SHELL_ARG0 = "nativeargs-shell"


def batch_script_encoding() -> str:
    return "oem" if sys.platform == "win32" else "utf-8"


def merge_cmd_command(command: str, args: Sequence[str]) -> str:
    """Append *args* to a ``cmd.exe`` command line, each encoded for ``cmd.exe``."""
    tokens = [
        encode(arg, QuotingProfile.DIRECT_SHELL, EscapeConvention.DOUBLED_QUOTE) for arg in args
    ]
    return " ".join([command, *tokens])


@contextmanager
def shell_invocation(
    command: str | None,
    args: Sequence[str] = (),
    *,
    settings: EngineSettings | None = None,
    system: str | None = None,
) -> Iterator[InvocationPlan]:
    """Yield the plan for running *command* in the native shell.

    ``command=None`` means the script arrives on stdin (POSIX only).
    """
    settings = settings or EngineSettings()
    system = system or platform.system()
    script_file = settings.script_strategy == "script_file"

    if is_windows(system):
        if command is None:
            raise UnsupportedCombination("cmd.exe cannot read a piped script; pass the command")
        if script_file:
            with temporary_script(
                f"@echo off\n{command}\n",
                suffix=".cmd",
                encoding=batch_script_encoding(),
                newline="\r\n",
            ) as path:
                yield build_plan(str(path), args, settings=settings, system=system, resolve=False)
            return
        yield build_plan(
            get_comspec(),
            ["/d", "/c", merge_cmd_command(command, args)],
            settings=settings,
            system=system,
            resolve=False,
        )
        return

    shell = settings.native_shell
    if command is None:
        yield build_plan(
            shell, ["-s", "--", *args], settings=settings, system=system, pipe_input=True
        )
        return
    if script_file:
        content = command if command.endswith("\n") else f"{command}\n"
        with temporary_script(content, suffix=".sh") as path:
            yield build_plan(shell, [str(path), *args], settings=settings, system=system)
        return
    yield build_plan(shell, ["-c", command, SHELL_ARG0, *args], settings=settings, system=system)


def run_shell(
    command: str | None,
    args: Sequence[str] = (),
    *,
    settings: EngineSettings | None = None,
    cwd: str | Path | None = None,
    env: Mapping[str, str] | None = None,
    input: bytes | None = None,
    timeout: float | None = None,
    check: bool = False,
) -> ProcessResult:
    with shell_invocation(command, args, settings=settings) as plan:
        return run_plan(plan, cwd=cwd, env=env, input=input, timeout=timeout, check=check)


__all__ = ["SHELL_ARG0", "merge_cmd_command", "run_shell", "shell_invocation"]
