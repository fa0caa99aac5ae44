"""Assemble the final process invocation for a target and its raw arguments.

Most profiles only need every argument encoded and joined. Two need
structural rewrites:

* ``cmd /c`` operands are merged into a single quoted command line, since a
  multi-token command line handed to ``/c`` is ambiguous.
* Batch files run through ``cmd.exe`` with an explicit success/failure
  continuation so the batch file's exit status reaches the caller even when
  it ends by falling through.
"""

from __future__ import annotations

import logging
import platform
import shlex
import subprocess
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

from nativeargs.core.classifier import classify
from nativeargs.core.command_utils import get_comspec, get_wsh_host, resolve_executable
from nativeargs.core.config import EngineSettings
from nativeargs.core.convention import (
    ConventionState,
    default_convention,
    observe,
    resolve_convention,
)
from nativeargs.core.encoder import check_representable, encode
from nativeargs.core.errors import (
    NativeArgsError,
    UnrepresentableArgument,
    UnsupportedCombination,
)
from nativeargs.core.profiles import (
    INTERPRETER_COMMAND_FLAGS,
    SHELL_COMMAND_FLAGS,
    EscapeConvention,
    QuotingProfile,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

logger = logging.getLogger(__name__)

BATCH_EXIT_CONTINUATION = "&& exit /b 0 || exit /b"


class PlanState(StrEnum):
    UNRESOLVED = "unresolved"
    PROFILE_CLASSIFIED = "profile_classified"
    CONVENTION_RESOLVED = "convention_resolved"
    CONVENTION_LOCKED = "convention_locked"
    ARGUMENTS_ENCODED = "arguments_encoded"
    PLAN_ASSEMBLED = "plan_assembled"
    REJECTED = "rejected"


@dataclass(frozen=True, slots=True)
class InvocationPlan:
    """Everything needed to spawn the target.

    ``command_line`` is the flat command line handed to the OS on Windows and
    None on POSIX, where ``program`` plus ``arguments`` form the argv.
    """

    target: str
    program: str
    arguments: tuple[str, ...]
    command_line: str | None
    profile: QuotingProfile
    convention: EscapeConvention
    convention_locked: bool = False
    pipe_input: bool = False
    warnings: tuple[str, ...] = ()
    states: tuple[PlanState, ...] = field(default=(), compare=False)

    def spawn_args(self) -> str | list[str]:
        """Return what ``subprocess`` should receive as *args*."""
        if self.command_line is not None:
            return self.command_line
        return [self.program, *self.arguments]

    def display(self) -> str:
        if self.command_line is not None:
            return self.command_line
        return shlex.join([self.program, *self.arguments])


def quote_program(path: str) -> str:
    """Quote a program path for the head of a Windows command line.

    The program name is parsed by ``CreateProcess`` rather than the target's
    runtime: quotes delimit it and nothing inside them can be escaped.
    """
    if not path or any(ch.isspace() for ch in path):
        return f'"{path}"'
    return path


class InvocationPlanner:
    """Drive one invocation from raw inputs to an assembled plan."""

    def __init__(
        self,
        settings: EngineSettings | None = None,
        *,
        system: str | None = None,
    ) -> None:
        self.settings = settings or EngineSettings()
        self.system = system or platform.system()

    @property
    def windows(self) -> bool:
        return self.system == "Windows"

    def build(
        self,
        executable: str,
        args: Sequence[str | None] = (),
        *,
        resolve: bool = True,
        pipe_input: bool = False,
    ) -> InvocationPlan:
        states = [PlanState.UNRESOLVED]
        try:
            return self._assemble(executable, args, states, resolve=resolve, pipe_input=pipe_input)
        except NativeArgsError as exc:
            states.append(PlanState.REJECTED)
            exc.plan_states = tuple(states)
            logger.debug("Rejected %s: %s", executable, exc)
            raise

    def _assemble(
        self,
        executable: str,
        args: Sequence[str | None],
        states: list[PlanState],
        *,
        resolve: bool,
        pipe_input: bool,
    ) -> InvocationPlan:
        target = resolve_executable(executable, system=self.system) if resolve else executable
        profile = classify(target, settings=self.settings)
        states.append(PlanState.PROFILE_CLASSIFIED)
        raw_args = [arg for arg in args if arg is not None]
        logger.debug("Planning %s as %s with %d argument(s)", target, profile, len(raw_args))

        if not self.windows:
            if profile in (QuotingProfile.BATCH_FILE, QuotingProfile.WSH_SCRIPT):
                raise UnsupportedCombination(
                    f"{profile} targets require Windows, current platform is {self.system}"
                )
            states.extend(
                (
                    PlanState.CONVENTION_RESOLVED,
                    PlanState.ARGUMENTS_ENCODED,
                    PlanState.PLAN_ASSEMBLED,
                )
            )
            return InvocationPlan(
                target=target,
                program=target,
                arguments=tuple(raw_args),
                command_line=None,
                profile=profile,
                convention=EscapeConvention.BACKSLASH_QUOTE,
                pipe_input=pipe_input,
                states=tuple(states),
            )

        if not self.settings.enabled:
            states.append(PlanState.PLAN_ASSEMBLED)
            return InvocationPlan(
                target=target,
                program=target,
                arguments=tuple(raw_args),
                command_line=subprocess.list2cmdline([target, *raw_args]),
                profile=profile,
                convention=EscapeConvention.BACKSLASH_QUOTE,
                pipe_input=pipe_input,
                states=tuple(states),
            )

        state: ConventionState = resolve_convention(
            profile,
            default_convention(self.system),
            override=self.settings.override_for(target),
        )
        states.append(PlanState.CONVENTION_RESOLVED)
        for raw in raw_args:
            state = observe(state, raw, profile)
        if state.locked:
            states.append(PlanState.CONVENTION_LOCKED)

        warnings = tuple(self._check_arguments(raw_args, profile))
        convention = state.convention

        if profile is QuotingProfile.BATCH_FILE:
            program, arguments = self._batch_file(target, raw_args)
        elif profile is QuotingProfile.DIRECT_SHELL:
            program, arguments = target, self._direct_shell(raw_args)
        elif profile is QuotingProfile.WSH_SCRIPT:
            program = get_wsh_host()
            arguments = ("//nologo", quote_program(target), *self._encode_all(raw_args, profile))
        else:
            program = target
            arguments = tuple(self._encode_all(raw_args, profile, convention))
        states.append(PlanState.ARGUMENTS_ENCODED)

        command_line = " ".join([quote_program(program), *arguments])
        states.append(PlanState.PLAN_ASSEMBLED)
        return InvocationPlan(
            target=target,
            program=program,
            arguments=tuple(arguments),
            command_line=command_line,
            profile=profile,
            convention=convention,
            convention_locked=state.locked,
            pipe_input=pipe_input,
            warnings=warnings,
            states=tuple(states),
        )

    def _check_arguments(self, raw_args: Iterable[str], profile: QuotingProfile) -> list[str]:
        warnings: list[str] = []
        for raw in raw_args:
            reason = check_representable(raw, profile)
            if reason is None:
                continue
            error = UnrepresentableArgument(raw, profile, reason)
            if self.settings.strict_encoding:
                raise error
            logger.warning("%s", error)
            warnings.append(str(error))
        return warnings

    def _encode_all(
        self,
        raw_args: Sequence[str],
        profile: QuotingProfile,
        convention: EscapeConvention = EscapeConvention.DOUBLED_QUOTE,
    ) -> list[str]:
        encoded: list[str] = []
        for index, raw in enumerate(raw_args):
            operand = (
                profile is QuotingProfile.BACKSLASH_ONLY_INTERPRETER
                and index > 0
                and raw_args[index - 1].lower() in INTERPRETER_COMMAND_FLAGS
            )
            encoded.append(
                encode(
                    raw,
                    profile,
                    convention,
                    command_operand=operand,
                    boundary_padding=self.settings.boundary_padding,
                )
            )
        return encoded

    def _direct_shell(self, raw_args: Sequence[str]) -> tuple[str, ...]:
        flag_index = next(
            (i for i, arg in enumerate(raw_args) if arg.lower() in SHELL_COMMAND_FLAGS),
            None,
        )
        if flag_index is None:
            return tuple(self._encode_all(raw_args, QuotingProfile.DIRECT_SHELL))

        leading = self._encode_all(raw_args[:flag_index], QuotingProfile.DIRECT_SHELL)
        flag = raw_args[flag_index]
        operands = raw_args[flag_index + 1 :]
        if len(operands) == 1:
            merged = operands[0]
        else:
            merged = " ".join(self._encode_all(operands, QuotingProfile.DIRECT_SHELL))
        if "/s" not in (arg.lower() for arg in leading):
            leading.append("/s")
        # With /s, cmd.exe strips exactly the outermost pair of quotes.
        return (*leading, flag, f'"{merged}"')

    def _batch_file(self, target: str, raw_args: Sequence[str]) -> tuple[str, tuple[str, ...]]:
        tokens = self._encode_all(raw_args, QuotingProfile.BATCH_FILE)
        inner = " ".join([f'"{target}"', *tokens, BATCH_EXIT_CONTINUATION])
        return get_comspec(), ("/d", "/s", "/c", f'"{inner}"')


def build_plan(
    executable: str,
    args: Sequence[str | None] = (),
    *,
    settings: EngineSettings | None = None,
    system: str | None = None,
    resolve: bool = True,
    pipe_input: bool = False,
) -> InvocationPlan:
    """Resolve, classify, encode, and assemble one invocation."""
    planner = InvocationPlanner(settings, system=system)
    return planner.build(executable, args, resolve=resolve, pipe_input=pipe_input)


__all__ = [
    "BATCH_EXIT_CONTINUATION",
    "InvocationPlan",
    "InvocationPlanner",
    "PlanState",
    "build_plan",
    "quote_program",
]
