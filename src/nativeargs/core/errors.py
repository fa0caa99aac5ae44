"""Engine error taxonomy.

Structural failures (resolution, unsupported platform combinations) are raised
before any process is spawned. A child's nonzero exit status is not an engine
error; see ``ProcessExecutionError`` in :mod:`nativeargs.core.process` for the
opt-in checked mode.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from nativeargs.core.planner import PlanState
    from nativeargs.core.profiles import QuotingProfile


class NativeArgsError(Exception):
    """Base exception for nativeargs operations.

    Errors raised while planning carry the planner states visited, ending in
    ``PlanState.REJECTED``, on ``plan_states``.
    """

    plan_states: tuple[PlanState, ...] = ()


class ResolutionError(NativeArgsError):
    """The named executable cannot be resolved to an external program."""

    def __init__(self, executable: str) -> None:
        super().__init__(f"Cannot resolve executable: {executable!r}")
        self.executable = executable


class UnsupportedCombination(NativeArgsError):
    """A profile-specific feature was requested on a platform that lacks it."""


class UnrepresentableArgument(NativeArgsError):
    """An argument cannot be encoded for the target without ambiguity."""

    def __init__(self, argument: str, profile: QuotingProfile, reason: str) -> None:
        super().__init__(f"Cannot pass {argument!r} to a {profile} target: {reason}")
        self.argument = argument
        self.profile = profile
        self.reason = reason


__all__ = [
    "NativeArgsError",
    "ResolutionError",
    "UnrepresentableArgument",
    "UnsupportedCombination",
]
