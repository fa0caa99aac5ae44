"""Escape-convention resolution.

The platform default is established once per process by probing how a
trivial diagnostic program actually receives a problematic argument, rather
than trusting version numbers. Per invocation, the default is refined by the
target's profile into a ``Provisional`` or ``Locked`` state; a provisional
state can be locked by later evidence but a locked one never reverts.
"""

from __future__ import annotations

import logging
import platform
import subprocess
import sys
import threading
from dataclasses import dataclass
from typing import ClassVar

from nativeargs.core.instrumentation import increment_counter
from nativeargs.core.profiles import MSI_TOKEN_RE, EscapeConvention, QuotingProfile

logger = logging.getLogger(__name__)

PROBE_TIMEOUT_SECONDS = 15.0
PROBE_ARGUMENTS: tuple[str, ...] = ("", 'a"b c', "c:\\temp 1\\", "last")


@dataclass(frozen=True, slots=True)
class Provisional:
    """Convention decided from defaults; later evidence may still lock it."""

    convention: EscapeConvention
    locked: ClassVar[bool] = False

    def lock(self, convention: EscapeConvention | None = None) -> Locked:
        return Locked(convention or self.convention)


@dataclass(frozen=True, slots=True)
class Locked:
    """Convention fixed for the rest of the invocation."""

    convention: EscapeConvention
    locked: ClassVar[bool] = True

    def lock(self, convention: EscapeConvention | None = None) -> Locked:
        del convention
        return self


type ConventionState = Provisional | Locked


@dataclass(frozen=True, slots=True)
class HostCapabilities:
    """Result of the one-time argument-passing probe."""

    system: str
    default_convention: EscapeConvention
    backslash_quote_ok: bool
    native_transport_ok: bool
    probed: bool


def _echo_command() -> list[str]:
    return [sys.executable, "-m", "nativeargs.echo", "--raw"]


def _round_trips(command: str | list[str], expected: tuple[str, ...]) -> bool:
    from nativeargs.echo import parse_raw

    completed = subprocess.run(
        command,
        stdin=subprocess.DEVNULL,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        timeout=PROBE_TIMEOUT_SECONDS,
        check=False,
    )
    if completed.returncode != 0:
        logger.debug("Probe child exited with %s: %r", completed.returncode, completed.stderr)
        return False
    received = parse_raw(completed.stdout.decode("utf-8", errors="replace"))
    return received == list(expected)


def probe_host(system: str | None = None) -> HostCapabilities:
    """Probe how arguments reach a child process on this host.

    POSIX hosts pass an argument vector and need no probe.
    """
    system = system or platform.system()
    if system != "Windows":
        return HostCapabilities(
            system=system,
            default_convention=EscapeConvention.BACKSLASH_QUOTE,
            backslash_quote_ok=True,
            native_transport_ok=True,
            probed=False,
        )

    from nativeargs.core.encoder import encode

    echo = _echo_command()
    encoded = [
        encode(value, QuotingProfile.GENERIC, EscapeConvention.BACKSLASH_QUOTE)
        for value in PROBE_ARGUMENTS
    ]
    backslash_line = " ".join([subprocess.list2cmdline(echo), *encoded])
    try:
        backslash_ok = _round_trips(backslash_line, PROBE_ARGUMENTS)
        native_ok = _round_trips([*echo, *PROBE_ARGUMENTS], PROBE_ARGUMENTS)
    except (OSError, subprocess.SubprocessError) as exc:
        logger.warning("Argument-passing probe failed, assuming defaults: %s", exc)
        return HostCapabilities(
            system=system,
            default_convention=EscapeConvention.BACKSLASH_QUOTE,
            backslash_quote_ok=False,
            native_transport_ok=False,
            probed=False,
        )

    default = (
        EscapeConvention.BACKSLASH_QUOTE if backslash_ok else EscapeConvention.DOUBLED_QUOTE
    )
    logger.debug(
        "Probe result: backslash_quote_ok=%s native_transport_ok=%s default=%s",
        backslash_ok,
        native_ok,
        default,
    )
    return HostCapabilities(
        system=system,
        default_convention=default,
        backslash_quote_ok=backslash_ok,
        native_transport_ok=native_ok,
        probed=True,
    )


_probe_lock = threading.Lock()
_capabilities: HostCapabilities | None = None


def get_host_capabilities() -> HostCapabilities:
    """Return the cached probe result, probing on first use."""
    global _capabilities
    cached = _capabilities
    if cached is not None:
        return cached
    with _probe_lock:
        if _capabilities is None:
            _capabilities = probe_host()
        return _capabilities


def reset_host_capabilities() -> None:
    """Forget the cached probe result. Intended for testing."""
    global _capabilities
    with _probe_lock:
        _capabilities = None


def default_convention(system: str | None = None) -> EscapeConvention:
    """Return the process-wide default escape convention for *system*."""
    system = system or platform.system()
    if system != "Windows":
        return EscapeConvention.BACKSLASH_QUOTE
    return get_host_capabilities().default_convention


def resolve_convention(
    profile: QuotingProfile,
    default: EscapeConvention,
    *,
    override: EscapeConvention | None = None,
) -> ConventionState:
    """Refine the platform default for one invocation targeting *profile*."""
    if profile.uses_cmd:
        return Locked(EscapeConvention.DOUBLED_QUOTE)
    if profile is QuotingProfile.BACKSLASH_ONLY_INTERPRETER:
        return Locked(EscapeConvention.BACKSLASH_QUOTE)
    if profile is QuotingProfile.MSI_STYLE:
        return Provisional(override or EscapeConvention.DOUBLED_QUOTE)
    return Provisional(override or default)


def observe(state: ConventionState, raw: str, profile: QuotingProfile) -> ConventionState:
    """Lock doubled quotes once an MSI-style target receives an assignment token."""
    if state.locked or profile is not QuotingProfile.MSI_STYLE:
        return state
    if MSI_TOKEN_RE.match(raw) is None:
        return state
    logger.debug("Assignment token %r locks doubled-quote escaping", raw)
    increment_counter("core.encode.convention_locked", fields={"profile": str(profile)})
    return state.lock(EscapeConvention.DOUBLED_QUOTE)


__all__ = [
    "ConventionState",
    "HostCapabilities",
    "Locked",
    "Provisional",
    "default_convention",
    "get_host_capabilities",
    "observe",
    "probe_host",
    "reset_host_capabilities",
    "resolve_convention",
]
