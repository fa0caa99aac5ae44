"""Optional in-process counters and timings for spawns and encoding decisions.

Disabled unless ``NATIVEARGS_INSTRUMENTATION`` is truthy. With
``NATIVEARGS_INSTRUMENTATION_LOG`` also set, every sample is logged as a JSON
event so runs can be inspected without a metrics backend.
"""

from __future__ import annotations

import json
import logging
import os
import threading
import time
from collections import Counter
from contextlib import contextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Iterator

logger = logging.getLogger(__name__)

_TRUTHY = frozenset({"1", "true", "yes", "on"})


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in _TRUTHY


@dataclass(slots=True)
class _TimingStats:
    count: int = 0
    total_ms: float = 0.0
    min_ms: float = float("inf")
    max_ms: float = 0.0

    def add(self, duration_ms: float) -> None:
        self.count += 1
        self.total_ms += duration_ms
        self.min_ms = min(self.min_ms, duration_ms)
        self.max_ms = max(self.max_ms, duration_ms)

    def summary(self) -> dict[str, float | int]:
        if not self.count:
            return {"count": 0, "total_ms": 0.0, "avg_ms": 0.0, "min_ms": 0.0, "max_ms": 0.0}
        return {
            "count": self.count,
            "total_ms": self.total_ms,
            "avg_ms": self.total_ms / self.count,
            "min_ms": self.min_ms,
            "max_ms": self.max_ms,
        }


_lock = threading.Lock()
_enabled = _env_flag("NATIVEARGS_INSTRUMENTATION")
_log_events = _env_flag("NATIVEARGS_INSTRUMENTATION_LOG")
_counters: Counter[str] = Counter()
_timings: dict[str, _TimingStats] = {}


def configure(*, enabled: bool | None = None, log_events: bool | None = None) -> None:
    """Toggle collection and event logging at runtime."""
    global _enabled, _log_events
    if enabled is not None:
        _enabled = enabled
    if log_events is not None:
        _log_events = log_events


def reset() -> None:
    with _lock:
        _counters.clear()
        _timings.clear()


def snapshot() -> dict[str, Any]:
    """Return a copy of everything collected so far."""
    with _lock:
        return {
            "enabled": _enabled,
            "log_events": _log_events,
            "counters": dict(_counters),
            "timings": {name: stats.summary() for name, stats in _timings.items()},
        }


def _log_event(kind: str, name: str, value: float | int, fields: dict[str, Any] | None) -> None:
    if not _log_events:
        return
    event: dict[str, Any] = {"kind": kind, "name": name, "value": value}
    if fields:
        event["fields"] = fields
    logger.info("nativeargs.instrumentation %s", json.dumps(event, sort_keys=True, default=str))


def increment_counter(
    name: str,
    *,
    amount: int = 1,
    fields: dict[str, Any] | None = None,
) -> None:
    if not _enabled:
        return
    with _lock:
        _counters[name] += amount
    _log_event("counter", name, amount, fields)


@contextmanager
def timed_operation(name: str, *, fields: dict[str, Any] | None = None) -> Iterator[None]:
    """Record how long the block takes, in milliseconds."""
    if not _enabled:
        yield
        return
    started = time.perf_counter()
    try:
        yield
    finally:
        elapsed_ms = (time.perf_counter() - started) * 1000.0
        with _lock:
            _timings.setdefault(name, _TimingStats()).add(elapsed_ms)
        _log_event("timing", name, elapsed_ms, fields)


__all__ = ["configure", "increment_counter", "reset", "snapshot", "timed_operation"]
