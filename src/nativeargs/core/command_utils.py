"""Helpers for locating executables and host programs across platforms."""

from __future__ import annotations

import os
import platform
import shutil
from pathlib import Path

from nativeargs.core.errors import ResolutionError

WIN_DEFAULT_PATHEXT = ".COM;.EXE;.BAT;.CMD;.VBS;.VBE;.JS;.JSE;.WSF;.WSH;.MSC"

# PATH doesn't change during a session, so caching avoids repeated filesystem scans.
_which_cache: dict[str, str | None] = {}


def cached_which(name: str) -> str | None:
    """Return the path for *name* using shutil.which(), with per-session caching."""
    if name not in _which_cache:
        _which_cache[name] = shutil.which(name)
    return _which_cache[name]


def clear_which_cache() -> None:
    """Clear the cached_which cache. Intended for testing."""
    _which_cache.clear()


def is_windows(system: str | None = None) -> bool:
    return (system or platform.system()) == "Windows"


def resolve_executable(executable: str, *, system: str | None = None) -> str:
    """Resolve *executable* to a concrete path using the OS search rules.

    Names containing a directory component must point at an existing file.
    Bare names are searched on ``PATH``, trying each ``PATHEXT`` extension on
    Windows so ``build`` finds ``build.cmd``.
    """
    if not executable:
        raise ResolutionError(executable)

    if Path(executable).name != executable:
        if Path(executable).is_file():
            return executable
        raise ResolutionError(executable)

    if is_windows(system) and not Path(executable).suffix:
        pathext = os.environ.get("PATHEXT", WIN_DEFAULT_PATHEXT)
        for ext in pathext.split(";"):
            if not ext:
                continue
            candidate = cached_which(executable + ext)
            if candidate:
                return candidate

    resolved = cached_which(executable)
    if resolved:
        return resolved
    raise ResolutionError(executable)


def get_comspec() -> str:
    """Return the host command processor (``cmd.exe``)."""
    return os.environ.get("ComSpec") or os.environ.get("COMSPEC") or "cmd.exe"


def get_wsh_host() -> str:
    """Return the console-mode Windows Script Host."""
    system_root = os.environ.get("SystemRoot") or os.environ.get("SYSTEMROOT")
    if system_root:
        candidate = Path(system_root) / "System32" / "cscript.exe"
        if candidate.is_file():
            return str(candidate)
    return "cscript.exe"


__all__ = [
    "cached_which",
    "clear_which_cache",
    "get_comspec",
    "get_wsh_host",
    "is_windows",
    "resolve_executable",
]
