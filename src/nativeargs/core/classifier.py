"""Map a resolved executable path to the quoting profile its parser follows."""

from __future__ import annotations

from pathlib import PureWindowsPath
from typing import TYPE_CHECKING

from nativeargs.core.profiles import (
    BACKSLASH_ONLY_NAMES,
    BATCH_EXTENSIONS,
    MSI_STYLE_NAMES,
    SHELL_NAMES,
    WSH_EXTENSIONS,
    QuotingProfile,
)

if TYPE_CHECKING:
    from collections.abc import Iterable
    from os import PathLike

    from nativeargs.core.config import EngineSettings


def executable_names(path: str | PathLike[str]) -> tuple[frozenset[str], str]:
    """Return the lower-cased candidate base names and extension of *path*.

    Both separators are accepted, so Windows paths classify the same way on any
    host. The candidate names are the full file name and its stem, which lets
    ``python3.12`` match ``python3.12`` while ``ruby.exe`` still matches ``ruby``.
    """
    pure = PureWindowsPath(str(path))
    name = pure.name.lower()
    return frozenset({name, pure.stem.lower()}), pure.suffix.lower()


def _matches(names: frozenset[str], allow_list: Iterable[str]) -> bool:
    return not names.isdisjoint(allow_list)


def classify(
    resolved_path: str | PathLike[str],
    *,
    settings: EngineSettings | None = None,
) -> QuotingProfile:
    """Classify *resolved_path* into exactly one quoting profile."""
    names, extension = executable_names(resolved_path)
    extra_msi: Iterable[str] = settings.msi_style if settings else ()
    extra_backslash: Iterable[str] = settings.backslash_only if settings else ()

    if extension in BATCH_EXTENSIONS:
        return QuotingProfile.BATCH_FILE
    if _matches(names, SHELL_NAMES):
        return QuotingProfile.DIRECT_SHELL
    if _matches(names, MSI_STYLE_NAMES) or _matches(names, extra_msi):
        return QuotingProfile.MSI_STYLE
    if extension in WSH_EXTENSIONS:
        return QuotingProfile.WSH_SCRIPT
    if _matches(names, BACKSLASH_ONLY_NAMES) or _matches(names, extra_backslash):
        return QuotingProfile.BACKSLASH_ONLY_INTERPRETER
    return QuotingProfile.GENERIC


__all__ = ["classify", "executable_names"]
