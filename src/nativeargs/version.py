"""Installed package version lookup."""

from __future__ import annotations

from functools import lru_cache
from importlib.metadata import PackageNotFoundError, version


@lru_cache(maxsize=1)
def get_nativeargs_version() -> str:
    """Return installed nativeargs version, or 'dev' when package metadata is unavailable."""
    try:
        return version("nativeargs")
    except PackageNotFoundError:
        return "dev"


__all__ = ["get_nativeargs_version"]
