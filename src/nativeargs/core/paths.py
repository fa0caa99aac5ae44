"""Platform-appropriate locations for nativeargs files."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

from platformdirs import user_config_dir


def get_config_dir() -> Path:
    """Get the config directory (config.toml)."""
    override = os.environ.get("NATIVEARGS_CONFIG_DIR")
    if override:
        return Path(override).resolve()
    return Path(user_config_dir("nativeargs"))


def get_config_path() -> Path:
    return get_config_dir() / "config.toml"


def get_scratch_dir() -> Path:
    """Directory for short-lived intermediate scripts."""
    override = os.environ.get("NATIVEARGS_SCRATCH_DIR")
    if override:
        return Path(override).resolve()
    return Path(tempfile.gettempdir())
