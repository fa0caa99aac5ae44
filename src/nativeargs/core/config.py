"""Configuration loader for nativeargs."""

from __future__ import annotations

import os
import tempfile
import tomllib
from pathlib import Path
from typing import Literal

import tomlkit
from pydantic import BaseModel, Field, field_validator

from nativeargs.core.classifier import executable_names
from nativeargs.core.paths import get_config_path
from nativeargs.core.profiles import EscapeConvention

type NativeShellLiteral = Literal["sh", "bash"]
type ScriptStrategyLiteral = Literal["direct", "script_file"]

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off"})


def atomic_write(path: Path, content: str) -> None:
    """Write file atomically to avoid partial/corrupt writes."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(dir=path.parent, prefix=".tmp_")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(content)
        Path(tmp_path).replace(path)
    except Exception:
        Path(tmp_path).unlink(missing_ok=True)
        raise


def _normalize_name(value: str) -> str:
    names, _extension = executable_names(value.strip())
    return min(names, key=len)


class EngineSettings(BaseModel):
    """Switches consumed by the encoding engine and its collaborators."""

    enabled: bool = Field(
        default=True,
        description="Re-encode arguments; False passes them to the native transport untouched",
    )
    native_shell: NativeShellLiteral = Field(
        default="sh", description="POSIX shell used by the native-shell helper"
    )
    script_strategy: ScriptStrategyLiteral = Field(
        default="direct",
        description="Pass shell/diagnostic command lines directly or via a temporary script",
    )
    strict_encoding: bool = Field(
        default=False, description="Raise instead of warn on unrepresentable arguments"
    )
    boundary_padding: bool = Field(
        default=False,
        description="Pad interpreter command operands whose quotes follow a non-space",
    )
    msi_style: list[str] = Field(
        default_factory=list, description="Extra executables with msiexec-style parsing"
    )
    backslash_only: list[str] = Field(
        default_factory=list, description="Extra executables that reject doubled quotes"
    )
    convention_overrides: dict[str, EscapeConvention] = Field(
        default_factory=dict,
        description="Per-executable provisional escape convention",
    )

    @field_validator("msi_style", "backslash_only")
    @classmethod
    def normalize_names(cls, value: list[str]) -> list[str]:
        return [_normalize_name(item) for item in value if item.strip()]

    @field_validator("convention_overrides")
    @classmethod
    def normalize_override_keys(
        cls, value: dict[str, EscapeConvention]
    ) -> dict[str, EscapeConvention]:
        return {_normalize_name(key): convention for key, convention in value.items()}

    def override_for(self, executable: str) -> EscapeConvention | None:
        """Return the configured convention for *executable*, if any."""
        names, _extension = executable_names(executable)
        for name in names:
            if name in self.convention_overrides:
                return self.convention_overrides[name]
        return None


def _env_bool(name: str) -> bool | None:
    raw = os.environ.get(name)
    if raw is None:
        return None
    lowered = raw.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean, got {raw!r}")


class NativeArgsConfig(BaseModel):
    """Root configuration model."""

    engine: EngineSettings = Field(default_factory=EngineSettings)

    @classmethod
    def load(cls, config_path: Path | None = None) -> NativeArgsConfig:
        """Load configuration from TOML file or use defaults, then apply env overrides."""
        if config_path is None:
            config_path = get_config_path()

        data: dict[str, object] = {}
        if config_path.exists():
            with open(config_path, "rb") as f:
                data = tomllib.load(f)
        config = cls.model_validate(data)
        return config.with_env_overrides()

    def with_env_overrides(self) -> NativeArgsConfig:
        updates: dict[str, object] = {}
        enabled = _env_bool("NATIVEARGS_ENABLED")
        if enabled is not None:
            updates["enabled"] = enabled
        strict = _env_bool("NATIVEARGS_STRICT")
        if strict is not None:
            updates["strict_encoding"] = strict
        shell = os.environ.get("NATIVEARGS_NATIVE_SHELL")
        if shell:
            updates["native_shell"] = shell.strip()
        if not updates:
            return self
        engine = EngineSettings.model_validate({**self.engine.model_dump(), **updates})
        return self.model_copy(update={"engine": engine})

    def save(self, path: Path) -> None:
        """Serialize current config to TOML file.

        Args:
            path: Path to write config file (created if missing)
        """
        doc = tomlkit.document()
        engine_table = tomlkit.table()
        for key, value in self.engine.model_dump(mode="json").items():
            if value is not None:
                engine_table[key] = value
        doc["engine"] = engine_table
        atomic_write(path, tomlkit.dumps(doc))


__all__ = ["EngineSettings", "NativeArgsConfig", "atomic_write"]
