from __future__ import annotations

import tomllib
from typing import TYPE_CHECKING

import pytest
from pydantic import ValidationError

from nativeargs.core.config import EngineSettings, NativeArgsConfig, atomic_write
from nativeargs.core.paths import get_config_path, get_scratch_dir
from nativeargs.core.profiles import EscapeConvention

if TYPE_CHECKING:
    from pathlib import Path

pytestmark = pytest.mark.unit


def test_missing_file_gives_defaults(tmp_path: Path) -> None:
    config = NativeArgsConfig.load(tmp_path / "absent.toml")

    assert config.engine == EngineSettings()
    assert config.engine.enabled is True
    assert config.engine.native_shell == "sh"
    assert config.engine.script_strategy == "direct"


def test_load_reads_engine_table(tmp_path: Path) -> None:
    path = tmp_path / "config.toml"
    path.write_text(
        "[engine]\n"
        "strict_encoding = true\n"
        'native_shell = "bash"\n'
        'msi_style = ["C:\\\\Tools\\\\Setup.EXE", "  "]\n'
        '[engine.convention_overrides]\n'
        '"Node.exe" = "backslash"\n',
        encoding="utf-8",
    )

    engine = NativeArgsConfig.load(path).engine

    assert engine.strict_encoding is True
    assert engine.native_shell == "bash"
    assert engine.msi_style == ["setup"]
    assert engine.convention_overrides == {"node": EscapeConvention.BACKSLASH_QUOTE}
    assert engine.override_for("/opt/bin/node") is EscapeConvention.BACKSLASH_QUOTE
    assert engine.override_for("ruby") is None


def test_invalid_values_are_rejected(tmp_path: Path) -> None:
    path = tmp_path / "config.toml"
    path.write_text('[engine]\nnative_shell = "fish"\n', encoding="utf-8")

    with pytest.raises(ValidationError):
        NativeArgsConfig.load(path)


def test_environment_overrides_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    path = tmp_path / "config.toml"
    path.write_text("[engine]\nenabled = true\nstrict_encoding = false\n", encoding="utf-8")
    monkeypatch.setenv("NATIVEARGS_ENABLED", "off")
    monkeypatch.setenv("NATIVEARGS_STRICT", "1")
    monkeypatch.setenv("NATIVEARGS_NATIVE_SHELL", "bash")

    engine = NativeArgsConfig.load(path).engine

    assert engine.enabled is False
    assert engine.strict_encoding is True
    assert engine.native_shell == "bash"


def test_malformed_boolean_environment_value(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("NATIVEARGS_STRICT", "sometimes")

    with pytest.raises(ValueError, match="NATIVEARGS_STRICT"):
        NativeArgsConfig.load(tmp_path / "absent.toml")


def test_save_round_trips_through_toml(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "config.toml"
    config = NativeArgsConfig(
        engine=EngineSettings(
            boundary_padding=True,
            backslash_only=["node"],
            convention_overrides={"tool": EscapeConvention.DOUBLED_QUOTE},
        )
    )

    config.save(path)

    data = tomllib.loads(path.read_text(encoding="utf-8"))
    assert data["engine"]["boundary_padding"] is True
    assert data["engine"]["convention_overrides"] == {"tool": "doubled"}
    assert NativeArgsConfig.load(path) == config


def test_atomic_write_replaces_content_without_leftovers(tmp_path: Path) -> None:
    path = tmp_path / "file.toml"
    atomic_write(path, "first")
    atomic_write(path, "second")

    assert path.read_text(encoding="utf-8") == "second"
    assert [p.name for p in tmp_path.iterdir()] == ["file.toml"]


def test_paths_follow_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("NATIVEARGS_CONFIG_DIR", str(tmp_path / "cfg"))
    monkeypatch.setenv("NATIVEARGS_SCRATCH_DIR", str(tmp_path / "scratch"))

    assert get_config_path() == (tmp_path / "cfg").resolve() / "config.toml"
    assert get_scratch_dir() == (tmp_path / "scratch").resolve()
