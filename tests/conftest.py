"""Pytest fixtures for nativeargs tests."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING

import pytest
from hypothesis import Phase, Verbosity, settings

from nativeargs.core import convention
from nativeargs.core.command_utils import clear_which_cache
from nativeargs.core.convention import HostCapabilities
from nativeargs.core.profiles import EscapeConvention

_TEST_BASE_DIR = Path(tempfile.mkdtemp(prefix="nativeargs-tests-"))
os.environ["NATIVEARGS_CONFIG_DIR"] = str(_TEST_BASE_DIR / "config")
os.environ["NATIVEARGS_SCRATCH_DIR"] = str(_TEST_BASE_DIR / "scratch")
for _name in ("NATIVEARGS_ENABLED", "NATIVEARGS_STRICT", "NATIVEARGS_NATIVE_SHELL"):
    os.environ.pop(_name, None)

if TYPE_CHECKING:
    from collections.abc import Generator


settings.register_profile(
    "ci",
    max_examples=200,
    deadline=None,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
)
settings.register_profile(
    "dev",
    max_examples=50,
    deadline=500,
)
settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
    deadline=None,
)
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "dev"))

WINDOWS_CAPABILITIES = HostCapabilities(
    system="Windows",
    default_convention=EscapeConvention.BACKSLASH_QUOTE,
    backslash_quote_ok=True,
    native_transport_ok=True,
    probed=True,
)


@pytest.fixture(autouse=True)
def _mock_platform_system(monkeypatch: pytest.MonkeyPatch, request: pytest.FixtureRequest) -> None:
    """Handle @pytest.mark.mock_platform_system("Windows") marker."""
    marker = request.node.get_closest_marker("mock_platform_system")
    if marker:
        target_platform = marker.args[0]
        monkeypatch.setattr("platform.system", lambda: target_platform)


@pytest.fixture(autouse=True)
def _isolated_caches(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Seed the host probe so Windows plans never spawn a probe child."""
    monkeypatch.setattr(convention, "_capabilities", WINDOWS_CAPABILITIES)
    clear_which_cache()
    yield
    clear_which_cache()


@pytest.fixture
def scratch_dir() -> Path:
    path = Path(os.environ["NATIVEARGS_SCRATCH_DIR"]).resolve()
    path.mkdir(parents=True, exist_ok=True)
    return path
