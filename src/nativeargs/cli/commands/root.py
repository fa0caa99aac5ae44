"""Root CLI command registration."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click
from pydantic import ValidationError

from nativeargs.core.config import NativeArgsConfig
from nativeargs.version import get_nativeargs_version

from .config import config
from .diagnostics import debug, probe
from .run import plan, run, shell

_LOG_FORMAT = "%(name)s: %(message)s"

_debug_handler: logging.Handler | None = None


def _configure_logging(debug_enabled: bool) -> None:
    """Attach a stderr handler for --debug. Warnings otherwise reach stderr via lastResort."""
    global _debug_handler
    package_logger = logging.getLogger("nativeargs")
    if _debug_handler is not None:
        package_logger.removeHandler(_debug_handler)
        _debug_handler = None
    if not debug_enabled:
        package_logger.setLevel(logging.NOTSET)
        return
    _debug_handler = logging.StreamHandler(sys.stderr)
    _debug_handler.setFormatter(logging.Formatter(_LOG_FORMAT))
    package_logger.addHandler(_debug_handler)
    package_logger.setLevel(logging.DEBUG)


@click.group()
@click.version_option(get_nativeargs_version(), prog_name="nativeargs")
@click.option("--debug", "debug_enabled", is_flag=True, help="Log engine decisions to stderr")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Config file to use instead of the per-user default",
)
@click.pass_context
def cli(ctx: click.Context, debug_enabled: bool, config_path: Path | None) -> None:
    """Pass argument lists to external programs exactly as given."""
    _configure_logging(debug_enabled)
    try:
        ctx.obj = NativeArgsConfig.load(config_path)
    except (ValidationError, ValueError, OSError) as exc:
        raise click.ClickException(f"Invalid configuration: {exc}") from exc


cli.add_command(run)
cli.add_command(plan)
cli.add_command(shell)
cli.add_command(debug)
cli.add_command(probe)
cli.add_command(config)
