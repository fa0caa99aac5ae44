"""Show or initialize the configuration file."""

from __future__ import annotations

from pathlib import Path

import click
import tomlkit

from nativeargs.core.config import NativeArgsConfig
from nativeargs.core.paths import get_config_path


@click.command()
@click.option("--init", is_flag=True, help="Write a default config file if none exists")
@click.option("--force", is_flag=True, help="With --init, overwrite an existing file")
@click.pass_context
def config(ctx: click.Context, init: bool, force: bool) -> None:
    """Show the effective engine configuration."""
    parent_path = ctx.parent.params.get("config_path") if ctx.parent else None
    path = Path(parent_path) if parent_path else get_config_path()

    if init:
        if path.exists() and not force:
            raise click.ClickException(f"{path} already exists (use --force to overwrite)")
        NativeArgsConfig().save(path)
        click.echo(f"Wrote {path}")
        return

    current: NativeArgsConfig = ctx.obj
    click.echo(f"# {path}{'' if path.exists() else ' (not found, showing defaults)'}")
    click.echo(tomlkit.dumps({"engine": current.engine.model_dump(mode="json")}), nl=False)
