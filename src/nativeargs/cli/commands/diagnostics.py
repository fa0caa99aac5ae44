"""Diagnostic commands: argument echo round trips and the host probe."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click
from rich.console import Console
from rich.table import Table

from nativeargs.core.convention import get_host_capabilities
from nativeargs.core.diagnostics import debug_arguments
from nativeargs.core.errors import NativeArgsError

if TYPE_CHECKING:
    from nativeargs.core.config import NativeArgsConfig
    from nativeargs.core.diagnostics import DiagnosticVia


@click.command(context_settings={"ignore_unknown_options": True, "allow_interspersed_args": False})
@click.option(
    "--via",
    type=click.Choice(["direct", "batch", "wsh"]),
    default="direct",
    show_default=True,
    help="Route to the echo program (batch and wsh need Windows)",
)
@click.option("--raw", is_flag=True, help="Print each received value on its own line")
@click.argument("args", nargs=-1, type=click.UNPROCESSED)
@click.pass_context
def debug(ctx: click.Context, via: DiagnosticVia, raw: bool, args: tuple[str, ...]) -> None:
    """Show exactly which arguments a program receives for ARGS."""
    config: NativeArgsConfig = ctx.obj
    try:
        report = debug_arguments(args, via=via, raw=raw, settings=config.engine)
    except NativeArgsError as exc:
        raise click.ClickException(str(exc)) from exc

    click.echo(report.output, nl=False)
    if report.result.stderr:
        click.echo(report.result.stderr_text(), err=True, nl=False)
    if raw and not report.round_trips(args):
        click.secho("Arguments did not round-trip intact.", fg="red", err=True)
        ctx.exit(1)
    ctx.exit(report.result.returncode)


@click.command()
def probe() -> None:
    """Show how this host passes arguments to child processes."""
    capabilities = get_host_capabilities()
    table = Table(show_header=False, box=None)
    table.add_column(style="cyan")
    table.add_column()
    table.add_row("platform", capabilities.system)
    table.add_row("probed", "yes" if capabilities.probed else "no (argv platform)")
    table.add_row("default convention", str(capabilities.default_convention))
    table.add_row("backslash-quote round trip", str(capabilities.backslash_quote_ok))
    table.add_row("native transport round trip", str(capabilities.native_transport_ok))
    Console().print(table, highlight=False)
