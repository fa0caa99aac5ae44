"""Commands that spawn or plan an external program."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from nativeargs.core.errors import NativeArgsError
from nativeargs.core.native_shell import run_shell
from nativeargs.core.planner import build_plan
from nativeargs.core.process import ProcessExecutionError, run_plan

if TYPE_CHECKING:
    from nativeargs.core.config import NativeArgsConfig
    from nativeargs.core.process import ProcessResult

# Everything after the executable is data for the child, including "--help".
PASSTHROUGH = {"ignore_unknown_options": True, "allow_interspersed_args": False}


def _emit(ctx: click.Context, result: ProcessResult) -> None:
    click.get_binary_stream("stdout").write(result.stdout)
    click.get_binary_stream("stderr").write(result.stderr)
    ctx.exit(result.returncode)


@click.command(context_settings=PASSTHROUGH)
@click.option("--check", is_flag=True, help="Fail with a structured error on nonzero exit")
@click.argument("executable")
@click.argument("args", nargs=-1, type=click.UNPROCESSED)
@click.pass_context
def run(ctx: click.Context, check: bool, executable: str, args: tuple[str, ...]) -> None:
    """Run EXECUTABLE so that it receives exactly ARGS.

    \b
    Examples:
        nativeargs run python -c "import sys; print(sys.argv)" "" 'a"b'
        nativeargs run msiexec /i setup.msi "INSTALLDIR=C:\\Program Files\\App"
    """
    config: NativeArgsConfig = ctx.obj
    try:
        invocation = build_plan(executable, args, settings=config.engine)
        result = run_plan(invocation, check=check)
    except (NativeArgsError, ProcessExecutionError) as exc:
        raise click.ClickException(str(exc)) from exc
    _emit(ctx, result)


@click.command(context_settings=PASSTHROUGH)
@click.argument("executable")
@click.argument("args", nargs=-1, type=click.UNPROCESSED)
@click.option("--windows", is_flag=True, help="Plan as if running on Windows")
@click.pass_context
def plan(ctx: click.Context, executable: str, args: tuple[str, ...], windows: bool) -> None:
    """Show how EXECUTABLE would be invoked with ARGS, without running it."""
    config: NativeArgsConfig = ctx.obj
    try:
        invocation = build_plan(
            executable,
            args,
            settings=config.engine,
            system="Windows" if windows else None,
            resolve=not windows,
        )
    except NativeArgsError as exc:
        raise click.ClickException(str(exc)) from exc

    table = Table(show_header=False, box=None)
    table.add_column(style="cyan")
    table.add_column()
    table.add_row("target", escape(invocation.target))
    table.add_row("profile", str(invocation.profile))
    locked = " (locked)" if invocation.convention_locked else ""
    table.add_row("convention", f"{invocation.convention}{locked}")
    table.add_row("program", escape(invocation.program))
    for index, token in enumerate(invocation.arguments, 1):
        table.add_row(f"arg {index}", escape(token))
    table.add_row("command line", escape(invocation.display()))
    for warning in invocation.warnings:
        table.add_row("warning", f"[yellow]{escape(warning)}[/]")
    Console().print(table, highlight=False)


@click.command(context_settings=PASSTHROUGH)
@click.option(
    "--strategy",
    type=click.Choice(["direct", "script_file"]),
    default=None,
    help="Pass the command line directly or through a temporary script",
)
@click.option(
    "--shell",
    "shell_name",
    type=click.Choice(["sh", "bash"]),
    default=None,
    help="POSIX shell to use",
)
@click.argument("command", required=False)
@click.argument("args", nargs=-1, type=click.UNPROCESSED)
@click.pass_context
def shell(
    ctx: click.Context,
    strategy: str | None,
    shell_name: str | None,
    command: str | None,
    args: tuple[str, ...],
) -> None:
    """Run COMMAND in the native shell; ARGS become its positional parameters.

    Without COMMAND the script is read from stdin.
    """
    config: NativeArgsConfig = ctx.obj
    updates: dict[str, object] = {}
    if strategy:
        updates["script_strategy"] = strategy
    if shell_name:
        updates["native_shell"] = shell_name
    settings = config.engine.model_copy(update=updates)

    script_input = click.get_binary_stream("stdin").read() if command is None else None
    try:
        result = run_shell(command, args, settings=settings, input=script_input)
    except (NativeArgsError, ProcessExecutionError) as exc:
        raise click.ClickException(str(exc)) from exc
    _emit(ctx, result)
