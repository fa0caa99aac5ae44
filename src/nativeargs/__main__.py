"""CLI entry point for nativeargs."""

from __future__ import annotations

from nativeargs.cli.commands.root import cli


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
