"""Diagnostic echo program: reports back, verbatim, the arguments it received.

Run as ``python -m nativeargs.echo [--raw] [ARGS...]``. Only a leading
``--raw`` is an option; everything else is data. Raw mode prints each value
on its own line with no decoration. Decorated mode prints a count followed by
each value enclosed in ``<...>`` and, on Windows, the flat command line the
process was actually given.

Output is always UTF-8 with ``\\n`` line endings regardless of the console.
"""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

RAW_FLAG = "--raw"


def format_raw(args: Sequence[str]) -> str:
    return "".join(f"{arg}\n" for arg in args)


def parse_raw(output: str) -> list[str]:
    """Invert :func:`format_raw`. Values containing line breaks cannot round-trip."""
    if not output:
        return []
    return output.removesuffix("\n").split("\n")


def format_decorated(args: Sequence[str], command_line: str | None = None) -> str:
    lines = [f"{len(args)} argument(s) received (enclosed in <...> for delineation):", ""]
    lines.extend(f"  <{arg}>" for arg in args)
    if command_line is not None:
        lines.extend(["", "Command line (verbatim):", "", f"  {command_line}"])
    return "\n".join(lines) + "\n"


def _windows_command_line() -> str | None:
    if sys.platform != "win32":
        return None
    import ctypes

    get_command_line = ctypes.windll.kernel32.GetCommandLineW
    get_command_line.restype = ctypes.c_wchar_p
    return get_command_line()


def main(argv: Sequence[str] | None = None) -> int:
    args = list(sys.argv[1:] if argv is None else argv)
    raw = bool(args) and args[0] == RAW_FLAG
    if raw:
        args = args[1:]

    text = format_raw(args) if raw else format_decorated(args, _windows_command_line())
    sys.stdout.buffer.write(text.encode("utf-8", errors="surrogateescape"))
    sys.stdout.flush()
    return 0


if __name__ == "__main__":
    sys.exit(main())
