"""Split a flat command line the way a target of a given profile would.

The inverse of :func:`nativeargs.core.encoder.encode`, used to check the
round-trip property without spawning anything. Argv-style profiles follow the
current Microsoft C runtime, where ``""`` inside a quoted run is a literal
quote. ``cmd.exe`` profiles remove ``cmd.exe`` caret escapes first.

Programs that split their line with ``CommandLineToArgvW`` instead of the C
runtime treat ``""`` inside quotes differently; pass ``parser="shell32"`` to
emulate them through ``mslex``.
"""

from __future__ import annotations

import re
from typing import Literal

import mslex

from nativeargs.core.profiles import QuotingProfile

type ArgvParser = Literal["msvcrt", "shell32"]

_WSH_TOKEN_RE = re.compile(r'(?:"[^"]*"?|[^\s"]+)+')
_SEPARATORS = " \t"


def _split_wsh(command_line: str) -> list[str]:
    return [token.replace('"', "") for token in _WSH_TOKEN_RE.findall(command_line)]


def strip_cmd_escapes(command_line: str) -> str:
    """Drop the carets ``cmd.exe`` consumes outside of quoted runs."""
    chars: list[str] = []
    quoted = False
    index = 0
    while index < len(command_line):
        char = command_line[index]
        if char == "^" and not quoted:
            # A trailing caret is a line continuation and vanishes.
            chars.append(command_line[index + 1 : index + 2])
            index += 2
            continue
        if char == '"':
            quoted = not quoted
        chars.append(char)
        index += 1
    return "".join(chars)


def split_msvcrt(command_line: str) -> list[str]:
    """Split *command_line* with the C runtime's argv rules."""
    args: list[str] = []
    index, end = 0, len(command_line)
    while True:
        while index < end and command_line[index] in _SEPARATORS:
            index += 1
        if index >= end:
            return args

        current: list[str] = []
        quoted = False
        while index < end:
            char = command_line[index]
            if char in _SEPARATORS and not quoted:
                break
            if char == "\\":
                start = index
                while index < end and command_line[index] == "\\":
                    index += 1
                count = index - start
                if index < end and command_line[index] == '"':
                    current.append("\\" * (count // 2))
                    if count % 2:
                        current.append('"')
                        index += 1
                else:
                    current.append("\\" * count)
                continue
            if char == '"':
                if quoted and command_line[index + 1 : index + 2] == '"':
                    current.append('"')
                    index += 2
                    continue
                quoted = not quoted
                index += 1
                continue
            current.append(char)
            index += 1
        args.append("".join(current))


def decode(
    profile: QuotingProfile,
    command_line: str,
    *,
    parser: ArgvParser = "msvcrt",
) -> list[str]:
    """Return the argument list a *profile* target parses out of *command_line*."""
    if profile is QuotingProfile.WSH_SCRIPT:
        return _split_wsh(command_line)
    if parser == "shell32":
        return mslex.split(command_line, like_cmd=profile.uses_cmd, check=False)
    if profile.uses_cmd:
        command_line = strip_cmd_escapes(command_line)
    return split_msvcrt(command_line)


__all__ = ["ArgvParser", "decode", "split_msvcrt", "strip_cmd_escapes"]
