"""Per-argument re-encoding for targets that receive a flat command line.

``encode`` returns the exact token that goes into the command line, quotes
included, such that the target's parser reproduces the raw value:

* ``""`` stands for the empty string; it is never dropped.
* Backslash runs in front of an embedded quote are doubled, then the quote is
  escaped with the active convention (``\\"`` or ``""``).
* Whitespace, an embedded quote, or (for ``cmd.exe`` targets) one of
  ``& | < > ^ , ;`` makes the encoder wrap the token in quotes. Trailing
  backslashes of a wrapped token are doubled so they cannot escape the
  closing quote.
* MSI-style targets get ``key="value"`` instead of ``"key=value"``.
* Space-less ``word=`` tokens are left unwrapped so ``key=value`` consumers see
  an unquoted key. Naive batch-file parsers split such tokens at ``=``. For
  ``cmd.exe`` targets the operators ``& | < > ^`` in such a token are
  caret-escaped instead, so ``cmd.exe`` never runs part of the value.
"""

from __future__ import annotations

import re

from nativeargs.core.profiles import (
    BATCH_METACHARACTERS,
    MSI_TOKEN_RE,
    EscapeConvention,
    QuotingProfile,
)

_WHITESPACE_RE = re.compile(r"\s")
_QUOTE_RE = re.compile(r'(\\*)"')
_TRAILING_BACKSLASHES_RE = re.compile(r"(\\+)\Z")
_ASSIGNMENT_PREFIX_RE = re.compile(r"^\w+=")
_BATCH_META_RE = re.compile("[" + re.escape(BATCH_METACHARACTERS) + "]")
_CMD_OPERATOR_RE = re.compile(r"[&|<>^]")
_UNPADDED_QUOTE_RE = re.compile(r'(?<!\s)"')
_CMD_VARIABLE_RE = re.compile(r"%[^%\s]+%")
_LINE_BREAK_RE = re.compile(r"[\r\n]")


def escape_quotes(value: str, convention: EscapeConvention) -> str:
    """Escape every embedded quote, doubling the backslash run in front of it."""
    replacement = convention.escape_quote()
    return _QUOTE_RE.sub(lambda m: m.group(1) * 2 + replacement, value)


def double_trailing_backslashes(value: str) -> str:
    return _TRAILING_BACKSLASHES_RE.sub(lambda m: m.group(1) * 2, value)


def _wrap(escaped: str) -> str:
    return f'"{double_trailing_backslashes(escaped)}"'


def _encode_msi_assignment(raw: str, convention: EscapeConvention) -> str | None:
    match = MSI_TOKEN_RE.match(raw)
    if match is None:
        return None
    key, value = match.groups()
    if not (_WHITESPACE_RE.search(value) or '"' in value):
        return None
    return key + _wrap(escape_quotes(value, convention))


def _encode_wsh(raw: str) -> str:
    # WSH strips quotes and knows no escapes; backslashes are literal.
    if _WHITESPACE_RE.search(raw):
        return f'"{raw}"'
    return raw


def needs_boundary_padding(raw: str) -> bool:
    """Return True when an embedded quote is not preceded by whitespace."""
    return _UNPADDED_QUOTE_RE.search(raw) is not None


def encode(
    raw: str,
    profile: QuotingProfile,
    convention: EscapeConvention,
    *,
    command_operand: bool = False,
    boundary_padding: bool = False,
) -> str:
    """Encode one raw argument for *profile* using *convention*.

    ``command_operand`` marks a value that is itself a complete command line for
    a backslash-only interpreter (e.g. the operand of ``-c``). Only such values
    may be padded with a trailing space when the host suffers from the
    boundary-detection defect (``boundary_padding``).
    """
    if raw == "":
        return '""'
    if profile is QuotingProfile.WSH_SCRIPT:
        return _encode_wsh(raw)

    if (
        profile is QuotingProfile.BACKSLASH_ONLY_INTERPRETER
        and command_operand
        and boundary_padding
        and needs_boundary_padding(raw)
    ):
        raw = f"{raw} "

    if profile is QuotingProfile.MSI_STYLE:
        partial = _encode_msi_assignment(raw, convention)
        if partial is not None:
            return partial

    escaped = escape_quotes(raw, convention)
    if _WHITESPACE_RE.search(raw):
        return _wrap(escaped)

    has_quote = '"' in raw
    has_meta = profile.uses_cmd and _BATCH_META_RE.search(raw) is not None
    if not (has_quote or has_meta):
        return raw
    if _ASSIGNMENT_PREFIX_RE.match(raw) and not (
        has_quote and convention is EscapeConvention.DOUBLED_QUOTE
    ):
        # A doubled quote means nothing outside quote mode, so only that case
        # overrides the unquoted-key convention.
        if profile.uses_cmd:
            return _CMD_OPERATOR_RE.sub(r"^\g<0>", escaped)
        return escaped
    return _wrap(escaped)


def check_representable(raw: str, profile: QuotingProfile) -> str | None:
    """Return why *raw* cannot be passed intact to *profile*, or None if it can."""
    if profile is QuotingProfile.WSH_SCRIPT:
        if '"' in raw:
            return "WSH offers no escape sequence for embedded double quotes"
        if _LINE_BREAK_RE.search(raw):
            return "WSH arguments cannot span lines"
    elif profile.uses_cmd:
        if _LINE_BREAK_RE.search(raw):
            return "cmd.exe ends the command line at a line break"
        if _CMD_VARIABLE_RE.search(raw):
            return "cmd.exe expands %name% references even inside quotes"
    return None


__all__ = [
    "check_representable",
    "double_trailing_backslashes",
    "encode",
    "escape_quotes",
    "needs_boundary_padding",
]
