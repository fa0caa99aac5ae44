"""Per-argument encoding rules and the round-trip property."""

from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st

from nativeargs.core.decoder import decode
from nativeargs.core.encoder import (
    check_representable,
    double_trailing_backslashes,
    encode,
    escape_quotes,
    needs_boundary_padding,
)
from nativeargs.core.profiles import EscapeConvention, QuotingProfile

pytestmark = pytest.mark.unit

BACKSLASH = EscapeConvention.BACKSLASH_QUOTE
DOUBLED = EscapeConvention.DOUBLED_QUOTE

# No NUL (cannot appear in a command line) and no surrogates.
argument_text = st.text(
    alphabet=st.characters(exclude_characters="\x00", exclude_categories=("Cs",)),
    max_size=30,
)
# PROPERTY=value, /switch:value and -switch=value with an arbitrary value.
assignment_text = st.builds(
    lambda key, value: key + value,
    st.from_regex(r"[/-]?[A-Za-z_][A-Za-z0-9_]{0,7}[=:]", fullmatch=True),
    argument_text,
)
# Values cmd.exe can carry: no line breaks and no %name% references.
cmd_text = argument_text.filter(
    lambda value: check_representable(value, QuotingProfile.BATCH_FILE) is None
)


def _line(args: list[str], profile: QuotingProfile, convention: EscapeConvention) -> str:
    return " ".join(encode(arg, profile, convention) for arg in args)


# =============================================================================
# Individual rules
# =============================================================================


@pytest.mark.parametrize("profile", list(QuotingProfile))
def test_empty_string_becomes_explicit_empty_token(profile: QuotingProfile) -> None:
    assert encode("", profile, BACKSLASH) == '""'
    assert encode("", profile, DOUBLED) == '""'


@pytest.mark.parametrize("profile", list(QuotingProfile))
@pytest.mark.parametrize("value", ["plain", "c:\\path\\to\\file.txt", "--flag=value", "42"])
def test_non_special_arguments_are_unchanged(profile: QuotingProfile, value: str) -> None:
    assert encode(value, profile, BACKSLASH) == value
    assert encode(value, profile, DOUBLED) == value


def test_escape_quotes_doubles_preceding_backslashes() -> None:
    assert escape_quotes('a\\"b', BACKSLASH) == 'a\\\\\\"b'
    assert escape_quotes('a\\"b', DOUBLED) == 'a\\\\""b'
    assert escape_quotes('"', BACKSLASH) == '\\"'


def test_double_trailing_backslashes_only_touches_the_end() -> None:
    assert double_trailing_backslashes("a\\b\\\\") == "a\\b\\\\\\\\"
    assert double_trailing_backslashes("a\\b") == "a\\b"


def test_space_less_quote_is_wrapped() -> None:
    assert encode('a"b', QuotingProfile.GENERIC, BACKSLASH) == '"a\\"b"'
    assert encode('a"b', QuotingProfile.GENERIC, DOUBLED) == '"a""b"'


def test_whitespace_argument_is_wrapped_with_trailing_backslashes_doubled() -> None:
    assert encode("c:\\temp 1\\", QuotingProfile.GENERIC, BACKSLASH) == '"c:\\temp 1\\\\"'


def test_trailing_backslash_without_wrapping_is_left_alone() -> None:
    assert encode("c:\\temp\\", QuotingProfile.GENERIC, BACKSLASH) == "c:\\temp\\"


@pytest.mark.parametrize("meta", list("&|<>^,;"))
def test_batch_metacharacters_force_wrapping(meta: str) -> None:
    value = f"a{meta}b"
    assert encode(value, QuotingProfile.BATCH_FILE, DOUBLED) == f'"{value}"'
    assert encode(value, QuotingProfile.DIRECT_SHELL, DOUBLED) == f'"{value}"'
    assert encode(value, QuotingProfile.GENERIC, BACKSLASH) == value


@pytest.mark.parametrize("profile", [QuotingProfile.BATCH_FILE, QuotingProfile.DIRECT_SHELL])
@pytest.mark.parametrize("operator", list("&|<>^"))
def test_assignment_shaped_cmd_argument_caret_escapes_operators(
    profile: QuotingProfile, operator: str
) -> None:
    raw = f"key=a{operator}b"

    encoded = encode(raw, profile, DOUBLED)

    assert encoded == f"key=a^{operator}b"
    assert decode(profile, encoded) == [raw]


def test_assignment_shaped_batch_argument_keeps_separators_bare() -> None:
    assert encode("key=a,b;c", QuotingProfile.BATCH_FILE, DOUBLED) == "key=a,b;c"


def test_assignment_shaped_batch_argument_runs_no_command() -> None:
    line = _line(["key=a&b", "next"], QuotingProfile.BATCH_FILE, DOUBLED)

    assert line == "key=a^&b next"
    assert decode(QuotingProfile.BATCH_FILE, line) == ["key=a&b", "next"]


def test_assignment_with_quote_stays_unwrapped_under_backslash_convention() -> None:
    assert encode('key=a"b', QuotingProfile.GENERIC, BACKSLASH) == 'key=a\\"b'


def test_assignment_with_quote_is_wrapped_under_doubled_convention() -> None:
    assert encode('key=a"b', QuotingProfile.BATCH_FILE, DOUBLED) == '"key=a""b"'


def test_msi_style_quotes_only_the_value() -> None:
    assert encode("foo=bar none", QuotingProfile.MSI_STYLE, DOUBLED) == 'foo="bar none"'
    assert encode("/key:two words", QuotingProfile.MSI_STYLE, DOUBLED) == '/key:"two words"'
    assert encode("-key:two words", QuotingProfile.MSI_STYLE, DOUBLED) == '-key:"two words"'


def test_msi_style_value_escaping_and_trailing_backslashes() -> None:
    assert (
        encode('INSTALLDIR=C:\\Program Files\\ "x"\\', QuotingProfile.MSI_STYLE, DOUBLED)
        == 'INSTALLDIR="C:\\Program Files\\ ""x""\\\\"'
    )


def test_msi_style_non_assignment_falls_back_to_whole_token_quoting() -> None:
    assert encode("C:\\my setup.msi", QuotingProfile.MSI_STYLE, DOUBLED) == '"C:\\my setup.msi"'


def test_generic_profile_quotes_assignment_with_spaces_whole() -> None:
    assert encode("foo=bar none", QuotingProfile.GENERIC, BACKSLASH) == '"foo=bar none"'


def test_wsh_wraps_whitespace_without_touching_backslashes() -> None:
    assert encode("c:\\temp 1\\", QuotingProfile.WSH_SCRIPT, DOUBLED) == '"c:\\temp 1\\"'
    assert encode("a&b", QuotingProfile.WSH_SCRIPT, DOUBLED) == "a&b"


def test_boundary_padding_applies_only_to_interpreter_command_operands() -> None:
    code = 'puts "hi"'
    interpreter = QuotingProfile.BACKSLASH_ONLY_INTERPRETER

    assert encode(code, interpreter, BACKSLASH) == '"puts \\"hi\\""'
    assert (
        encode(code, interpreter, BACKSLASH, command_operand=True, boundary_padding=True)
        == '"puts \\"hi\\" "'
    )
    assert encode(code, interpreter, BACKSLASH, command_operand=True) == '"puts \\"hi\\""'
    assert (
        encode(code, QuotingProfile.GENERIC, BACKSLASH, command_operand=True, boundary_padding=True)
        == '"puts \\"hi\\""'
    )


def test_needs_boundary_padding() -> None:
    assert needs_boundary_padding('puts "hi"')
    assert needs_boundary_padding('"quoted start')
    assert not needs_boundary_padding("no quotes here")


# =============================================================================
# Representability
# =============================================================================


def test_wsh_cannot_carry_embedded_quotes() -> None:
    assert check_representable('say "hi"', QuotingProfile.WSH_SCRIPT) is not None
    assert check_representable("say hi", QuotingProfile.WSH_SCRIPT) is None


def test_cmd_profiles_report_variable_references_and_line_breaks() -> None:
    assert check_representable("%PATH%", QuotingProfile.BATCH_FILE) is not None
    assert check_representable("two\nlines", QuotingProfile.DIRECT_SHELL) is not None
    assert check_representable("100%", QuotingProfile.BATCH_FILE) is None
    assert check_representable("%PATH%", QuotingProfile.GENERIC) is None


# =============================================================================
# Scenarios and round trips
# =============================================================================


def test_generic_scenario_round_trips() -> None:
    args = ["", "a&b", '3" of snow', 'Nat "King" Cole', "c:\\temp 1\\", 'a"b']

    line = _line(args, QuotingProfile.GENERIC, BACKSLASH)

    assert decode(QuotingProfile.GENERIC, line) == args


def test_batch_file_scenario_keeps_boundaries() -> None:
    args = ['a"b', "a&b", "last"]

    line = _line(args, QuotingProfile.BATCH_FILE, DOUBLED)

    assert line == '"a""b" "a&b" last'
    assert decode(QuotingProfile.BATCH_FILE, line) == args


def test_trailing_backslash_survives_round_trip() -> None:
    line = encode("c:\\temp 1\\", QuotingProfile.GENERIC, BACKSLASH)
    assert decode(QuotingProfile.GENERIC, line) == ["c:\\temp 1\\"]


def test_msi_partial_quoting_decodes_to_original() -> None:
    line = _line(["/i", "foo=bar none", "/qn"], QuotingProfile.MSI_STYLE, DOUBLED)
    assert decode(QuotingProfile.MSI_STYLE, line) == ["/i", "foo=bar none", "/qn"]


def test_wsh_round_trip_for_quote_free_values() -> None:
    args = ["", "two words", "c:\\dir\\", "x"]
    line = _line(args, QuotingProfile.WSH_SCRIPT, DOUBLED)
    assert decode(QuotingProfile.WSH_SCRIPT, line) == args


@given(st.lists(argument_text, max_size=6))
def test_generic_backslash_encoding_round_trips(args: list[str]) -> None:
    line = _line(args, QuotingProfile.GENERIC, BACKSLASH)
    assert decode(QuotingProfile.GENERIC, line) == args


@given(st.lists(argument_text, max_size=6))
def test_generic_doubled_encoding_round_trips(args: list[str]) -> None:
    line = _line(args, QuotingProfile.GENERIC, DOUBLED)
    assert decode(QuotingProfile.GENERIC, line) == args


@given(st.lists(argument_text, max_size=6))
def test_backslash_only_interpreter_round_trips(args: list[str]) -> None:
    line = _line(args, QuotingProfile.BACKSLASH_ONLY_INTERPRETER, BACKSLASH)
    assert decode(QuotingProfile.BACKSLASH_ONLY_INTERPRETER, line) == args


@pytest.mark.parametrize("convention", [DOUBLED, BACKSLASH])
@given(args=st.lists(st.one_of(assignment_text, argument_text), max_size=6))
def test_msi_style_encoding_round_trips(convention: EscapeConvention, args: list[str]) -> None:
    line = _line(args, QuotingProfile.MSI_STYLE, convention)
    assert decode(QuotingProfile.MSI_STYLE, line) == args


@given(
    st.lists(
        st.text(alphabet=st.sampled_from('ab\\"&|<>^,;='), min_size=0, max_size=8),
        max_size=5,
    )
)
def test_batch_encoding_of_space_free_values_round_trips(args: list[str]) -> None:
    line = _line(args, QuotingProfile.BATCH_FILE, DOUBLED)
    assert decode(QuotingProfile.BATCH_FILE, line) == args


@pytest.mark.parametrize("profile", [QuotingProfile.BATCH_FILE, QuotingProfile.DIRECT_SHELL])
@given(args=st.lists(cmd_text, max_size=6))
def test_cmd_encoding_round_trips(profile: QuotingProfile, args: list[str]) -> None:
    line = _line(args, profile, DOUBLED)
    assert decode(profile, line) == args


@given(argument_text.filter(lambda s: s and '"' not in s and "\\" not in s))
def test_quote_and_backslash_free_values_never_need_escapes(value: str) -> None:
    encoded = encode(value, QuotingProfile.GENERIC, BACKSLASH)
    assert encoded in (value, f'"{value}"')
