"""Quoting profiles, escape conventions, and the executable allow-lists behind them."""

from __future__ import annotations

import re
from enum import StrEnum


class QuotingProfile(StrEnum):
    """How the target program is known to parse its flat command line."""

    GENERIC = "generic"
    BATCH_FILE = "batch_file"
    DIRECT_SHELL = "direct_shell"
    MSI_STYLE = "msi_style"
    WSH_SCRIPT = "wsh_script"
    BACKSLASH_ONLY_INTERPRETER = "backslash_only"

    @property
    def uses_cmd(self) -> bool:
        """Return True when the command line passes through ``cmd.exe`` parsing."""
        return self in (QuotingProfile.BATCH_FILE, QuotingProfile.DIRECT_SHELL)


class EscapeConvention(StrEnum):
    """Substitution used for a literal double quote inside a quoted token."""

    BACKSLASH_QUOTE = "backslash"
    DOUBLED_QUOTE = "doubled"

    def escape_quote(self) -> str:
        if self is EscapeConvention.BACKSLASH_QUOTE:
            return '\\"'
        return '""'


BATCH_EXTENSIONS = frozenset({".bat", ".cmd"})
WSH_EXTENSIONS = frozenset({".vbs", ".vbe", ".js", ".jse", ".wsf"})

SHELL_NAMES = frozenset({"cmd"})

# Installer-style CLIs with their own parser: doubled quotes only, and
# `PROP="value with spaces"` rather than `"PROP=value with spaces"`.
MSI_STYLE_NAMES = frozenset({"msiexec", "msdeploy", "cmdkey"})

# Runtimes whose argv parsing rejects `""` inside quoted tokens.
BACKSLASH_ONLY_NAMES = frozenset({"ruby", "perl", "wsl"})

# Flags after which a backslash-only interpreter takes a complete command line.
INTERPRETER_COMMAND_FLAGS = frozenset({"-c", "-e", "-command"})

# `cmd.exe` switches whose remaining operands form the command line to run.
SHELL_COMMAND_FLAGS = frozenset({"/c", "/k"})

BATCH_METACHARACTERS = "&|<>^,;"

MSI_TOKEN_RE = re.compile(r"^([/-]\w+[:=]|\w+=)(.+)$", re.DOTALL)


__all__ = [
    "BACKSLASH_ONLY_NAMES",
    "BATCH_EXTENSIONS",
    "BATCH_METACHARACTERS",
    "INTERPRETER_COMMAND_FLAGS",
    "MSI_STYLE_NAMES",
    "MSI_TOKEN_RE",
    "SHELL_COMMAND_FLAGS",
    "SHELL_NAMES",
    "WSH_EXTENSIONS",
    "EscapeConvention",
    "QuotingProfile",
]
