"""nativeargs: pass argument lists to external programs exactly as given."""

from nativeargs.core import (
    EscapeConvention,
    InvocationPlan,
    NativeArgsError,
    QuotingProfile,
    build_plan,
    classify,
    decode,
    encode,
    invoke,
)

__version__ = "0.1.0"

__all__ = [
    "EscapeConvention",
    "InvocationPlan",
    "NativeArgsError",
    "QuotingProfile",
    "build_plan",
    "classify",
    "decode",
    "encode",
    "invoke",
]
