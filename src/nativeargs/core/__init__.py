"""Argument re-encoding engine: classification, escaping, and invocation planning."""

from nativeargs.core.classifier import classify
from nativeargs.core.convention import Locked, Provisional, default_convention, resolve_convention
from nativeargs.core.decoder import decode
from nativeargs.core.encoder import encode
from nativeargs.core.errors import (
    NativeArgsError,
    ResolutionError,
    UnrepresentableArgument,
    UnsupportedCombination,
)
from nativeargs.core.planner import InvocationPlan, PlanState, build_plan
from nativeargs.core.process import ProcessExecutionError, ProcessResult, invoke, run_plan
from nativeargs.core.profiles import EscapeConvention, QuotingProfile

__all__ = [
    "EscapeConvention",
    "InvocationPlan",
    "Locked",
    "NativeArgsError",
    "PlanState",
    "ProcessExecutionError",
    "ProcessResult",
    "Provisional",
    "QuotingProfile",
    "ResolutionError",
    "UnrepresentableArgument",
    "UnsupportedCombination",
    "build_plan",
    "classify",
    "decode",
    "default_convention",
    "encode",
    "invoke",
    "resolve_convention",
    "run_plan",
]
