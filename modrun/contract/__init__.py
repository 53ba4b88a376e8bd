"""Plugin invocation contract: encoding, launching, parsing, classification."""

from .classifier import classify
from .encoder import argument_file, decode_lines, encode_lines, validate_parameters
from .engine import ContractEngine, run_all_sync, run_sync
from .environment import build_environment
from .errors import (
    CatalogError,
    DuplicatePluginError,
    EncodingError,
    LaunchError,
    ModrunError,
    PluginNotFoundError,
)
from .invoker import PluginInvoker
from .models import (
    ExecutionReport,
    InvocationRequest,
    Outcome,
    OutcomeKind,
    RawOutput,
    ResultRecord,
    ViolationReason,
)
from .parser import ParseResult, parse_output

__all__ = [
    "ContractEngine",
    "run_sync",
    "run_all_sync",
    "PluginInvoker",
    "InvocationRequest",
    "RawOutput",
    "ResultRecord",
    "Outcome",
    "OutcomeKind",
    "ViolationReason",
    "ExecutionReport",
    "ParseResult",
    "parse_output",
    "classify",
    "argument_file",
    "encode_lines",
    "decode_lines",
    "validate_parameters",
    "build_environment",
    "ModrunError",
    "EncodingError",
    "LaunchError",
    "CatalogError",
    "DuplicatePluginError",
    "PluginNotFoundError",
]
