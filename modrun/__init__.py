"""Plugin execution and result-contract engine."""

from .contract import (
    ContractEngine,
    EncodingError,
    ExecutionReport,
    InvocationRequest,
    LaunchError,
    Outcome,
    OutcomeKind,
    ViolationReason,
)

__all__ = [
    "__version__",
    "ContractEngine",
    "InvocationRequest",
    "ExecutionReport",
    "Outcome",
    "OutcomeKind",
    "ViolationReason",
    "EncodingError",
    "LaunchError",
]

__version__ = "0.1.0"
