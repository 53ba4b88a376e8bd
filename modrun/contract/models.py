"""Dataclasses for plugin invocation requests, raw output, and reports."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping
from uuid import uuid4

from .encoder import validate_parameters

RECOGNIZED_FIELDS = ("changed", "failed", "msg")


class OutcomeKind(str, Enum):
    """Terminal classification of one invocation."""

    SUCCESS = "Success"
    SUCCESS_NO_CHANGE = "SuccessNoChange"
    FAILED = "Failed"
    CONTRACT_VIOLATION = "ContractViolation"


class ViolationReason(str, Enum):
    """Why an invocation did not honour the plugin contract."""

    TIMEOUT = "timeout"
    LAUNCH_FAILED = "launch-failed"
    EXIT_CODE_MISMATCH = "exit-code-mismatch"
    INVALID_FIELD_TYPE = "invalid-field-type"
    EMPTY_OUTPUT = "EmptyOutput"
    NOT_JSON = "NotJSON"
    NOT_AN_OBJECT = "NotAnObject"
    TRAILING_DATA = "TrailingData"


PARSE_FAILURES = frozenset(
    {
        ViolationReason.EMPTY_OUTPUT,
        ViolationReason.NOT_JSON,
        ViolationReason.NOT_AN_OBJECT,
        ViolationReason.TRAILING_DATA,
    }
)


@dataclass(frozen=True, slots=True, eq=False)
class InvocationRequest:
    """One plugin invocation: executable, parameters, and limits.

    ``env`` is overlaid on top of the configured passthrough variables; it is
    the only way a caller can hand extra environment to a plugin.
    """

    plugin_path: Path
    params: Mapping[str, str] = field(default_factory=dict)
    timeout: float | None = None
    env: Mapping[str, str] = field(default_factory=dict)
    invocation_id: str = field(default_factory=lambda: uuid4().hex)

    def __post_init__(self) -> None:
        object.__setattr__(self, "plugin_path", Path(self.plugin_path))
        validate_parameters(self.params)
        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("Timeout must be a positive number of seconds")
        object.__setattr__(self, "params", MappingProxyType(dict(self.params)))
        object.__setattr__(self, "env", MappingProxyType(dict(self.env)))


@dataclass(frozen=True, slots=True)
class RawOutput:
    """Captured streams and exit status of one plugin process."""

    stdout: bytes = b""
    stderr: bytes = b""
    exit_code: int | None = None
    timed_out: bool = False


@dataclass(frozen=True, slots=True)
class ResultRecord:
    """Decoded plugin result.

    ``changed``, ``failed`` and ``msg`` keep whatever the plugin wrote so the
    classifier can reject values of the wrong type; ``present`` names the
    recognized fields the plugin actually emitted.
    """

    changed: Any = False
    failed: Any = False
    msg: Any = ""
    extra: Mapping[str, Any] = field(default_factory=dict)
    present: frozenset[str] = frozenset()

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ResultRecord":
        recognized = {key: data[key] for key in RECOGNIZED_FIELDS if key in data}
        extra = {key: value for key, value in data.items() if key not in RECOGNIZED_FIELDS}
        return cls(
            **recognized,
            extra=MappingProxyType(extra),
            present=frozenset(recognized),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "changed": self.changed,
            "failed": self.failed,
            "msg": self.msg,
            **dict(self.extra),
        }


@dataclass(frozen=True, slots=True)
class Outcome:
    """Classified result of one invocation."""

    kind: OutcomeKind
    message: str = ""
    changed: bool = False
    reason: ViolationReason | None = None

    @classmethod
    def violation(cls, reason: ViolationReason, message: str = "") -> "Outcome":
        return cls(kind=OutcomeKind.CONTRACT_VIOLATION, message=message, reason=reason)

    @property
    def ok(self) -> bool:
        return self.kind in (OutcomeKind.SUCCESS, OutcomeKind.SUCCESS_NO_CHANGE)


@dataclass(frozen=True, slots=True)
class ExecutionReport:
    """Everything the caller needs about one finished invocation."""

    request: InvocationRequest
    outcome: Outcome
    raw: RawOutput
    started_at: datetime
    completed_at: datetime
    record: ResultRecord | None = None

    @property
    def exit_code(self) -> int | None:
        return self.raw.exit_code

    @property
    def duration_seconds(self) -> float:
        return (self.completed_at - self.started_at).total_seconds()

    def to_dict(self) -> dict[str, Any]:
        """Serialize this report to a JSON-safe dictionary."""

        return {
            "invocation_id": self.request.invocation_id,
            "plugin": str(self.request.plugin_path),
            "outcome": self.outcome.kind.value,
            "reason": self.outcome.reason.value if self.outcome.reason else None,
            "changed": self.outcome.changed,
            "msg": self.outcome.message,
            "exit_code": self.exit_code,
            "timed_out": self.raw.timed_out,
            "result": self.record.to_dict() if self.record is not None else None,
            "stdout": self.raw.stdout.decode("utf-8", errors="replace"),
            "stderr": self.raw.stderr.decode("utf-8", errors="replace"),
            "started_at": self.started_at.isoformat(),
            "completed_at": self.completed_at.isoformat(),
        }
