"""Outcome classification for finished plugin invocations.

Rules are evaluated in order and the first match wins:

1. killed by timeout                     -> ContractViolation(timeout)
2. stdout could not be parsed            -> ContractViolation(<parse failure>)
3. a recognized field has the wrong type -> ContractViolation(invalid-field-type)
4. ``failed`` is true                    -> Failed
5. non-zero exit without ``failed``      -> ContractViolation(exit-code-mismatch)
6. ``changed`` is true                   -> Success
7. otherwise                             -> SuccessNoChange

The JSON fields are authoritative; the exit code is only a cross-check, and a
disagreement is reported instead of trusted either way.
"""

from __future__ import annotations

import logging

from .models import Outcome, OutcomeKind, RawOutput, ResultRecord, ViolationReason
from .parser import ParseResult

logger = logging.getLogger(__name__)

_FIELD_TYPES: dict[str, type] = {"changed": bool, "failed": bool, "msg": str}


def _type_errors(record: ResultRecord) -> list[str]:
    errors = []
    for name, expected in _FIELD_TYPES.items():
        value = getattr(record, name)
        if not isinstance(value, expected):
            errors.append(f"{name} must be {expected.__name__}, got {type(value).__name__}")
    return errors


def classify(raw: RawOutput, parsed: ParseResult | None) -> Outcome:
    """Derive the outcome of one invocation from its output and exit code.

    ``parsed`` may be ``None`` only when the process timed out.
    """

    if raw.timed_out:
        return Outcome.violation(ViolationReason.TIMEOUT, "plugin did not finish before the timeout")

    if parsed is None or parsed.record is None:
        reason = parsed.failure if parsed is not None else ViolationReason.NOT_JSON
        detail = parsed.detail if parsed is not None else ""
        return Outcome.violation(reason, detail)

    record = parsed.record
    type_errors = _type_errors(record)
    if type_errors:
        return Outcome.violation(ViolationReason.INVALID_FIELD_TYPE, "; ".join(type_errors))

    if record.failed:
        return Outcome(kind=OutcomeKind.FAILED, message=record.msg, changed=record.changed)

    if raw.exit_code != 0:
        logger.debug(
            "plugin_exit_code_mismatch",
            extra={"exit_code": raw.exit_code, "failed_present": "failed" in record.present},
        )
        return Outcome.violation(
            ViolationReason.EXIT_CODE_MISMATCH,
            f"plugin exited with code {raw.exit_code} but did not report failed: true",
        )

    if record.changed:
        return Outcome(kind=OutcomeKind.SUCCESS, message=record.msg, changed=True)

    return Outcome(kind=OutcomeKind.SUCCESS_NO_CHANGE, message=record.msg)
