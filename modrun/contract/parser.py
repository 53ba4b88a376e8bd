"""Strict decoding of plugin standard output.

A plugin must print exactly one JSON object and nothing else. Whitespace
around the object is tolerated; anything else is a parse failure rather than
a partial success.
"""

from __future__ import annotations

import json
from dataclasses import dataclass

from .models import RawOutput, ResultRecord, ViolationReason

# RFC 8259 insignificant whitespace; str.strip() would also eat NBSP and friends.
JSON_WHITESPACE = " \t\r\n"


class _NonStandardConstant(ValueError):
    """NaN or Infinity, which Python accepts but JSON does not."""


def _reject_constant(name: str):
    raise _NonStandardConstant(f"{name} is not valid JSON")


_decoder = json.JSONDecoder(parse_constant=_reject_constant)


@dataclass(frozen=True, slots=True)
class ParseResult:
    """Either a decoded record or the reason decoding failed."""

    record: ResultRecord | None = None
    failure: ViolationReason | None = None
    detail: str = ""

    @property
    def ok(self) -> bool:
        return self.record is not None


def _failed(reason: ViolationReason, detail: str) -> ParseResult:
    return ParseResult(failure=reason, detail=detail)


def parse_output(raw: RawOutput) -> ParseResult:
    """Decode ``raw.stdout`` as a single JSON object. Stderr is ignored."""

    try:
        text = raw.stdout.decode("utf-8")
    except UnicodeDecodeError as exc:
        return _failed(ViolationReason.NOT_JSON, f"stdout is not valid UTF-8: {exc}")

    stripped = text.strip(JSON_WHITESPACE)
    if not stripped:
        return _failed(ViolationReason.EMPTY_OUTPUT, "plugin wrote nothing to stdout")

    try:
        value, end = _decoder.raw_decode(stripped)
    except json.JSONDecodeError as exc:
        return _failed(ViolationReason.NOT_JSON, f"stdout is not JSON: {exc.msg} at char {exc.pos}")
    except _NonStandardConstant as exc:
        return _failed(ViolationReason.NOT_JSON, f"stdout is not JSON: {exc}")

    if stripped[end:].strip(JSON_WHITESPACE):
        return _failed(
            ViolationReason.TRAILING_DATA,
            f"unexpected data after JSON value at char {end}",
        )

    if not isinstance(value, dict):
        return _failed(
            ViolationReason.NOT_AN_OBJECT,
            f"expected a JSON object, got {type(value).__name__}",
        )

    return ParseResult(record=ResultRecord.from_mapping(value))
