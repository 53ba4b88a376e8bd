"""Argument file encoding for plugin invocations.

A plugin receives its parameters through a single file path. The file holds
one ``name=value`` pair per line. Values are written literally: no quoting and
no escaping, so a plugin sees exactly the characters the caller supplied.
Names may not be empty and may not contain ``=`` or a line terminator, and
values may not contain a line terminator, otherwise the file could not be
read back unambiguously.
"""

from __future__ import annotations

import logging
import os
import tempfile
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from pathlib import Path

from .errors import EncodingError

logger = logging.getLogger(__name__)

# Everything str.splitlines() treats as a line boundary.
LINE_TERMINATORS = frozenset("\n\r\x0b\x0c\x1c\x1d\x1e\x85\u2028\u2029")

ARGUMENT_FILE_PREFIX = "modrun-args-"
ARGUMENT_FILE_MODE = 0o600


def _has_line_terminator(text: str) -> bool:
    return any(ch in LINE_TERMINATORS for ch in text)


def validate_parameters(params: Mapping[str, str]) -> None:
    """Check that ``params`` can be written as an argument file.

    Raises:
        EncodingError: If a name or value would make the file ambiguous.
    """

    for name, value in params.items():
        if not isinstance(name, str):
            raise EncodingError(f"Parameter name must be a string: {name!r}")
        if not name:
            raise EncodingError("Parameter name cannot be empty")
        if "=" in name:
            raise EncodingError(f"Parameter name cannot contain '=': {name!r}")
        if _has_line_terminator(name):
            raise EncodingError(f"Parameter name cannot contain a line break: {name!r}")
        if not isinstance(value, str):
            raise EncodingError(
                f"Parameter {name!r} must be a string, got {type(value).__name__}"
            )
        if _has_line_terminator(value):
            raise EncodingError(f"Parameter {name!r} value cannot contain a line break")


def encode_lines(params: Mapping[str, str]) -> list[str]:
    """Render ``params`` as ``name=value`` lines (without terminators)."""

    validate_parameters(params)
    return [f"{name}={value}" for name, value in params.items()]


def decode_lines(text: str) -> dict[str, str]:
    """Parse argument file text back into a parameter mapping.

    Each line is split at its first ``=``. Lines without ``=`` are rejected.
    """

    params: dict[str, str] = {}
    for lineno, line in enumerate(text.split("\n"), start=1):
        if not line:
            continue
        name, sep, value = line.partition("=")
        if not sep or not name:
            raise EncodingError(f"Malformed argument line {lineno}: {line!r}")
        params[name] = value
    return params


@contextmanager
def argument_file(params: Mapping[str, str], directory: str | Path | None = None) -> Iterator[Path]:
    """Write ``params`` to a private temporary file and yield its path.

    The file is created with ``mkstemp`` (random name, ``O_EXCL``) and is only
    readable by its owner, since values may be secrets. It is removed on
    every exit path.
    """

    lines = encode_lines(params)
    payload = "".join(f"{line}\n" for line in lines)

    fd, raw_path = tempfile.mkstemp(prefix=ARGUMENT_FILE_PREFIX, dir=directory)
    path = Path(raw_path)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as handle:
            handle.write(payload)
        path.chmod(ARGUMENT_FILE_MODE)
        yield path
    finally:
        try:
            path.unlink()
        except FileNotFoundError:
            logger.warning("argument_file_already_removed", extra={"path": str(path)})
