"""Helpers for writing plugins in Python.

A plugin is any executable that takes the argument file path as its only
argument and prints one JSON object. These helpers cover the boilerplate::

    from modrun.plugin_api import exit_json, fail_json, load_arguments

    args = load_arguments(sys.argv[1])
    ...
    exit_json(changed=True, msg="file created")

Results are built with :mod:`json`, never by hand, so values need no
escaping.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, NoReturn

from modrun.contract.encoder import decode_lines


def load_arguments(path: str | Path) -> dict[str, str]:
    """Read an argument file written by the engine."""
    return decode_lines(Path(path).read_text(encoding="utf-8"))


def _emit(result: dict[str, Any], exit_code: int) -> NoReturn:
    sys.stdout.write(json.dumps(result))
    sys.stdout.write("\n")
    sys.stdout.flush()
    raise SystemExit(exit_code)


def exit_json(changed: bool = False, msg: str = "", **fields: Any) -> NoReturn:
    """Report success and exit 0."""
    _emit({"changed": changed, "msg": msg, **fields}, 0)


def fail_json(msg: str, changed: bool = False, **fields: Any) -> NoReturn:
    """Report failure and exit 1."""
    _emit({"failed": True, "changed": changed, "msg": msg, **fields}, 1)
