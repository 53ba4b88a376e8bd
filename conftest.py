# conftest.py - Global pytest configuration
"""
Global pytest configuration.

Provides fixtures for writing throwaway plugin executables and an engine
wired to per-test settings, so tests never depend on MODRUN_* variables set
in the developer's shell.
"""
import os
import stat
import sys
import textwrap
from pathlib import Path

import pytest

from modrun.config import Settings, get_settings
from modrun.contract import ContractEngine


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def make_plugin(tmp_path):
    """Write a Python plugin script and return its executable path."""

    plugin_dir = tmp_path / "plugins"
    plugin_dir.mkdir(exist_ok=True)

    def _make(name: str, body: str, executable: bool = True) -> Path:
        path = plugin_dir / name
        path.write_text(f"#!{sys.executable}\n" + textwrap.dedent(body), encoding="utf-8")
        mode = stat.S_IRUSR | stat.S_IWUSR
        if executable:
            mode |= stat.S_IXUSR
        os.chmod(path, mode)
        return path

    return _make


@pytest.fixture
def argument_dir(tmp_path):
    """Directory the engine writes argument files into."""
    directory = tmp_path / "args"
    directory.mkdir()
    return directory


@pytest.fixture
def settings(argument_dir):
    return Settings(
        temp_dir=str(argument_dir),
        env_passthrough=["PATH"],
        default_timeout_seconds=30,
        max_concurrency=4,
    )


@pytest.fixture
def engine(settings):
    return ContractEngine(settings)


FILE_STATE_PLUGIN = '''
import json
import os
import sys


def load_args(path):
    args = {}
    with open(path, encoding="utf-8") as handle:
        for line in handle.read().split("\\n"):
            if line:
                name, _, value = line.partition("=")
                args[name] = value
    return args


def ensure_present(dest):
    if os.path.exists(dest):
        return False, "file already exists"
    with open(dest, "w", encoding="utf-8"):
        pass
    return True, "file created"


def ensure_absent(dest):
    if not os.path.exists(dest):
        return False, "file already absent"
    os.remove(dest)
    return True, "file removed"


args = load_args(sys.argv[1])
dest = args.get("dest")
state = args.get("state", "present")
if not dest:
    print(json.dumps({"failed": True, "msg": "dest is required"}))
    sys.exit(1)
if state == "present":
    changed, msg = ensure_present(dest)
elif state == "absent":
    changed, msg = ensure_absent(dest)
else:
    print(json.dumps({"failed": True, "msg": "unsupported state: " + state}))
    sys.exit(1)
print(json.dumps({"changed": changed, "msg": msg, "dest": dest, "state": state}))
'''


@pytest.fixture
def file_state_plugin(make_plugin):
    """Idempotent file presence plugin (dest=..., state=present|absent)."""
    return make_plugin("file_state", FILE_STATE_PLUGIN)
