from __future__ import annotations

import json

import pytest

from modrun.cli import EXIT_FAILED, EXIT_OK, EXIT_USAGE, EXIT_VIOLATION, main, parse_params


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch, argument_dir, tmp_path):
    monkeypatch.setenv("MODRUN_TEMP_DIR", str(argument_dir))
    monkeypatch.setenv("MODRUN_PLUGIN_PATHS", json.dumps([str(tmp_path / "plugins")]))


def test_parse_params_splits_on_first_equals():
    assert parse_params(["dest=/tmp/x", "expr=a=b", "empty="]) == {
        "dest": "/tmp/x",
        "expr": "a=b",
        "empty": "",
    }


def test_parse_params_rejects_missing_equals():
    with pytest.raises(ValueError, match="name=value"):
        parse_params(["dest"])


def test_run_by_name_prints_report(file_state_plugin, tmp_path, capsys):
    dest = tmp_path / "x"

    first = main(["run", "file_state", f"dest={dest}", "state=present"])
    first_report = json.loads(capsys.readouterr().out)
    second = main(["run", "file_state", f"dest={dest}", "state=present"])
    second_report = json.loads(capsys.readouterr().out)

    assert first == EXIT_OK
    assert first_report["outcome"] == "Success"
    assert first_report["msg"] == "file created"
    assert second == EXIT_OK
    assert second_report["outcome"] == "SuccessNoChange"
    assert second_report["msg"] == "file already exists"


def test_run_failed_plugin_exit_code(file_state_plugin, capsys):
    assert main(["run", str(file_state_plugin), "state=present"]) == EXIT_FAILED
    assert json.loads(capsys.readouterr().out)["outcome"] == "Failed"


def test_run_violation_exit_code(make_plugin, capsys):
    plugin = make_plugin("chatty", "print('not json')\n")

    assert main(["run", str(plugin)]) == EXIT_VIOLATION
    assert json.loads(capsys.readouterr().out)["reason"] == "NotJSON"


def test_run_unknown_plugin_is_usage_error(capsys):
    assert main(["run", "nope"]) == EXIT_USAGE
    assert "Plugin not found" in capsys.readouterr().err


def test_batch_reports_worst_outcome(file_state_plugin, make_plugin, tmp_path, capsys):
    make_plugin("chatty", "print('not json')\n")
    batch_file = tmp_path / "batch.yaml"
    batch_file.write_text(
        f"""
invocations:
  - plugin: file_state
    params: {{dest: {tmp_path / "a"}}}
  - plugin: chatty
"""
    )

    code = main(["batch", str(batch_file), "--concurrency", "2"])
    reports = json.loads(capsys.readouterr().out)

    assert code == EXIT_VIOLATION
    assert [r["outcome"] for r in reports] == ["Success", "ContractViolation"]


def test_batch_zero_concurrency_flag_is_not_ignored(file_state_plugin, tmp_path, capsys):
    batch_file = tmp_path / "batch.yaml"
    batch_file.write_text(
        f"""
concurrency: 3
invocations:
  - plugin: file_state
    params: {{dest: {tmp_path / "a"}}}
"""
    )

    code = main(["batch", str(batch_file), "--concurrency", "0"])

    assert code == EXIT_USAGE
    assert "at least 1" in capsys.readouterr().err
    assert not (tmp_path / "a").exists()


def test_list_shows_discovered_plugins(file_state_plugin, capsys):
    assert main(["list"]) == EXIT_OK
    assert capsys.readouterr().out.startswith("file_state\t")
