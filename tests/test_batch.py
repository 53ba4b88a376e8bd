"""Tests for batch file loading."""

from __future__ import annotations

import pytest

from modrun.batch import BatchFileError, build_requests, load_batch
from modrun.plugins import PluginCatalog


class TestLoadBatch:
    """Test batch file parsing."""

    def test_load_valid_batch(self, tmp_path):
        """YAML scalars are turned into string parameters."""
        batch_file = tmp_path / "batch.yaml"
        batch_file.write_text(
            """
concurrency: 3
invocations:
  - plugin: file
    params:
      dest: /tmp/x
      state: present
      mode: 644
      force: yes
    timeout: 10
  - plugin: /opt/plugins/service
    env:
      LANG: C
"""
        )

        batch = load_batch(batch_file)

        assert batch.concurrency == 3
        assert len(batch.invocations) == 2
        assert batch.invocations[0].params == {
            "dest": "/tmp/x",
            "state": "present",
            "mode": "644",
            "force": "true",
        }
        assert batch.invocations[1].env == {"LANG": "C"}

    def test_missing_file(self, tmp_path):
        with pytest.raises(BatchFileError, match="not found"):
            load_batch(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path):
        batch_file = tmp_path / "batch.yaml"
        batch_file.write_text("invocations: [unclosed\n")

        with pytest.raises(BatchFileError, match="Invalid YAML"):
            load_batch(batch_file)

    def test_non_mapping_document(self, tmp_path):
        batch_file = tmp_path / "batch.yaml"
        batch_file.write_text("- plugin: file\n")

        with pytest.raises(BatchFileError, match="must be a mapping"):
            load_batch(batch_file)

    def test_schema_violation(self, tmp_path):
        batch_file = tmp_path / "batch.yaml"
        batch_file.write_text("invocations:\n  - plugin: file\n    timeout: -1\n")

        with pytest.raises(BatchFileError, match="Invalid batch file"):
            load_batch(batch_file)


class TestBuildRequests:
    """Test conversion of batch entries to invocation requests."""

    def test_resolves_plugins_through_catalog(self, tmp_path):
        batch_file = tmp_path / "batch.yaml"
        batch_file.write_text("invocations:\n  - plugin: file\n    params: {dest: /tmp/x}\n")
        catalog = PluginCatalog()
        catalog.register("file", "/opt/plugins/file")

        requests = build_requests(load_batch(batch_file), catalog)

        assert len(requests) == 1
        assert str(requests[0].plugin_path) == "/opt/plugins/file"
        assert dict(requests[0].params) == {"dest": "/tmp/x"}

    def test_unknown_plugin(self, tmp_path):
        batch_file = tmp_path / "batch.yaml"
        batch_file.write_text("invocations:\n  - plugin: nope\n")

        with pytest.raises(BatchFileError, match="Invocation 0"):
            build_requests(load_batch(batch_file), PluginCatalog())

    def test_bad_parameter_name(self, tmp_path):
        batch_file = tmp_path / "batch.yaml"
        batch_file.write_text("invocations:\n  - plugin: /bin/true\n    params: {'a=b': x}\n")

        with pytest.raises(BatchFileError, match="cannot contain"):
            build_requests(load_batch(batch_file), PluginCatalog())
