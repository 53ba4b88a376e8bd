"""YAML batch files describing many plugin invocations."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from modrun.contract.errors import ModrunError
from modrun.contract.models import InvocationRequest
from modrun.plugins.catalog import PluginCatalog

logger = logging.getLogger(__name__)


class BatchFileError(ModrunError):
    """Batch file missing or invalid."""


class InvocationSpec(BaseModel):
    """One entry of a batch file's ``invocations`` list."""

    plugin: str = Field(..., min_length=1, description="Plugin name or path")
    params: dict[str, str] = Field(default_factory=dict)
    timeout: float | None = Field(default=None, gt=0)
    env: dict[str, str] = Field(default_factory=dict)

    @field_validator("params", mode="before")
    @classmethod
    def stringify_scalars(cls, v: Any) -> Any:
        """YAML turns ``mode: 0644`` or ``force: yes`` into numbers/bools."""
        if not isinstance(v, dict):
            return v
        converted = {}
        for key, value in v.items():
            if isinstance(value, bool):
                value = "true" if value else "false"
            elif isinstance(value, (int, float)):
                value = str(value)
            elif value is None:
                value = ""
            converted[str(key)] = value
        return converted


class BatchFile(BaseModel):
    """Top-level batch file document."""

    concurrency: int | None = Field(default=None, ge=1)
    invocations: list[InvocationSpec] = Field(default_factory=list)


def load_batch(path: Path) -> BatchFile:
    """Load and validate a batch file.

    Raises:
        BatchFileError: If the file is missing or invalid
    """
    if not path.exists():
        raise BatchFileError(f"Batch file not found: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise BatchFileError(f"Invalid YAML in batch file: {e}") from e

    if not isinstance(data, dict):
        raise BatchFileError("Batch file must be a mapping with an 'invocations' list")

    try:
        return BatchFile(**data)
    except ValidationError as e:
        raise BatchFileError(f"Invalid batch file: {e}") from e


def build_requests(batch: BatchFile, catalog: PluginCatalog) -> list[InvocationRequest]:
    """Turn batch entries into invocation requests.

    Raises:
        BatchFileError: If an entry names an unknown plugin or bad parameters
    """
    requests = []
    for index, spec in enumerate(batch.invocations):
        try:
            plugin_path = catalog.resolve(spec.plugin)
            requests.append(
                InvocationRequest(
                    plugin_path=plugin_path,
                    params=spec.params,
                    timeout=spec.timeout,
                    env=spec.env,
                )
            )
        except ModrunError as e:
            raise BatchFileError(f"Invocation {index} ({spec.plugin}): {e}") from e
    logger.info("batch_loaded", extra={"count": len(requests)})
    return requests
