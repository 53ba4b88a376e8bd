"""Name-to-executable catalog for plugins."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable
from pathlib import Path

from modrun.contract.errors import DuplicatePluginError, PluginNotFoundError

logger = logging.getLogger(__name__)


def is_executable_file(path: Path) -> bool:
    return path.is_file() and os.access(path, os.X_OK)


class PluginCatalog:
    """In-memory catalog mapping plugin names to executable paths."""

    def __init__(self) -> None:
        self._plugins: dict[str, Path] = {}

    def register(self, name: str, path: str | Path) -> None:
        """Register a plugin executable under ``name``.

        Raises:
            DuplicatePluginError: If ``name`` already exists.
        """

        name = name.strip()
        if not name:
            raise ValueError("Plugin name cannot be empty")
        if name in self._plugins:
            raise DuplicatePluginError(f"Plugin already registered: {name}")
        self._plugins[name] = Path(path)

    def register_many(self, plugins: Iterable[tuple[str, str | Path]]) -> None:
        """Register multiple ``(name, path)`` pairs."""

        for name, path in plugins:
            self.register(name, path)

    def discover(self, directories: Iterable[str | Path]) -> int:
        """Register every executable file found directly in ``directories``.

        A plugin is named after its file stem. When two directories provide
        the same name the first one searched wins. Returns the number of
        plugins added.
        """

        added = 0
        for directory in directories:
            base = Path(directory)
            if not base.is_dir():
                logger.warning("plugin_directory_missing", extra={"directory": str(base)})
                continue
            for candidate in sorted(base.iterdir()):
                if not is_executable_file(candidate):
                    continue
                name = candidate.stem
                if name in self._plugins:
                    logger.info(
                        "plugin_shadowed",
                        extra={"plugin": name, "path": str(candidate), "kept": str(self._plugins[name])},
                    )
                    continue
                self._plugins[name] = candidate
                added += 1
        logger.info("plugins_discovered", extra={"count": added})
        return added

    def get(self, name: str) -> Path:
        """Get a plugin path by name.

        Raises:
            PluginNotFoundError: If the plugin does not exist.
        """

        try:
            return self._plugins[name]
        except KeyError as exc:
            raise PluginNotFoundError(f"Plugin not found: {name}") from exc

    def resolve(self, name_or_path: str | Path) -> Path:
        """Return an explicit path as-is if it exists, else look up by name."""

        candidate = Path(name_or_path)
        if candidate.exists() or os.sep in str(name_or_path):
            return candidate
        return self.get(str(name_or_path))

    def list_names(self) -> list[str]:
        """List all registered plugin names."""

        return sorted(self._plugins.keys())

    def clear(self) -> None:
        """Clear all registered plugins (test utility)."""

        self._plugins.clear()


def build_catalog(directories: Iterable[str | Path]) -> PluginCatalog:
    """Build a catalog populated from the given search directories."""

    catalog = PluginCatalog()
    catalog.discover(directories)
    return catalog
