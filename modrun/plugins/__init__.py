"""Plugin lookup by name."""

from .catalog import PluginCatalog, build_catalog, is_executable_file

__all__ = ["PluginCatalog", "build_catalog", "is_executable_file"]
