"""Typed errors for plugin invocation and catalog operations."""


class ModrunError(Exception):
    """Base class for modrun related errors."""


class EncodingError(ModrunError, ValueError):
    """Raised when a parameter set cannot be written as an argument file."""


class LaunchError(ModrunError):
    """Raised when a plugin executable cannot be started."""


class CatalogError(ModrunError):
    """Base class for plugin catalog errors."""


class DuplicatePluginError(CatalogError):
    """Raised when registering a plugin name that already exists."""


class PluginNotFoundError(CatalogError):
    """Raised when a plugin cannot be found by name."""
