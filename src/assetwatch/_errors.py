"""Assetwatch error hierarchy.

All assetwatch-specific errors inherit from AssetWatchError for easy catching.
"""


class AssetWatchError(Exception):
    """Base error for all assetwatch operations."""


class ConfigError(AssetWatchError):
    """Invalid or missing configuration."""


class ModelError(AssetWatchError):
    """The group model could not be loaded, or a group is unknown."""


class ResourceNotFoundError(AssetWatchError, OSError):
    """A resource uri could not be resolved to a readable stream."""


class ScanError(AssetWatchError):
    """A stylesheet could not be scanned for ``@import`` directives."""
