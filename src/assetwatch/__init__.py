"""Assetwatch — change detection for grouped web assets.

Decides whether any script or stylesheet in a named group changed since it
was last inspected, following stylesheet ``@import`` graphs, and invalidates
the derived cache entry so dependent bundles get rebuilt.

Quick start::

    from pathlib import Path

    from assetwatch import CacheKey, MemoryCacheStore, ResourceWatcher, WatcherConfig

    cache = MemoryCacheStore()
    watcher = ResourceWatcher.from_config(WatcherConfig(root=Path("assets")), cache)
    watcher.check(CacheKey("core"))   # first run: builds the baseline
    watcher.check(CacheKey("core"))   # later runs: invalidates on change

Command line::

    assetwatch groups assets/
    assetwatch watch assets/ --verbose

"""

# PEP 703: Declare this module as free-threading safe
_Py_mod_gil = 0

__version__ = "0.1.0"
__all__ = [
    "CacheKey",
    "MemoryCacheStore",
    "ResourceWatcher",
    "WatcherConfig",
    "__version__",
    "list_groups",
    "watch",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import assetwatch`` fast while providing a clean top-level API.
    """
    if name == "WatcherConfig":
        from assetwatch.config import WatcherConfig

        return WatcherConfig

    if name == "CacheKey":
        from assetwatch.model.resource import CacheKey

        return CacheKey

    if name == "MemoryCacheStore":
        from assetwatch.cache import MemoryCacheStore

        return MemoryCacheStore

    if name == "ResourceWatcher":
        from assetwatch.watcher.core import ResourceWatcher

        return ResourceWatcher

    if name in ("list_groups", "watch"):
        from assetwatch import app

        return getattr(app, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
