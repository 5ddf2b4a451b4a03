"""Change detection — hashes, import graph scanning, and cache invalidation."""

from assetwatch.watcher.core import ResourceWatcher
from assetwatch.watcher.hashes import HashMemo, HashStore
from assetwatch.watcher.imports import ImportScanner, ScanResult, find_imports, resolve_import
from assetwatch.watcher.listener import CallbackListener, NullListener, WatcherListener

__all__ = [
    "CallbackListener",
    "HashMemo",
    "HashStore",
    "ImportScanner",
    "NullListener",
    "ResourceWatcher",
    "ScanResult",
    "WatcherListener",
    "find_imports",
    "resolve_import",
]
