"""Watch service — runs check cycles when files under the asset root change.

Monitors the asset root with watchfiles. Each debounced batch of relevant
changes triggers one check cycle per registered cache key:

- Script or stylesheet changed -> check every key
- Groups file changed -> check every key (the model is re-read each cycle)
- Anything else -> ignored
"""

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Literal

from watchfiles import Change

from assetwatch.config_loader import CONFIG_NAMES
from assetwatch.model.resource import ResourceType

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from assetwatch.config import WatcherConfig
    from assetwatch.model.resource import CacheKey
    from assetwatch.watcher.core import ResourceWatcher


@dataclass(frozen=True, slots=True)
class ChangeEvent:
    """A file change detected by the service.

    Attributes:
        path: Absolute path to the changed file.
        kind: Type of filesystem change.
        category: What kind of file changed.

    """

    path: Path
    kind: Literal["created", "modified", "deleted"]
    category: Literal["asset", "model", "config"]


# Mapping from watchfiles Change enum to our kind literals.
_CHANGE_KIND_MAP: dict[Change, Literal["created", "modified", "deleted"]] = {
    Change.added: "created",
    Change.modified: "modified",
    Change.deleted: "deleted",
}

_ASSET_SUFFIXES = frozenset(f".{member.value}" for member in ResourceType)


def categorize_change(path: Path, config: WatcherConfig) -> str | None:
    """Determine the category of a changed file.

    Returns None if the file is outside the root or not watched.

    """
    try:
        rel = path.relative_to(config.root)
    except ValueError:
        if path == config.model_path:
            return "model"
        return None

    if not rel.parts:
        return None
    if path == config.model_path:
        return "model"
    if len(rel.parts) == 1 and rel.parts[0] in CONFIG_NAMES:
        return "config"
    if path.suffix.lower() in _ASSET_SUFFIXES:
        return "asset"
    return None


class WatchService:
    """Checks cache keys whenever watched files change.

    Uses watchfiles for efficient filesystem monitoring in a background
    thread. Keys of one batch are checked concurrently on a thread pool;
    the watcher's baseline is safe for that.

    Args:
        watcher: The resource watcher that performs each check cycle.
        config: Root, debounce and worker settings.
        keys: Cache keys to check on every relevant change.
        on_batch: Called after each batch with the events that triggered it.

    """

    def __init__(
        self,
        watcher: ResourceWatcher,
        config: WatcherConfig,
        keys: Iterable[CacheKey] = (),
        *,
        on_batch: Callable[[tuple[ChangeEvent, ...]], object] | None = None,
    ) -> None:
        self._watcher = watcher
        self._config = config
        self._keys: list[CacheKey] = list(keys)
        self._keys_lock = threading.Lock()
        self._on_batch = on_batch
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def is_running(self) -> bool:
        """Whether the service background thread is active."""
        return self._thread is not None and self._thread.is_alive()

    @property
    def keys(self) -> tuple[CacheKey, ...]:
        with self._keys_lock:
            return tuple(self._keys)

    def register(self, key: CacheKey) -> None:
        """Add a cache key to check on future changes (duplicates ignored)."""
        with self._keys_lock:
            if key not in self._keys:
                self._keys.append(key)

    def check_all(self) -> None:
        """Run one check cycle for every registered key, in parallel."""
        keys = self.keys
        if not keys:
            return
        workers = self._config.workers or len(keys)
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="assetwatch-check") as pool:
            # check() never raises for cycle failures; list() surfaces anything else.
            list(pool.map(self._watcher.check, keys))

    def start(self) -> None:
        """Prime the baseline, then watch for file changes in a background thread."""
        if self.is_running:
            return

        self.check_all()
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._watch_loop,
            name="assetwatch-service",
            daemon=True,
        )
        self._thread.start()

    def stop(self) -> None:
        """Signal the service to stop and wait for the thread to finish."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=5.0)
            self._thread = None

    def handle_changes(self, raw_changes: Iterable[tuple[Change, str]]) -> tuple[ChangeEvent, ...]:
        """Categorize a batch of raw changes and check keys if any are relevant.

        Returns the relevant events (empty when the batch was ignored). A
        failing ``on_batch`` callback is recorded on the watcher's collector
        and does not stop the service.

        """
        events: list[ChangeEvent] = []
        for change_type, path_str in raw_changes:
            path = Path(path_str)
            category = categorize_change(path, self._config)
            if category is None:
                continue
            kind = _CHANGE_KIND_MAP.get(change_type, "modified")
            events.append(ChangeEvent(path=path, kind=kind, category=category))  # type: ignore[arg-type]

        batch = tuple(events)
        if batch:
            self.check_all()
            if self._on_batch is not None:
                try:
                    self._on_batch(batch)
                except Exception as exc:
                    self._watcher.collector.record_failure(
                        "unexpected", "on_batch", exc, severity="error"
                    )
        return batch

    def _watch_loop(self) -> None:
        """Background thread: run watchfiles and check keys on each batch."""
        from watchfiles import watch

        watch_paths = [self._config.root]
        if not self._config.model_path.is_relative_to(self._config.root):
            watch_paths.append(self._config.model_path)

        for raw_changes in watch(
            *watch_paths,
            stop_event=self._stop_event,
            debounce=self._config.watch_debounce_ms,
            step=self._config.watch_step_ms,
        ):
            self.handle_changes(raw_changes)
