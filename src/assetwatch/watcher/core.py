"""Resource watcher — invalidates cache entries whose group has changed.

A check cycle for one cache key:

1. Resolve the key's group from the current model.
2. Walk the group's resources in order. Each resource is hashed (once per
   cycle, via the call-scoped HashMemo) and compared with the baseline;
   unchanged stylesheets are further checked through their imports.
3. On the first changed resource, notify the listener and invalidate the
   cache entry. Resources after it are not examined in this cycle; they
   are re-measured on the next one.
4. Always merge whatever was measured into the baseline.

Failures never reach the caller. A group that cannot be resolved, a
resource that cannot be read, or a stylesheet that cannot be scanned all
degrade to "unchanged": a stale cache entry is preferable to a crashed or
needlessly rebuilding pipeline.

Thread Safety:
    ``check`` may run concurrently for different keys. The only shared
    state is the lock-striped HashStore baseline; each cycle owns its memo.

"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING

from assetwatch.model.resource import ResourceType
from assetwatch.observability.collector import WatchCollector
from assetwatch.observability.profiler import CheckProfiler
from assetwatch.watcher.hashes import HashMemo, HashStore
from assetwatch.watcher.imports import ImportScanner, ScanResult
from assetwatch.watcher.listener import NullListener

if TYPE_CHECKING:
    from collections.abc import Mapping

    from assetwatch._types import Digest, ResourceUri
    from assetwatch.cache import CacheStore
    from assetwatch.config import WatcherConfig
    from assetwatch.model.factory import ModelProvider
    from assetwatch.model.resource import CacheKey, Group, Resource
    from assetwatch.resources.hashing import HashStrategy
    from assetwatch.resources.locator import Locator
    from assetwatch.watcher.listener import WatcherListener


class ResourceWatcher:
    """Detects changed resources and invalidates the affected cache entries.

    Args:
        model_provider: Supplies the current group model.
        locator: Opens resource uris.
        hash_strategy: Digests resource content.
        cache_store: Receives invalidations.
        listener: Notified of the triggering resource and group.
        baseline: Digest baseline to diff against (default: a fresh, empty store).
        collector: Event sink (default: a private collector and log).

    """

    __slots__ = (
        "_baseline",
        "_cache_store",
        "_collector",
        "_hash_strategy",
        "_listener",
        "_locator",
        "_model_provider",
        "_scanner",
    )

    def __init__(
        self,
        model_provider: ModelProvider,
        locator: Locator,
        hash_strategy: HashStrategy,
        cache_store: CacheStore,
        *,
        listener: WatcherListener | None = None,
        baseline: HashStore | None = None,
        collector: WatchCollector | None = None,
    ) -> None:
        self._model_provider = model_provider
        self._locator = locator
        self._hash_strategy = hash_strategy
        self._cache_store = cache_store
        self._listener = listener if listener is not None else NullListener()
        self._baseline = baseline if baseline is not None else HashStore()
        self._collector = collector if collector is not None else WatchCollector()
        self._scanner = ImportScanner(locator, self._collector)

    @classmethod
    def from_config(
        cls,
        config: WatcherConfig,
        cache_store: CacheStore,
        *,
        listener: WatcherListener | None = None,
        collector: WatchCollector | None = None,
    ) -> ResourceWatcher:
        """Build a watcher reading the YAML groups file under ``config.root``."""
        from assetwatch.model.factory import YamlModelProvider
        from assetwatch.observability.log import EventLog
        from assetwatch.resources.hashing import get_hash_strategy
        from assetwatch.resources.locator import LocatorFactory

        if collector is None:
            collector = WatchCollector(EventLog(config.max_events), verbose=config.verbose)
        return cls(
            YamlModelProvider(config.model_path),
            LocatorFactory.for_root(config.root),
            get_hash_strategy(config.hash_algorithm),
            cache_store,
            listener=listener,
            collector=collector,
        )

    @property
    def baseline(self) -> HashStore:
        """The digest baseline shared by all cycles of this watcher."""
        return self._baseline

    @property
    def previous_hashes(self) -> Mapping[ResourceUri, Digest]:
        """Snapshot of the baseline as of the last completed cycles."""
        return self._baseline.snapshot()

    @property
    def collector(self) -> WatchCollector:
        return self._collector

    # ----- Check cycle -----

    def check(self, key: CacheKey) -> None:
        """Check the group named by *key* and invalidate its entry if it changed.

        Never raises for failures inside the cycle; they are recorded on the
        collector and treated as "unchanged".

        Raises:
            ValueError: If *key* is None.

        """
        if key is None:
            msg = "check() requires a cache key"
            raise ValueError(msg)

        memo = HashMemo()
        profiler = CheckProfiler(
            self._collector.log, key.group_name, verbose=self._collector.verbose
        )
        changed = False
        try:
            profiler.start("resolve")
            try:
                group = self._model_provider.current_model().group(key.group_name)
            except Exception as exc:
                self._collector.record_failure("model", key.group_name, exc, severity="error")
                return
            finally:
                profiler.stop("resolve")

            profiler.start("detect")
            changed = self._is_group_changed(group, memo)
            profiler.stop("detect")
            if changed:
                self._on_group_changed(key)
        except Exception as exc:
            changed = False
            self._collector.record_failure("unexpected", key.group_name, exc, severity="error")
        finally:
            hashed = len(memo)
            profiler.start("commit")
            self._commit(memo)
            profiler.stop("commit")
            profiler.finish(changed=changed, resources_hashed=hashed)

    def is_group_changed(self, group: Group, memo: HashMemo | None = None) -> bool:
        """True if any resource of *group* changed since the baseline.

        Stops at the first changed resource, notifying the listener about it.
        Without a *memo* the digests measured here are discarded and the
        baseline does not advance; ``check`` is the committing entry point.

        """
        return self._is_group_changed(group, memo if memo is not None else HashMemo())

    def is_changed(self, resource: Resource, memo: HashMemo | None = None) -> bool:
        """True if *resource* (or, for stylesheets, anything it imports) changed.

        Unreadable resources count as unchanged.

        """
        memo = memo if memo is not None else HashMemo()
        return self._check_resource(resource, memo, frozenset()) is ScanResult.CHANGED

    # ----- Internals -----

    def _is_group_changed(self, group: Group, memo: HashMemo) -> bool:
        for resource in group.resources:
            if self._check_resource(resource, memo, frozenset()) is ScanResult.CHANGED:
                self._collector.record_resource_changed(resource.uri, group.name)
                self._listener.on_resource_changed(resource)
                return True
        return False

    def _check_resource(
        self, resource: Resource, memo: HashMemo, visited: frozenset[str]
    ) -> ScanResult:
        try:
            current = memo.digest(resource.uri, self._hash)
        except OSError as exc:
            self._collector.record_failure("resource", resource.uri, exc)
            return ScanResult.FAILED

        previous = self._baseline.get(resource.uri)
        # No baseline yet: first sighting is never a change.
        if previous is not None and previous != current:
            return ScanResult.CHANGED

        if resource.type is ResourceType.STYLESHEET:
            return self._scanner.scan(
                resource,
                lambda imported, path: self._check_resource(imported, memo, path),
                visited,
            )
        return ScanResult.UNCHANGED

    def _hash(self, uri: ResourceUri) -> Digest:
        t0 = time.perf_counter()
        with self._locator.locate(uri) as stream:
            digest = self._hash_strategy.hash(stream)
        self._collector.record_hashed(uri, digest, hash_ms=(time.perf_counter() - t0) * 1000)
        return digest

    def _on_group_changed(self, key: CacheKey) -> None:
        self._listener.on_group_changed(key)
        self._cache_store.invalidate(key)
        self._collector.record_invalidation(key.group_name, str(key))

    def _commit(self, memo: HashMemo) -> None:
        self._baseline.merge(memo.items())
        memo.clear()
