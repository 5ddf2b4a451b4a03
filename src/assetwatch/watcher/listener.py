"""Watcher listeners — observe which resource and group triggered a rebuild."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from collections.abc import Callable

    from assetwatch.model.resource import CacheKey, Resource


class WatcherListener(Protocol):
    """Hooks invoked by ResourceWatcher.

    ``on_resource_changed`` fires once per cycle for the resource that
    triggered the invalidation. ``on_group_changed`` fires once per cycle,
    right before the cache entry is invalidated.

    """

    def on_resource_changed(self, resource: Resource) -> None: ...

    def on_group_changed(self, key: CacheKey) -> None: ...


class NullListener:
    """Listener that ignores every notification."""

    __slots__ = ()

    def on_resource_changed(self, resource: Resource) -> None:
        pass

    def on_group_changed(self, key: CacheKey) -> None:
        pass


class CallbackListener:
    """Adapts plain callables to the listener protocol.

    Args:
        on_resource: Called with the changed Resource.
        on_group: Called with the CacheKey about to be invalidated.

    """

    __slots__ = ("_on_group", "_on_resource")

    def __init__(
        self,
        *,
        on_resource: Callable[[Resource], object] | None = None,
        on_group: Callable[[CacheKey], object] | None = None,
    ) -> None:
        self._on_resource = on_resource
        self._on_group = on_group

    def on_resource_changed(self, resource: Resource) -> None:
        if self._on_resource is not None:
            self._on_resource(resource)

    def on_group_changed(self, key: CacheKey) -> None:
        if self._on_group is not None:
            self._on_group(key)
