"""Digest stores — the long-lived baseline and the per-cycle memo.

``HashStore`` holds the digest of every resource as of the last completed
check cycle. It is shared by all checking threads, so it is split into
independently locked stripes: two cycles touching different uris rarely
contend on the same lock.

``HashMemo`` belongs to a single check cycle. It guarantees each uri is
read and hashed at most once per cycle even when the import graph reaches
it through several paths.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable, ItemsView, Iterable

    from assetwatch._types import Digest, ResourceUri


@dataclass(slots=True)
class _Stripe:
    lock: threading.Lock = field(default_factory=threading.Lock)
    digests: dict[ResourceUri, Digest] = field(default_factory=dict)


class HashStore:
    """Thread-safe uri -> digest baseline with lock striping.

    Args:
        stripes: Number of independently locked partitions.

    """

    __slots__ = ("_stripes",)

    def __init__(self, stripes: int = 16) -> None:
        if stripes < 1:
            msg = "stripes must be >= 1"
            raise ValueError(msg)
        self._stripes = tuple(_Stripe() for _ in range(stripes))

    def _stripe(self, uri: ResourceUri) -> _Stripe:
        return self._stripes[hash(uri) % len(self._stripes)]

    def get(self, uri: ResourceUri) -> Digest | None:
        stripe = self._stripe(uri)
        with stripe.lock:
            return stripe.digests.get(uri)

    def put(self, uri: ResourceUri, digest: Digest) -> None:
        stripe = self._stripe(uri)
        with stripe.lock:
            stripe.digests[uri] = digest

    def merge(self, entries: Iterable[tuple[ResourceUri, Digest]]) -> int:
        """Add or overwrite every entry. Returns the number merged.

        Only the given uris are touched; entries measured by other
        cycles are left alone.

        """
        count = 0
        for uri, digest in entries:
            self.put(uri, digest)
            count += 1
        return count

    def snapshot(self) -> dict[ResourceUri, Digest]:
        """Copy of the current baseline (each stripe copied under its lock)."""
        result: dict[ResourceUri, Digest] = {}
        for stripe in self._stripes:
            with stripe.lock:
                result.update(stripe.digests)
        return result

    def clear(self) -> None:
        for stripe in self._stripes:
            with stripe.lock:
                stripe.digests.clear()

    def __contains__(self, uri: object) -> bool:
        if not isinstance(uri, str):
            return False
        return self.get(uri) is not None

    def __len__(self) -> int:
        total = 0
        for stripe in self._stripes:
            with stripe.lock:
                total += len(stripe.digests)
        return total


class HashMemo:
    """Digests computed during one check cycle. Not thread-safe."""

    __slots__ = ("_digests",)

    def __init__(self) -> None:
        self._digests: dict[ResourceUri, Digest] = {}

    def digest(self, uri: ResourceUri, compute: Callable[[ResourceUri], Digest]) -> Digest:
        """Return the memoized digest for *uri*, computing it on first use.

        A failing ``compute`` stores nothing, so the uri is retried on the
        next lookup.

        """
        cached = self._digests.get(uri)
        if cached is None:
            cached = compute(uri)
            self._digests[uri] = cached
        return cached

    def items(self) -> ItemsView[ResourceUri, Digest]:
        return self._digests.items()

    def clear(self) -> None:
        self._digests.clear()

    def __contains__(self, uri: object) -> bool:
        return uri in self._digests

    def __len__(self) -> int:
        return len(self._digests)
