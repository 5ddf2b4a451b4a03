"""Watcher event model.

Defines the events recorded while checking groups for changes.

All events are frozen dataclasses with:
- ``timestamp_ns``: Monotonic nanosecond timestamp
- Descriptive fields for the specific event type

Thread Safety:
    All events are frozen (immutable) and safe to share across threads.

"""

import time
from dataclasses import dataclass
from typing import Literal, TypeAlias

from assetwatch._types import Severity


# ---------------------------------------------------------------------------
# Resource events
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ResourceHashed:
    """A resource was read and hashed (memo miss).

    Attributes:
        uri: Resource uri.
        digest: Freshly computed digest.
        hash_ms: Time spent locating and hashing in milliseconds.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    uri: str
    digest: str
    hash_ms: float
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class ImportDetected:
    """A stylesheet ``@import`` directive was found while scanning.

    Attributes:
        parent_uri: Stylesheet containing the directive.
        uri: Resolved uri of the imported stylesheet.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    parent_uri: str
    uri: str
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class ResourceChanged:
    """The resource that triggered a group invalidation.

    Attributes:
        uri: Changed resource uri.
        group: Group being checked.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    uri: str
    group: str
    timestamp_ns: int


# ---------------------------------------------------------------------------
# Cycle events
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class GroupInvalidated:
    """A cache entry was invalidated because its group changed.

    Attributes:
        group: Group name.
        key: Rendered cache key.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    group: str
    key: str
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class CheckFailed:
    """A failure that was absorbed by the fail-safe policy.

    Attributes:
        stage: Where the failure happened.
        target: Group name or resource uri involved.
        message: Error description.
        severity: ``debug`` for expected I/O trouble, ``error`` otherwise.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    stage: Literal["model", "resource", "import", "unexpected"]
    target: str
    message: str
    severity: Severity
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class CheckProfile:
    """Timing for one complete check cycle.

    Attributes:
        group: Group name that was checked.
        changed: Whether the cycle invalidated the cache entry.
        resources_hashed: Distinct uris measured during the cycle.
        resolve_ms: Time resolving the group from the model.
        detect_ms: Time hashing, comparing and scanning imports.
        commit_ms: Time merging the memo into the baseline.
        total_ms: Wall time for the whole cycle.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    group: str
    changed: bool
    resources_hashed: int
    resolve_ms: float
    detect_ms: float
    commit_ms: float
    total_ms: float
    timestamp_ns: int


# ---------------------------------------------------------------------------
# Union type
# ---------------------------------------------------------------------------

WatchEvent: TypeAlias = (
    ResourceHashed
    | ImportDetected
    | ResourceChanged
    | GroupInvalidated
    | CheckFailed
    | CheckProfile
)


def now_ns() -> int:
    """Return the current monotonic clock value in nanoseconds."""
    return time.monotonic_ns()
