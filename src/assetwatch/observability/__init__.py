"""Watcher observability — structured events for every check cycle.

Records what the watcher measured and decided:

- **Resources**: hashes computed, ``@import`` directives followed
- **Cycles**: invalidations, absorbed failures, per-stage timing

All events are frozen dataclasses with nanosecond timestamps, safe for
concurrent production from multiple checking threads.

Quick Start:
    >>> from assetwatch.observability import EventLog, WatchCollector
    >>> log = EventLog()
    >>> collector = WatchCollector(log)
    >>> # Pass collector to ResourceWatcher(..., collector=collector)

"""

from assetwatch.observability.collector import WatchCollector
from assetwatch.observability.events import (
    CheckFailed,
    CheckProfile,
    GroupInvalidated,
    ImportDetected,
    ResourceChanged,
    ResourceHashed,
    WatchEvent,
    now_ns,
)
from assetwatch.observability.log import EventLog
from assetwatch.observability.profiler import CheckProfiler, compute_aggregate_stats

__all__ = [
    "CheckFailed",
    "CheckProfile",
    "CheckProfiler",
    "EventLog",
    "GroupInvalidated",
    "ImportDetected",
    "ResourceChanged",
    "ResourceHashed",
    "WatchCollector",
    "WatchEvent",
    "compute_aggregate_stats",
    "now_ns",
]
