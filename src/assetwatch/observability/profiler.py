"""Check profiler — measures the latency of a single check cycle.

Records per-stage timing (resolve, detect, commit) and emits a
``CheckProfile`` event to the ``EventLog``.

Thread Safety:
    A profiler instance belongs to one check cycle (single-writer).
    Create one per call; the shared ``EventLog`` is internally locked.

"""

from __future__ import annotations

import sys
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING

from assetwatch.observability.events import CheckProfile, now_ns

if TYPE_CHECKING:
    from assetwatch.observability.log import EventLog

STAGES = ("resolve", "detect", "commit")


@dataclass(slots=True)
class _Timer:
    """Accumulates timing for a named stage."""

    name: str
    _start: float = 0.0
    elapsed_ms: float = 0.0

    def start(self) -> None:
        self._start = time.perf_counter()

    def stop(self) -> None:
        if self._start > 0:
            self.elapsed_ms += (time.perf_counter() - self._start) * 1000
            self._start = 0.0


class CheckProfiler:
    """Records per-stage timing for one check cycle.

    Usage::

        profiler = CheckProfiler(event_log, "core")
        profiler.start("resolve")
        # ... resolve group ...
        profiler.stop("resolve")
        profiler.finish(changed=False, resources_hashed=3)

    After ``finish()``, a ``CheckProfile`` event is appended to the log
    and, when verbose, a one-line summary is printed to stderr.
    Stopping a stage that was never started is a no-op, so ``finish()``
    may safely run from a ``finally`` block.

    """

    __slots__ = ("_group", "_log", "_t0", "_timers", "_verbose")

    def __init__(self, log: EventLog, group: str, *, verbose: bool = False) -> None:
        self._log = log
        self._group = group
        self._verbose = verbose
        self._t0 = time.perf_counter()
        self._timers = {name: _Timer(name=name) for name in STAGES}

    def start(self, stage: str) -> None:
        """Start timing a named stage."""
        timer = self._timers.get(stage)
        if timer is not None:
            timer.start()

    def stop(self, stage: str) -> None:
        """Stop timing a named stage."""
        timer = self._timers.get(stage)
        if timer is not None:
            timer.stop()

    def finish(self, *, changed: bool, resources_hashed: int) -> CheckProfile:
        """Finish profiling and emit the ``CheckProfile`` event.

        Returns the profile for testing / inspection.

        """
        for timer in self._timers.values():
            timer.stop()
        profile = CheckProfile(
            group=self._group,
            changed=changed,
            resources_hashed=resources_hashed,
            resolve_ms=self._timers["resolve"].elapsed_ms,
            detect_ms=self._timers["detect"].elapsed_ms,
            commit_ms=self._timers["commit"].elapsed_ms,
            total_ms=(time.perf_counter() - self._t0) * 1000,
            timestamp_ns=now_ns(),
        )

        self._log.append(profile)

        if self._verbose:
            _print_summary(profile)

        return profile


def _print_summary(p: CheckProfile) -> None:
    """Print a one-line timing summary to stderr."""
    verdict = "changed" if p.changed else "unchanged"
    noun = "resource" if p.resources_hashed == 1 else "resources"
    print(
        f"  [{p.total_ms:.0f}ms] {p.group} -> {verdict}, "
        f"{p.resources_hashed} {noun} hashed "
        f"(resolve: {p.resolve_ms:.0f}ms, detect: {p.detect_ms:.0f}ms, "
        f"commit: {p.commit_ms:.0f}ms)",
        file=sys.stderr,
    )


def compute_aggregate_stats(log: EventLog, *, limit: int = 100) -> dict:
    """Compute aggregate latency statistics from recent ``CheckProfile`` events.

    Returns a dict with p50, p95, p99, the invalidation ratio and
    per-stage averages.

    """
    profiles = log.query(event_type=CheckProfile, limit=limit)
    if not profiles:
        return {"count": 0}

    totals = sorted(p.total_ms for p in profiles)
    count = len(totals)

    def percentile(data: list[float], pct: float) -> float:
        idx = int(len(data) * pct / 100)
        return data[min(idx, len(data) - 1)]

    return {
        "count": count,
        "changed": sum(1 for p in profiles if p.changed),
        "total_ms": {
            "p50": round(percentile(totals, 50), 1),
            "p95": round(percentile(totals, 95), 1),
            "p99": round(percentile(totals, 99), 1),
            "min": round(totals[0], 1),
            "max": round(totals[-1], 1),
        },
        "avg_by_stage_ms": {
            "resolve": round(sum(p.resolve_ms for p in profiles) / count, 1),
            "detect": round(sum(p.detect_ms for p in profiles) / count, 1),
            "commit": round(sum(p.commit_ms for p in profiles) / count, 1),
        },
    }
