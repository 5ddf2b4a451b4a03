"""Watch collector — records watcher activity into the event log.

Gives the watcher, import scanner and watch service one object to report
through, so none of them need to know how events are stored or printed.

Thread Safety:
    The collector delegates to ``EventLog`` which is internally locked.
    Safe for concurrent use from multiple checking threads.

"""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING

from assetwatch.observability.events import (
    CheckFailed,
    GroupInvalidated,
    ImportDetected,
    ResourceChanged,
    ResourceHashed,
    now_ns,
)
from assetwatch.observability.log import EventLog

if TYPE_CHECKING:
    from typing import Literal

    from assetwatch._types import Severity


class WatchCollector:
    """Event collector for resource watching.

    Args:
        log: The EventLog to store events in.
        verbose: Echo error-severity failures and invalidations to stderr.

    """

    __slots__ = ("_log", "_verbose")

    def __init__(self, log: EventLog | None = None, *, verbose: bool = False) -> None:
        self._log = log if log is not None else EventLog()
        self._verbose = verbose

    @property
    def log(self) -> EventLog:
        """The underlying event log."""
        return self._log

    @property
    def verbose(self) -> bool:
        return self._verbose

    # ----- Resource events -----

    def record_hashed(self, uri: str, digest: str, *, hash_ms: float = 0.0) -> None:
        """Record a memo miss that read and hashed a resource."""
        self._log.append(
            ResourceHashed(uri=uri, digest=digest, hash_ms=hash_ms, timestamp_ns=now_ns())
        )

    def record_import(self, parent_uri: str, uri: str) -> None:
        """Record an ``@import`` found while scanning a stylesheet."""
        self._log.append(ImportDetected(parent_uri=parent_uri, uri=uri, timestamp_ns=now_ns()))

    def record_resource_changed(self, uri: str, group: str) -> None:
        """Record the resource that triggered a group invalidation."""
        self._log.append(ResourceChanged(uri=uri, group=group, timestamp_ns=now_ns()))

    # ----- Cycle events -----

    def record_invalidation(self, group: str, key: str) -> None:
        """Record a cache entry invalidation."""
        self._log.append(GroupInvalidated(group=group, key=key, timestamp_ns=now_ns()))
        if self._verbose:
            print(f"  Invalidated: {key}", file=sys.stderr)

    def record_failure(
        self,
        stage: Literal["model", "resource", "import", "unexpected"],
        target: str,
        exc: BaseException,
        *,
        severity: Severity = "debug",
    ) -> None:
        """Record a failure absorbed by the fail-safe policy."""
        message = str(exc) or type(exc).__name__
        self._log.append(
            CheckFailed(
                stage=stage,
                target=target,
                message=message,
                severity=severity,
                timestamp_ns=now_ns(),
            )
        )
        if self._verbose and severity == "error":
            print(f"  Watch error ({stage}): {target}: {message}", file=sys.stderr)
