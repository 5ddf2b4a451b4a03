"""Assetwatch configuration.

WatcherConfig is the central configuration object, frozen after creation.
"""

from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True, slots=True)
class WatcherConfig:
    """Configuration for a resource watcher.

    Attributes:
        root: Path to the asset root directory. Relative resource uris are
              resolved against it. Always resolved to an absolute path on
              construction.
        model_file: Groups file (YAML), relative to root unless absolute.
        hash_algorithm: Digest used to fingerprint resource content
            (any ``hashlib`` name, or ``crc32``).
        verbose: Print per-check timing and error summaries to stderr.
        max_events: Capacity of the in-memory event log.
        watch_debounce_ms: Debounce window for filesystem change batches.
        watch_step_ms: Polling step used by the filesystem watcher.
        workers: Number of threads checking cache keys in parallel
            (0 = one per key).

    """

    root: Path = field(default_factory=Path.cwd)
    model_file: Path = field(default_factory=lambda: Path("groups.yaml"))
    hash_algorithm: str = "sha1"
    verbose: bool = False
    max_events: int = 10_000
    watch_debounce_ms: int = 300
    watch_step_ms: int = 100
    workers: int = 0

    def __post_init__(self) -> None:
        # Resolve root to absolute so that watchfiles (which returns
        # absolute paths) can be compared via Path.relative_to().
        if not self.root.is_absolute():
            object.__setattr__(self, "root", self.root.resolve())

    @property
    def model_path(self) -> Path:
        """Absolute path to the groups file."""
        if self.model_file.is_absolute():
            return self.model_file
        return self.root / self.model_file
