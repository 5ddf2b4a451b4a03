"""Startup banner for ``assetwatch watch``.

Detects ``NO_COLOR`` / ``TERM`` for safe fallback to plain text.
"""

from __future__ import annotations

import os
import sys
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from assetwatch.config import WatcherConfig


def _supports_color() -> bool:
    """Return True if the terminal supports ANSI colors."""
    if os.environ.get("NO_COLOR"):
        return False
    if os.environ.get("TERM") == "dumb":
        return False
    return hasattr(sys.stderr, "isatty") and sys.stderr.isatty()


_COLOR = _supports_color()

_RESET = "\033[0m" if _COLOR else ""
_BOLD = "\033[1m" if _COLOR else ""
_DIM = "\033[2m" if _COLOR else ""
_GREEN = "\033[32m" if _COLOR else ""
_YELLOW = "\033[33m" if _COLOR else ""


def print_banner(
    config: WatcherConfig,
    group_count: int,
    resource_count: int,
    *,
    prime_ms: float = 0.0,
    warnings: list[str] | None = None,
) -> None:
    """Print the watch startup banner to stderr.

    Args:
        config: Resolved WatcherConfig.
        group_count: Number of groups being watched.
        resource_count: Number of distinct resources across those groups.
        prime_ms: Time spent building the initial baseline in milliseconds.
        warnings: Optional list of warning messages to display.

    """
    from assetwatch import __version__

    groups_label = "group" if group_count == 1 else "groups"
    resources_label = "resource" if resource_count == 1 else "resources"
    timing = f" {_DIM}in {prime_ms:.0f}ms{_RESET}" if prime_ms > 0 else ""

    lines: list[str] = [
        "",
        f"  {_BOLD}assetwatch{_RESET} {_DIM}v{__version__}{_RESET}  {_GREEN}[watch]{_RESET}",
        f"  {_DIM}{'─' * 43}{_RESET}",
        f"  {_DIM}├─{_RESET} {group_count} {groups_label}, "
        f"{resource_count} {resources_label} hashed{timing}",
        f"  {_DIM}├─{_RESET} model: {_DIM}{config.model_path}{_RESET}",
        f"  {_DIM}└─{_RESET} digest: {config.hash_algorithm}",
        "",
        f"  {_DIM}Watching {config.root} for changes...{_RESET}",
    ]

    if warnings:
        lines.append("")
        lines.extend(f"  {_YELLOW}!{_RESET} {w}" for w in warnings)

    lines.append("")

    print("\n".join(lines), file=sys.stderr)
