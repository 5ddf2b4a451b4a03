"""Tests for assetwatch.banner — startup banner output."""

from __future__ import annotations

import io
import sys
from pathlib import Path
from unittest.mock import patch

from assetwatch.banner import print_banner
from assetwatch.config import WatcherConfig


def _capture(**kwargs: object) -> str:
    buf = io.StringIO()
    with patch.object(sys, "stderr", buf):
        print_banner(WatcherConfig(root=Path("/tmp/assets")), **kwargs)  # type: ignore[arg-type]
    return buf.getvalue()


class TestPrintBanner:
    """Tests for the startup banner."""

    def test_counts_and_timing(self) -> None:
        output = _capture(group_count=3, resource_count=7, prime_ms=12.4)
        assert "3 groups, 7 resources hashed" in output
        assert "12ms" in output
        assert "Watching /tmp/assets for changes" in output

    def test_singular_labels(self) -> None:
        output = _capture(group_count=1, resource_count=1)
        assert "1 group, 1 resource hashed" in output

    def test_model_and_digest(self) -> None:
        output = _capture(group_count=0, resource_count=0)
        assert "model: /tmp/assets/groups.yaml" in output
        assert "digest: sha1" in output

    def test_warnings(self) -> None:
        output = _capture(group_count=1, resource_count=0, warnings=["group 'x' has no resources"])
        assert "group 'x' has no resources" in output
