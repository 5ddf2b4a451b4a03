"""Tests for assetwatch.watcher.core — the check cycle end to end."""

from __future__ import annotations

import hashlib
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import pytest

from assetwatch.cache import MemoryCacheStore
from assetwatch.model.factory import StaticModelProvider, YamlModelProvider
from assetwatch.model.resource import CacheKey, Group, Model, Resource, ResourceType
from assetwatch.observability.events import CheckFailed, CheckProfile, GroupInvalidated
from assetwatch.resources.hashing import HashlibStrategy
from assetwatch.resources.locator import FileLocator
from assetwatch.watcher.core import ResourceWatcher
from assetwatch.watcher.hashes import HashMemo, HashStore
from assetwatch.watcher.listener import CallbackListener


def _sha1(text: str) -> str:
    return hashlib.sha1(text.encode()).hexdigest()


def _hashed(harness, suffix: str) -> int:
    """Number of times a path ending in *suffix* was hashed."""
    return sum(1 for name in harness.hashing.calls if name.endswith(suffix))


# ---------------------------------------------------------------------------
# Baseline and first run
# ---------------------------------------------------------------------------


class TestFirstRun:
    """A resource seen for the first time is never reported as changed."""

    def test_first_check_does_not_invalidate(self, harness) -> None:
        harness.watcher.check(CacheKey("g1"))

        assert harness.listener.groups == []
        assert harness.listener.resources == []
        assert CacheKey("g1") not in harness.cache

    def test_first_check_records_baseline(self, harness) -> None:
        harness.watcher.check(CacheKey("g1"))

        assert harness.watcher.previous_hashes == {"a.js": _sha1("console.log('a');\n")}

    def test_unknown_digest_is_unchanged(self, harness) -> None:
        assert harness.watcher.is_changed(Resource.create("a.js")) is False

    def test_injected_baseline_is_used(self, asset_root: Path) -> None:
        baseline = HashStore()
        baseline.put("a.js", "stale-digest")
        watcher = ResourceWatcher(
            YamlModelProvider(asset_root / "groups.yaml"),
            FileLocator(asset_root),
            HashlibStrategy(),
            MemoryCacheStore(),
            baseline=baseline,
        )

        assert watcher.baseline is baseline
        assert watcher.is_changed(Resource.create("a.js")) is True


# ---------------------------------------------------------------------------
# Change detection
# ---------------------------------------------------------------------------


class TestChangeDetection:
    """Edits to group members trigger exactly one invalidation."""

    def test_second_check_without_edit_is_idempotent(self, harness) -> None:
        harness.watcher.check(CacheKey("g1"))
        harness.watcher.check(CacheKey("g1"))

        assert harness.listener.groups == []

    def test_edit_invalidates_group(self, harness) -> None:
        key = CacheKey("g1")
        harness.watcher.check(key)
        harness.write("a.js", "console.log('edited');\n")
        harness.watcher.check(key)

        assert harness.listener.resources == [Resource("a.js", ResourceType.SCRIPT)]
        assert harness.listener.groups == [key]
        assert harness.cache.is_stale(key)

    def test_baseline_advances_after_invalidation(self, harness) -> None:
        key = CacheKey("g1")
        harness.watcher.check(key)
        harness.write("a.js", "console.log('edited');\n")
        harness.watcher.check(key)
        harness.watcher.check(key)

        assert harness.listener.groups == [key]
        assert harness.watcher.previous_hashes["a.js"] == _sha1("console.log('edited');\n")

    def test_invalidation_replaces_cached_value_with_tombstone(self, harness) -> None:
        key = CacheKey("g1")
        harness.cache.put(key, "bundle-v1")
        harness.watcher.check(key)
        harness.write("a.js", "changed")
        harness.watcher.check(key)

        assert key in harness.cache
        assert harness.cache.get(key) is None

    def test_single_trigger_stops_at_first_change(self, harness) -> None:
        key = CacheKey("all")
        harness.watcher.check(key)
        harness.write("css/b.css", "body { margin: 1px; }\n")
        harness.hashing.calls.clear()

        harness.watcher.check(key)

        assert harness.listener.resources == [Resource("css/b.css", ResourceType.STYLESHEET)]
        assert harness.listener.groups == [key]
        # Resources after the first change are left for the next cycle.
        assert _hashed(harness, "z.js") == 0

    def test_invalidation_event_recorded(self, harness) -> None:
        key = CacheKey("g1")
        harness.watcher.check(key)
        harness.write("a.js", "changed")
        harness.watcher.check(key)

        events = harness.watcher.collector.log.query(event_type=GroupInvalidated)
        assert len(events) == 1
        assert events[0].group == "g1"

    def test_profile_emitted_per_cycle(self, harness) -> None:
        harness.watcher.check(CacheKey("all"))

        profiles = harness.watcher.collector.log.query(event_type=CheckProfile)
        assert len(profiles) == 1
        assert profiles[0].group == "all"
        assert profiles[0].changed is False
        # a.js, css/b.css, css/c.css (imported), z.js
        assert profiles[0].resources_hashed == 4


# ---------------------------------------------------------------------------
# Stylesheet imports
# ---------------------------------------------------------------------------


class TestImports:
    """Changes reached through @import invalidate the importing group."""

    def test_imported_change_invalidates_group(self, harness) -> None:
        key = CacheKey("g2")
        harness.watcher.check(key)
        harness.write("css/c.css", "h1 { color: blue; }\n")
        harness.watcher.check(key)

        assert harness.listener.resources == [Resource("css/b.css", ResourceType.STYLESHEET)]
        assert harness.listener.groups == [key]

    def test_imported_resources_join_baseline(self, harness) -> None:
        harness.watcher.check(CacheKey("g2"))

        assert set(harness.watcher.previous_hashes) == {"css/b.css", "css/c.css"}

    def test_self_import_terminates_unchanged(self, harness) -> None:
        key = CacheKey("g2")
        harness.write("css/b.css", '@import "b.css";\nbody { margin: 0; }\n')
        harness.watcher.check(key)
        harness.watcher.check(key)

        assert harness.listener.groups == []
        assert harness.watcher.collector.log.failures() == []

    def test_self_import_still_detects_own_edit(self, harness) -> None:
        key = CacheKey("g2")
        harness.write("css/b.css", '@import "b.css";\n')
        harness.watcher.check(key)
        harness.write("css/b.css", '@import "b.css";\np { margin: 0; }\n')
        harness.watcher.check(key)

        assert harness.listener.groups == [key]

    def test_import_cycle_detects_change_inside_cycle(self, harness) -> None:
        key = CacheKey("g2")
        harness.write("css/c.css", '@import url("b.css");\nh1 { color: red; }\n')
        harness.watcher.check(key)
        harness.watcher.check(key)
        assert harness.listener.groups == []

        harness.write("css/c.css", '@import url("b.css");\nh1 { color: green; }\n')
        harness.watcher.check(key)

        assert harness.listener.groups == [key]

    def test_diamond_import_hashed_once_per_cycle(self, harness) -> None:
        harness.write("css/b.css", '@import "c.css";\n@import "d.css";\n')
        harness.write("css/c.css", '@import "e.css";\n')
        harness.write("css/d.css", '@import "e.css";\n')
        harness.write("css/e.css", "em { font-style: normal; }\n")

        harness.watcher.check(CacheKey("g2"))

        assert _hashed(harness, "e.css") == 1
        assert "css/e.css" in harness.watcher.previous_hashes

    def test_missing_import_does_not_block_siblings(self, harness) -> None:
        key = CacheKey("g2")
        harness.write("css/b.css", '@import "missing.css";\n@import "c.css";\n')
        harness.watcher.check(key)
        harness.write("css/c.css", "h1 { color: blue; }\n")
        harness.watcher.check(key)

        assert harness.listener.groups == [key]
        failures = harness.watcher.collector.log.failures()
        assert {f.target for f in failures} == {"css/missing.css"}
        assert all(f.stage == "resource" and f.severity == "debug" for f in failures)

    def test_undecodable_import_is_treated_as_unchanged(self, harness) -> None:
        key = CacheKey("g2")
        (harness.root / "css" / "c.css").write_bytes(b"\xff\xfe\x00bad")
        harness.watcher.check(key)
        harness.watcher.check(key)

        assert harness.listener.groups == []
        stages = {f.stage for f in harness.watcher.collector.log.failures()}
        assert stages == {"import"}

    def test_nested_directory_imports_resolve_relative_to_parent(self, harness) -> None:
        key = CacheKey("g2")
        (harness.root / "css" / "vendor").mkdir()
        harness.write("css/b.css", '@import url(vendor/reset.css);\n')
        harness.write("css/vendor/reset.css", '@import "../c.css";\n')
        harness.watcher.check(key)
        harness.write("css/c.css", "h1 { color: purple; }\n")
        harness.watcher.check(key)

        assert "css/vendor/reset.css" in harness.watcher.previous_hashes
        assert harness.listener.groups == [key]

    def test_malformed_import_does_not_block_group(self, harness) -> None:
        key = CacheKey("all")
        harness.write("css/b.css", '@import "http://[::1/x.css";\nbody { margin: 0; }\n')
        harness.watcher.check(key)
        assert "z.js" in harness.watcher.previous_hashes

        harness.write("z.js", "console.log('edited');\n")
        harness.watcher.check(key)

        assert harness.cache.is_stale(key)
        assert harness.listener.resources == [Resource("z.js", ResourceType.SCRIPT)]
        assert {f.stage for f in harness.watcher.collector.log.failures()} == {"import"}


# ---------------------------------------------------------------------------
# Fail-safe policy
# ---------------------------------------------------------------------------


class TestFailSafe:
    """Failures degrade to "unchanged" and never reach the caller."""

    def test_missing_resource_is_unchanged(self, harness) -> None:
        assert harness.watcher.is_changed(Resource.create("nope.js")) is False
        [failure] = harness.watcher.collector.log.failures()
        assert failure.stage == "resource"
        assert failure.severity == "debug"

    def test_missing_resource_does_not_stop_group(self, harness) -> None:
        harness.write("groups.yaml", "groups:\n  g:\n    - nope.js\n    - a.js\n")
        key = CacheKey("g")
        harness.watcher.check(key)
        harness.write("a.js", "changed")
        harness.watcher.check(key)

        assert harness.listener.resources == [Resource("a.js", ResourceType.SCRIPT)]

    def test_unparseable_uri_does_not_stop_group(self, harness) -> None:
        harness.write("groups.yaml", 'groups:\n  g:\n    - "http://[::1/a.css"\n    - z.js\n')
        key = CacheKey("g")
        harness.watcher.check(key)
        harness.write("z.js", "console.log('edited');\n")
        harness.watcher.check(key)

        assert harness.cache.is_stale(key)
        failures = harness.watcher.collector.log.failures()
        assert {f.stage for f in failures} == {"resource"}
        assert all(f.severity == "debug" for f in failures)

    def test_unknown_group_is_logged_not_raised(self, harness) -> None:
        harness.watcher.check(CacheKey("nope"))

        [failure] = harness.watcher.collector.log.failures()
        assert failure.stage == "model"
        assert failure.severity == "error"
        assert len(harness.cache) == 0

    def test_broken_groups_file_is_logged_not_raised(self, harness) -> None:
        harness.write("groups.yaml", "groups: [unclosed\n")
        harness.watcher.check(CacheKey("g1"))

        assert [f.stage for f in harness.watcher.collector.log.failures()] == ["model"]

    def test_listener_error_is_swallowed_and_baseline_committed(self, asset_root: Path) -> None:
        def explode(key: CacheKey) -> None:
            raise RuntimeError("listener broke")

        watcher = ResourceWatcher(
            YamlModelProvider(asset_root / "groups.yaml"),
            FileLocator(asset_root),
            HashlibStrategy(),
            MemoryCacheStore(),
            listener=CallbackListener(on_group=explode),
        )
        watcher.check(CacheKey("g1"))
        (asset_root / "a.js").write_text("changed")

        watcher.check(CacheKey("g1"))

        failures = watcher.collector.log.failures(severity="error")
        assert [f.stage for f in failures] == ["unexpected"]
        assert "listener broke" in failures[0].message
        assert watcher.previous_hashes["a.js"] == _sha1("changed")

    def test_stream_failure_is_unchanged(self, asset_root: Path) -> None:
        class FailingStrategy:
            def hash(self, stream) -> str:
                raise OSError("disk went away")

        watcher = ResourceWatcher(
            YamlModelProvider(asset_root / "groups.yaml"),
            FileLocator(asset_root),
            FailingStrategy(),
            MemoryCacheStore(),
        )
        watcher.check(CacheKey("g1"))

        assert watcher.previous_hashes == {}
        assert watcher.collector.log.failures()[0].message == "disk went away"

    def test_none_key_rejected(self, harness) -> None:
        with pytest.raises(ValueError, match="cache key"):
            harness.watcher.check(None)  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# Standalone queries
# ---------------------------------------------------------------------------


class TestStandaloneQueries:
    """is_changed / is_group_changed without a memo leave the baseline alone."""

    def test_is_changed_does_not_advance_baseline(self, harness) -> None:
        harness.watcher.is_changed(Resource.create("a.js"))
        assert harness.watcher.previous_hashes == {}

    def test_is_group_changed_with_memo_reuses_digests(self, harness) -> None:
        memo = HashMemo()
        group = Group("g", (Resource.create("a.js"), Resource.create("a.js")))

        assert harness.watcher.is_group_changed(group, memo) is False
        assert _hashed(harness, "a.js") == 1
        assert "a.js" in memo

    def test_static_model(self, asset_root: Path) -> None:
        model = Model.of([Group("g", (Resource.create("a.js"),))])
        cache = MemoryCacheStore()
        watcher = ResourceWatcher(
            StaticModelProvider(model), FileLocator(asset_root), HashlibStrategy(), cache
        )
        watcher.check(CacheKey("g"))
        (asset_root / "a.js").write_text("changed")
        watcher.check(CacheKey("g"))

        assert cache.is_stale(CacheKey("g"))


# ---------------------------------------------------------------------------
# Concurrency
# ---------------------------------------------------------------------------


class TestConcurrentChecks:
    """Concurrent cycles for different keys don't interfere."""

    def test_parallel_groups_all_invalidated(self, harness) -> None:
        names = [f"g{i}" for i in range(12)]
        lines = ["groups:"]
        for name in names:
            harness.write(f"{name}.js", f"// {name}\n")
            lines.append(f"  {name}:\n    - {name}.js")
        harness.write("groups.yaml", "\n".join(lines) + "\n")
        keys = [CacheKey(name) for name in names]

        with ThreadPoolExecutor(max_workers=6) as pool:
            list(pool.map(harness.watcher.check, keys))
        for name in names:
            harness.write(f"{name}.js", f"// {name} edited\n")
        with ThreadPoolExecutor(max_workers=6) as pool:
            list(pool.map(harness.watcher.check, keys))

        assert all(harness.cache.is_stale(key) for key in keys)
        assert sorted(k.group_name for k in harness.listener.groups) == sorted(names)
        assert harness.watcher.collector.log.query(event_type=CheckFailed) == []
