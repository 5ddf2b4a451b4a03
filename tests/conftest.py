"""Shared test fixtures for assetwatch."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from assetwatch.cache import MemoryCacheStore
from assetwatch.model.factory import YamlModelProvider
from assetwatch.resources.hashing import HashlibStrategy
from assetwatch.resources.locator import FileLocator
from assetwatch.watcher.core import ResourceWatcher

if TYPE_CHECKING:
    from typing import BinaryIO

    from assetwatch.model.resource import CacheKey, Resource


GROUPS_YAML = """\
groups:
  g1:
    - a.js
  g2:
    - css/b.css
  all:
    - a.js
    - css/b.css
    - z.js
"""


@pytest.fixture
def asset_root(tmp_path: Path) -> Path:
    """Create a small asset tree with a groups file.

    Layout::

        a.js, z.js
        css/b.css   (@import "c.css")
        css/c.css
        groups.yaml (g1 = [a.js], g2 = [css/b.css], all = [a.js, css/b.css, z.js])

    """
    (tmp_path / "a.js").write_text("console.log('a');\n")
    (tmp_path / "z.js").write_text("console.log('z');\n")
    css = tmp_path / "css"
    css.mkdir()
    (css / "b.css").write_text('@import "c.css";\nbody { margin: 0; }\n')
    (css / "c.css").write_text("h1 { color: red; }\n")
    (tmp_path / "groups.yaml").write_text(GROUPS_YAML)
    return tmp_path


class CountingHashStrategy:
    """SHA-1 strategy that counts how often each uri's stream is hashed."""

    def __init__(self) -> None:
        self._inner = HashlibStrategy("sha1")
        self.calls: list[str] = []

    def hash(self, stream: BinaryIO) -> str:
        self.calls.append(getattr(stream, "name", "?"))
        return self._inner.hash(stream)


class RecordingListener:
    """Listener that remembers every notification."""

    def __init__(self) -> None:
        self.resources: list[Resource] = []
        self.groups: list[CacheKey] = []

    def on_resource_changed(self, resource: Resource) -> None:
        self.resources.append(resource)

    def on_group_changed(self, key: CacheKey) -> None:
        self.groups.append(key)


class WatcherHarness:
    """A watcher over a real asset root with recording collaborators."""

    def __init__(self, root: Path) -> None:
        self.root = root
        self.cache = MemoryCacheStore()
        self.listener = RecordingListener()
        self.hashing = CountingHashStrategy()
        self.watcher = ResourceWatcher(
            YamlModelProvider(root / "groups.yaml"),
            FileLocator(root),
            self.hashing,
            self.cache,
            listener=self.listener,
        )

    def write(self, relative: str, text: str) -> None:
        (self.root / relative).write_text(text)


@pytest.fixture
def harness(asset_root: Path) -> WatcherHarness:
    return WatcherHarness(asset_root)
