"""Import graph scanner — follows stylesheet ``@import`` directives.

A stylesheet whose own bytes are unchanged may still render differently
because something it imports changed. The scanner lists the imports of a
stylesheet and asks the watcher to check each one, recursing through the
whole import graph.

Traversal rules:
    1. The first CHANGED import ends the scan; remaining imports are not
       read or checked.
    2. A stylesheet that cannot be read, decoded or parsed yields FAILED,
       which the watcher treats as "no further change found".
    3. An import that fails, for any reason, does not stop its siblings
       from being checked.
    4. Uris already on the current traversal path are skipped, so cyclic
       and self imports terminate and count as unchanged.
"""

from __future__ import annotations

import posixpath
import re
from enum import Enum
from typing import TYPE_CHECKING, TypeAlias
from urllib.parse import urljoin, urlsplit

from assetwatch._errors import ScanError
from assetwatch.model.resource import Resource, ResourceType

if TYPE_CHECKING:
    from collections.abc import Callable

    from assetwatch._types import ResourceUri
    from assetwatch.observability.collector import WatchCollector
    from assetwatch.resources.locator import Locator


class ScanResult(Enum):
    """Outcome of checking one node of the import graph."""

    UNCHANGED = "unchanged"
    CHANGED = "changed"
    FAILED = "failed"


NodeCheck: TypeAlias = "Callable[[Resource, frozenset[str]], ScanResult]"

_COMMENT_PATTERN = re.compile(r"/\*.*?\*/", re.DOTALL)

# @import url(a.css) | @import url('a.css') | @import "a.css" [media];
_IMPORT_PATTERN = re.compile(
    r"""@import\s+
    (?:
        url\(\s*(['"]?)(?P<url>[^'")\s]+)\1\s*\)
      | (['"])(?P<bare>[^'"]+)\3
    )""",
    re.IGNORECASE | re.VERBOSE,
)


def _has_scheme(uri: str) -> bool:
    # Single-letter schemes are Windows drive letters.
    return len(urlsplit(uri).scheme) > 1


def find_imports(css: str) -> list[str]:
    """Return the raw import targets of *css*, in order, without duplicates."""
    found: list[str] = []
    for match in _IMPORT_PATTERN.finditer(_COMMENT_PATTERN.sub("", css)):
        target = (match.group("url") or match.group("bare")).strip()
        if target and target not in found:
            found.append(target)
    return found


def resolve_import(parent_uri: ResourceUri, target: str) -> ResourceUri:
    """Resolve an import target relative to the stylesheet declaring it."""
    if _has_scheme(target):
        return target
    if _has_scheme(parent_uri):
        return urljoin(parent_uri, target)
    if target.startswith("//"):
        # Protocol-relative under a local parent: no scheme to inherit.
        return f"https:{target}"
    if target.startswith("/"):
        return target
    return posixpath.normpath(posixpath.join(posixpath.dirname(parent_uri), target))


class ImportScanner:
    """Walks the ``@import`` graph below a stylesheet.

    Args:
        locator: Opens stylesheets for reading.
        collector: Receives import and failure events.

    """

    __slots__ = ("_collector", "_locator")

    def __init__(self, locator: Locator, collector: WatchCollector | None = None) -> None:
        self._locator = locator
        self._collector = collector

    def read_imports(self, uri: ResourceUri) -> list[ResourceUri]:
        """Return the resolved imports of the stylesheet at *uri*.

        Raises:
            ScanError: If the stylesheet cannot be read or decoded, or one of
                its import targets is malformed.

        """
        try:
            with self._locator.locate(uri) as stream:
                css = stream.read().decode("utf-8")
            return [resolve_import(uri, target) for target in find_imports(css)]
        except (OSError, ValueError) as exc:
            msg = f"Cannot scan {uri!r} for imports: {exc}"
            raise ScanError(msg) from exc

    def scan(self, resource: Resource, check: NodeCheck, visited: frozenset[str]) -> ScanResult:
        """Check every stylesheet imported by *resource*.

        Args:
            resource: The stylesheet whose imports are scanned.
            check: Change check applied to each imported stylesheet; receives
                the uris on the current traversal path.
            visited: Uris of the stylesheets that led to *resource*.

        Returns:
            CHANGED on the first changed import, FAILED if *resource* itself
            could not be scanned, UNCHANGED otherwise.

        """
        try:
            imports = self.read_imports(resource.uri)
        except ScanError as exc:
            if self._collector is not None:
                self._collector.record_failure("import", resource.uri, exc)
            return ScanResult.FAILED

        path = visited | {resource.uri}
        for uri in imports:
            if uri in path:
                continue
            if self._collector is not None:
                self._collector.record_import(resource.uri, uri)
            try:
                result = check(Resource(uri=uri, type=ResourceType.STYLESHEET), path)
            except Exception as exc:
                if self._collector is not None:
                    self._collector.record_failure("import", uri, exc)
                continue
            if result is ScanResult.CHANGED:
                return ScanResult.CHANGED
        return ScanResult.UNCHANGED
