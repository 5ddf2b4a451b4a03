"""Resource locators — turn a resource uri into a readable byte stream.

Supported uri forms:

- ``css/site.css`` / ``/css/site.css``: resolved against the asset root
- ``file:///abs/path/site.css``: absolute filesystem path
- ``http://`` / ``https://``: fetched with ``urllib.request``

Every locator raises ResourceNotFoundError when the uri cannot be opened,
so callers only need to handle one failure type.
"""

from __future__ import annotations

import urllib.error
import urllib.request
from pathlib import Path
from typing import TYPE_CHECKING, Protocol
from urllib.parse import SplitResult, unquote, urlsplit

from assetwatch._errors import ResourceNotFoundError

if TYPE_CHECKING:
    from typing import BinaryIO

    from assetwatch._types import ResourceUri


def _split(uri: ResourceUri) -> SplitResult:
    try:
        return urlsplit(uri)
    except ValueError as exc:
        msg = f"Malformed resource uri {uri!r}: {exc}"
        raise ResourceNotFoundError(msg) from exc


class Locator(Protocol):
    """Opens a resource uri for binary reading."""

    def locate(self, uri: ResourceUri) -> BinaryIO: ...


class FileLocator:
    """Opens filesystem resources relative to an asset root.

    Args:
        root: Directory that relative uris (and root-relative uris such as
            ``/css/site.css``) are resolved against.

    """

    __slots__ = ("_root",)

    def __init__(self, root: Path) -> None:
        self._root = root

    def resolve(self, uri: ResourceUri) -> Path:
        """Map *uri* to a filesystem path without opening it.

        Raises:
            ResourceNotFoundError: If *uri* cannot be parsed.

        """
        parts = _split(uri)
        if parts.scheme == "file":
            return Path(unquote(parts.path))
        return self._root / unquote(parts.path).lstrip("/")

    def locate(self, uri: ResourceUri) -> BinaryIO:
        path = self.resolve(uri)
        try:
            return path.open("rb")
        except OSError as exc:
            msg = f"Cannot open {uri!r} ({path}): {exc.strerror or exc}"
            raise ResourceNotFoundError(msg) from exc


class UrlLocator:
    """Fetches ``http``/``https`` resources."""

    __slots__ = ("_timeout",)

    def __init__(self, timeout: float = 10.0) -> None:
        self._timeout = timeout

    def locate(self, uri: ResourceUri) -> BinaryIO:
        try:
            return urllib.request.urlopen(uri, timeout=self._timeout)  # noqa: S310
        except (urllib.error.URLError, OSError, ValueError) as exc:
            msg = f"Cannot fetch {uri!r}: {exc}"
            raise ResourceNotFoundError(msg) from exc


class LocatorFactory:
    """Dispatches each uri to a locator by its scheme.

    Uris without a scheme (and ``file:`` uris) go to the file locator.

    """

    __slots__ = ("_by_scheme", "_default")

    def __init__(
        self,
        default: Locator,
        by_scheme: dict[str, Locator] | None = None,
    ) -> None:
        self._default = default
        self._by_scheme = dict(by_scheme or {})

    @classmethod
    def for_root(cls, root: Path, *, timeout: float = 10.0) -> LocatorFactory:
        """Standard factory: files under *root* plus http(s) urls."""
        url_locator = UrlLocator(timeout=timeout)
        return cls(FileLocator(root), {"http": url_locator, "https": url_locator})

    def locate(self, uri: ResourceUri) -> BinaryIO:
        scheme = _split(uri).scheme.lower()
        # Single-letter schemes are Windows drive letters, not uri schemes.
        if len(scheme) <= 1 or scheme == "file":
            return self._default.locate(uri)
        locator = self._by_scheme.get(scheme)
        if locator is None:
            msg = f"No locator registered for scheme {scheme!r} ({uri!r})"
            raise ResourceNotFoundError(msg)
        return locator.locate(uri)
