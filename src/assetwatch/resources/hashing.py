"""Hash strategies — content digests used to detect resource changes.

A strategy consumes a binary stream in fixed-size chunks so large assets
are never loaded into memory at once.
"""

from __future__ import annotations

import hashlib
import zlib
from typing import TYPE_CHECKING, Protocol

from assetwatch._errors import ConfigError

if TYPE_CHECKING:
    from typing import BinaryIO

    from assetwatch._types import Digest

_CHUNK_SIZE = 64 * 1024


class HashStrategy(Protocol):
    """Computes a deterministic digest of a byte stream."""

    def hash(self, stream: BinaryIO) -> Digest: ...


class HashlibStrategy:
    """Hex digest from any algorithm ``hashlib`` provides."""

    __slots__ = ("_algorithm",)

    def __init__(self, algorithm: str = "sha1") -> None:
        try:
            hashlib.new(algorithm)
        except ValueError as exc:
            msg = f"Unsupported hash algorithm {algorithm!r}"
            raise ConfigError(msg) from exc
        self._algorithm = algorithm

    @property
    def algorithm(self) -> str:
        return self._algorithm

    def hash(self, stream: BinaryIO) -> Digest:
        hasher = hashlib.new(self._algorithm)
        while chunk := stream.read(_CHUNK_SIZE):
            hasher.update(chunk)
        return hasher.hexdigest()

    def __repr__(self) -> str:
        return f"HashlibStrategy({self._algorithm!r})"


class Crc32Strategy:
    """Cheap CRC32 checksum, rendered as a decimal string."""

    __slots__ = ()

    def hash(self, stream: BinaryIO) -> Digest:
        checksum = 0
        while chunk := stream.read(_CHUNK_SIZE):
            checksum = zlib.crc32(chunk, checksum)
        return str(checksum)

    def __repr__(self) -> str:
        return "Crc32Strategy()"


def get_hash_strategy(name: str) -> HashStrategy:
    """Return the strategy for *name* (``crc32`` or a hashlib algorithm)."""
    if name.lower() == "crc32":
        return Crc32Strategy()
    return HashlibStrategy(name.lower())
