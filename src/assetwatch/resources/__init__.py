"""Resource access — locating asset streams and hashing their content."""

from assetwatch.resources.hashing import (
    Crc32Strategy,
    HashlibStrategy,
    HashStrategy,
    get_hash_strategy,
)
from assetwatch.resources.locator import FileLocator, Locator, LocatorFactory, UrlLocator

__all__ = [
    "Crc32Strategy",
    "FileLocator",
    "HashStrategy",
    "HashlibStrategy",
    "Locator",
    "LocatorFactory",
    "UrlLocator",
    "get_hash_strategy",
]
