"""Shared type definitions for assetwatch."""

from typing import Literal, TypeAlias

# Resource identifier (relative path, file: uri or http(s) url)
ResourceUri: TypeAlias = str

# Hex (or decimal, for crc32) content digest
Digest: TypeAlias = str

# Name of a logical resource group
GroupName: TypeAlias = str

# Severity of a recorded watcher failure
Severity: TypeAlias = Literal["debug", "error"]
