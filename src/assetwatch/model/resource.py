"""Group model — resources, groups, and the cache keys derived from them.

All model objects are frozen dataclasses. A ``Model`` is an immutable
snapshot produced by a model provider; the watcher never mutates it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING

from assetwatch._errors import ModelError

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from assetwatch._types import GroupName, ResourceUri


class ResourceType(Enum):
    """Kind of asset a resource holds."""

    SCRIPT = "js"
    STYLESHEET = "css"

    @classmethod
    def from_uri(cls, uri: ResourceUri) -> ResourceType:
        """Infer the type from the uri suffix (query and fragment ignored)."""
        path = uri.split("?", 1)[0].split("#", 1)[0].lower()
        for member in cls:
            if path.endswith(f".{member.value}"):
                return member
        msg = f"Cannot infer resource type from uri {uri!r}"
        raise ModelError(msg)

    @classmethod
    def parse(cls, value: str) -> ResourceType:
        """Parse ``js``/``css`` (or the member name) into a ResourceType."""
        lowered = value.strip().lower()
        for member in cls:
            if lowered in (member.value, member.name.lower()):
                return member
        msg = f"Unknown resource type {value!r}"
        raise ModelError(msg)


@dataclass(frozen=True, slots=True)
class Resource:
    """A single source asset.

    Attributes:
        uri: Identifier handed to the resource locator.
        type: Script or stylesheet.

    """

    uri: ResourceUri
    type: ResourceType

    @classmethod
    def create(cls, uri: ResourceUri, type: ResourceType | None = None) -> Resource:  # noqa: A002
        """Build a resource, inferring the type from the uri when omitted."""
        return cls(uri=uri, type=type if type is not None else ResourceType.from_uri(uri))


@dataclass(frozen=True, slots=True)
class Group:
    """A named, ordered collection of resources forming one buildable unit."""

    name: GroupName
    resources: tuple[Resource, ...] = ()

    def resources_of(self, type: ResourceType) -> tuple[Resource, ...]:  # noqa: A002
        """Resources of the given type, in group order."""
        return tuple(r for r in self.resources if r.type is type)


@dataclass(frozen=True, slots=True)
class CacheKey:
    """Identifies a derived cache entry built from a group.

    Attributes:
        group_name: Group the entry was built from.
        resource_type: Restricts the entry to one resource type (None = all).
        minimize: Whether the cached artifact is the minimized variant.

    """

    group_name: GroupName
    resource_type: ResourceType | None = None
    minimize: bool = True

    def __str__(self) -> str:
        suffix = f".{self.resource_type.value}" if self.resource_type is not None else ""
        return f"{self.group_name}{suffix}{'' if self.minimize else ' (unminimized)'}"


@dataclass(frozen=True, slots=True)
class Model:
    """Immutable snapshot of every known group, keyed by name."""

    groups: Mapping[GroupName, Group] = field(default_factory=lambda: MappingProxyType({}))

    @classmethod
    def of(cls, groups: Iterable[Group]) -> Model:
        """Build a model from groups. Duplicate names are rejected."""
        by_name: dict[GroupName, Group] = {}
        for group in groups:
            if group.name in by_name:
                msg = f"Duplicate group name {group.name!r}"
                raise ModelError(msg)
            by_name[group.name] = group
        return cls(groups=MappingProxyType(by_name))

    @property
    def group_names(self) -> tuple[GroupName, ...]:
        """Group names in definition order."""
        return tuple(self.groups)

    def group(self, name: GroupName) -> Group:
        """Return the group called *name*.

        Raises:
            ModelError: If no such group exists.

        """
        try:
            return self.groups[name]
        except KeyError:
            msg = f"No group named {name!r}"
            raise ModelError(msg) from None
