"""Model providers — supply the current group model to the watcher.

``YamlModelProvider`` reads a groups file such as::

    groups:
      core:
        - js/app.js
        - css/site.css
      admin:
        - uri: https://cdn.example.com/admin.css
          type: css

Each entry is either a bare uri (type inferred from its suffix) or a
mapping with ``uri`` and an optional ``type`` (``js`` / ``css``).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

import yaml

from assetwatch._errors import ModelError
from assetwatch.model.resource import Group, Model, Resource, ResourceType

if TYPE_CHECKING:
    from pathlib import Path


class ModelProvider(Protocol):
    """Anything that can produce the current model snapshot."""

    def current_model(self) -> Model: ...


class StaticModelProvider:
    """Serves a fixed, pre-built model."""

    __slots__ = ("_model",)

    def __init__(self, model: Model) -> None:
        self._model = model

    def current_model(self) -> Model:
        return self._model


class YamlModelProvider:
    """Loads the model from a YAML groups file.

    The file is re-read on every call so edits to the groups file are
    picked up by the next check cycle without restarting the watcher.

    """

    __slots__ = ("_path",)

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def current_model(self) -> Model:
        try:
            text = self._path.read_text(encoding="utf-8")
        except OSError as exc:
            msg = f"Cannot read groups file {self._path}: {exc}"
            raise ModelError(msg) from exc
        try:
            data = yaml.safe_load(text) or {}
        except yaml.YAMLError as exc:
            msg = f"Invalid YAML in {self._path}: {exc}"
            raise ModelError(msg) from exc
        return parse_model(data)


def parse_model(data: object) -> Model:
    """Build a Model from the decoded contents of a groups file."""
    if not isinstance(data, dict):
        msg = "Groups file must contain a mapping"
        raise ModelError(msg)
    raw_groups = data.get("groups", {})
    if not isinstance(raw_groups, dict):
        msg = "'groups' must map group names to resource lists"
        raise ModelError(msg)
    return Model.of(_parse_group(str(name), entries) for name, entries in raw_groups.items())


def _parse_group(name: str, entries: object) -> Group:
    if entries is None:
        return Group(name=name)
    if not isinstance(entries, list):
        msg = f"Group {name!r} must be a list of resources"
        raise ModelError(msg)
    return Group(name=name, resources=tuple(_parse_resource(name, e) for e in entries))


def _parse_resource(group_name: str, entry: object) -> Resource:
    if isinstance(entry, str):
        return Resource.create(entry)
    if isinstance(entry, dict) and isinstance(entry.get("uri"), str):
        raw_type = entry.get("type")
        resource_type = ResourceType.parse(str(raw_type)) if raw_type is not None else None
        return Resource.create(entry["uri"], resource_type)
    msg = f"Invalid resource entry in group {group_name!r}: {entry!r}"
    raise ModelError(msg)
