"""Model layer — groups of resources and the providers that load them."""

from assetwatch.model.factory import (
    ModelProvider,
    StaticModelProvider,
    YamlModelProvider,
    parse_model,
)
from assetwatch.model.resource import CacheKey, Group, Model, Resource, ResourceType

__all__ = [
    "CacheKey",
    "Group",
    "Model",
    "ModelProvider",
    "Resource",
    "ResourceType",
    "StaticModelProvider",
    "YamlModelProvider",
    "parse_model",
]
