"""Pydantic models for catalog entities and Firefly payloads."""

from .base import API_VERSION, BaseEntity, EntityKind, EntityLink, EntityMetadata, EntityRef
from .catalog import DeferredEntity, Entity, EntityMutation
from .component import Component, ComponentIdentifiers, ComponentSpec
from .inventory import FireflyAggregation, FireflyAsset, FireflyAssetFilters, InventoryPage
from .resource import Resource, ResourceSpec
from .system import System, SystemSpec

__all__ = [
    "API_VERSION",
    "EntityKind",
    "EntityRef",
    "EntityMetadata",
    "EntityLink",
    "BaseEntity",
    "Component",
    "ComponentSpec",
    "ComponentIdentifiers",
    "Resource",
    "ResourceSpec",
    "System",
    "SystemSpec",
    "Entity",
    "DeferredEntity",
    "EntityMutation",
    "FireflyAsset",
    "FireflyAssetFilters",
    "FireflyAggregation",
    "InventoryPage",
]
