"""Contracts between the entity provider and the catalog."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from ..models import ComponentIdentifiers, EntityMutation


@runtime_checkable
class EntityProviderConnection(Protocol):
    """Sink that receives the mutations of one entity provider."""

    async def apply_mutation(self, mutation: EntityMutation) -> None: ...


@runtime_checkable
class ComponentRegistry(Protocol):
    """Read-only lookup of the Component entities already in the catalog."""

    async def get_components(self) -> list[ComponentIdentifiers]: ...
