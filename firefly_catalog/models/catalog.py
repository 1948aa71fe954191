"""Catalog entity union and mutation payloads."""

from typing import Literal, Union

from pydantic import BaseModel, Field

from .component import Component
from .resource import Resource
from .system import System

Entity = Union[Component, Resource, System]


class DeferredEntity(BaseModel):
    """An entity together with the location key that owns it."""

    entity: Entity
    locationKey: str | None = None


class EntityMutation(BaseModel):
    """A catalog mutation.

    A ``full`` mutation declares the complete entity set of a provider and
    supersedes everything the provider published before.
    """

    type: Literal["full"] = "full"
    entities: list[DeferredEntity] = Field(default_factory=list)
