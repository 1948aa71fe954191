"""Components: existing catalog entities that resources are correlated to."""

from dataclasses import dataclass, field
from typing import Literal

from pydantic import BaseModel, Field

from .base import BaseEntity, EntityKind


class ComponentSpec(BaseModel):
    type: str = Field(..., description="service, website, library...")
    lifecycle: str
    owner: str
    system: str | None = None
    dependsOn: list[str] = Field(default_factory=list)


class Component(BaseEntity):
    kind: Literal[EntityKind.COMPONENT] = EntityKind.COMPONENT
    spec: ComponentSpec


@dataclass(frozen=True)
class ComponentIdentifiers:
    """The parts of a catalog Component used for resource correlation."""

    name: str
    namespace: str = "default"
    labels: dict[str, str] = field(default_factory=dict)

    @property
    def ref(self) -> str:
        return f"component:{self.namespace}/{self.name}"
