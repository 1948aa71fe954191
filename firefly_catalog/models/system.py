"""System entities, one per cloud account or project."""

from typing import Literal

from pydantic import BaseModel, Field

from .base import BaseEntity, EntityKind


class SystemSpec(BaseModel):
    owner: str
    type: str | None = Field(
        default=None, description="Provider family taken from the asset type (aws, google)"
    )
    domain: str | None = None


class System(BaseEntity):
    kind: Literal[EntityKind.SYSTEM] = EntityKind.SYSTEM
    spec: SystemSpec
