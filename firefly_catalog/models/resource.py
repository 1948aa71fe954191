"""Resource entities synthesized from Firefly assets."""

from typing import Literal

from pydantic import BaseModel, Field

from .base import BaseEntity, EntityKind


class ResourceSpec(BaseModel):
    type: str = Field(..., description="Firefly asset type, e.g. aws_s3_bucket")
    owner: str
    system: str | None = Field(default=None, description="Provider account id")
    lifecycle: str | None = Field(
        default=None, description="Firefly IaC state (managed, unmanaged, drifted...)"
    )
    # resource:<sha1> refs for connections, component:<ns>/<name> for correlation
    dependsOn: list[str] = Field(default_factory=list)
    dependencyOf: list[str] = Field(default_factory=list)


class Resource(BaseEntity):
    """One cloud asset in the catalog."""

    kind: Literal[EntityKind.RESOURCE] = EntityKind.RESOURCE
    spec: ResourceSpec
