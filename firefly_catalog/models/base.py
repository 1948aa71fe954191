"""Entity envelope shared by every catalog kind."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

API_VERSION = "backstage.io/v1alpha1"


class EntityKind(str, Enum):
    """Kinds this catalog stores.

    Components are only read (as correlation targets); Resources and Systems
    are produced from the Firefly inventory.
    """

    COMPONENT = "Component"
    RESOURCE = "Resource"
    SYSTEM = "System"

    @classmethod
    def from_str(cls, value: str) -> "EntityKind":
        """Case-insensitive lookup; raises ValueError for other kinds."""
        by_lower = {kind.value.lower(): kind for kind in cls}
        try:
            return by_lower[value.lower()]
        except KeyError:
            raise ValueError(f"Unsupported entity kind: {value}") from None


class EntityRef(BaseModel):
    """A ``kind:namespace/name`` pointer to another entity."""

    kind: EntityKind
    namespace: str = "default"
    name: str

    def __str__(self) -> str:
        # Relations in entity specs use the lower-case form
        return f"{self.kind.value.lower()}:{self.namespace}/{self.name}"

    @classmethod
    def parse(cls, ref_str: str) -> "EntityRef":
        """Parse ``kind:name`` or ``kind:namespace/name``.

        A bare name is taken to be a Component in the default namespace.
        """
        kind_part, sep, rest = ref_str.partition(":")
        if not sep:
            return cls(kind=EntityKind.COMPONENT, name=ref_str)

        namespace, slash, name = rest.partition("/")
        if not slash:
            namespace, name = "default", rest
        return cls(kind=EntityKind.from_str(kind_part), namespace=namespace, name=name)

    def to_id(self) -> str:
        """Row id used by the catalog store (``Resource:default/<name>``)."""
        return f"{self.kind.value}:{self.namespace}/{self.name}"


class EntityLink(BaseModel):
    url: str
    title: str | None = None
    icon: str | None = None
    type: str | None = None


class EntityMetadata(BaseModel):
    """Metadata block of an entity descriptor."""

    name: str = Field(..., description="Unique name within the namespace")
    namespace: str = "default"
    title: str | None = None
    description: str | None = None
    labels: dict[str, str] = Field(
        default_factory=dict, description="Sanitized key/value pairs"
    )
    annotations: dict[str, str] = Field(
        default_factory=dict, description="Namespaced metadata such as firefly.ai/*"
    )
    tags: list[str] = Field(default_factory=list)
    links: list[EntityLink] = Field(default_factory=list)


class BaseEntity(BaseModel):
    """Common envelope: apiVersion, kind and metadata."""

    apiVersion: str = API_VERSION
    kind: EntityKind
    metadata: EntityMetadata

    @property
    def ref(self) -> EntityRef:
        return EntityRef(
            kind=self.kind,
            namespace=self.metadata.namespace,
            name=self.metadata.name,
        )

    @property
    def entity_id(self) -> str:
        return self.ref.to_id()
