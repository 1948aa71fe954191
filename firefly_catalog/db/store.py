"""DuckDB-backed catalog: entity storage per provider and component lookup."""

from __future__ import annotations

import asyncio
import json
import logging
import threading
from dataclasses import dataclass

import duckdb

from ..errors import ComponentLookupError, PublishError
from ..files import EntityReader
from ..models import ComponentIdentifiers, DeferredEntity, Entity, EntityMutation, EntityRef
from .schema import create_schema, get_connection

logger = logging.getLogger(__name__)

ASSET_ID_ANNOTATION = "firefly.ai/asset-id"


def normalize_entity_ref(ref: str) -> str:
    """Normalize an entity reference to the stored entity id form.

    Converts 'resource:0a1b2c' to 'Resource:default/0a1b2c'. References to
    kinds this catalog does not store are returned unchanged.
    """
    try:
        return EntityRef.parse(ref).to_id()
    except ValueError:
        return ref


class CatalogStore:
    """Catalog entities in DuckDB.

    Each entity row belongs to a provider. A full mutation from a provider
    replaces all of that provider's rows in one transaction.
    """

    def __init__(self, path: str = ":memory:"):
        self.conn = get_connection(path)
        create_schema(self.conn)
        self.lock = threading.Lock()
        self._reader = EntityReader()

    def close(self) -> None:
        self.conn.close()

    def connection_for(self, provider: str) -> "ProviderConnection":
        """Catalog connection that publishes on behalf of one provider."""
        return ProviderConnection(self, provider)

    def replace_provider_entities(
        self, provider: str, entities: list[DeferredEntity]
    ) -> int:
        """Replace everything owned by provider with the given entities.

        Returns:
            Number of entities stored.
        """
        with self.lock:
            self.conn.begin()
            try:
                self._delete_provider_rows(provider)
                stored = self._insert_entities(entities, provider)
                self.conn.commit()
            except Exception:
                self.conn.rollback()
                raise
        logger.info(f"Stored {stored} entities for provider {provider}")
        return stored

    def add_entities(
        self,
        entities: list[Entity],
        provider: str = "file",
        location_key: str | None = None,
    ) -> int:
        """Insert or update entities without touching the provider's other rows."""
        deferred = [DeferredEntity(entity=e, locationKey=location_key) for e in entities]
        with self.lock:
            self.conn.begin()
            try:
                self._delete_ids([d.entity.entity_id for d in deferred], provider)
                stored = self._insert_entities(deferred, provider)
                self.conn.commit()
            except Exception:
                self.conn.rollback()
                raise
        return stored

    def _delete_provider_rows(self, provider: str) -> None:
        self.conn.execute(
            """
            DELETE FROM relations WHERE source_id IN (
                SELECT id FROM entities WHERE provider = ?
            )
            """,
            [provider],
        )
        self.conn.execute("DELETE FROM entities WHERE provider = ?", [provider])

    def _delete_ids(self, entity_ids: list[str], provider: str) -> None:
        for entity_id in entity_ids:
            self.conn.execute(
                """
                DELETE FROM relations WHERE source_id IN (
                    SELECT id FROM entities WHERE id = ? AND provider = ?
                )
                """,
                [entity_id, provider],
            )
            self.conn.execute(
                "DELETE FROM entities WHERE id = ? AND provider = ?",
                [entity_id, provider],
            )

    def _owned_by_others(self, provider: str) -> set[str]:
        rows = self.conn.execute(
            "SELECT id FROM entities WHERE provider <> ?", [provider]
        ).fetchall()
        return {row[0] for row in rows}

    def _insert_entities(self, entities: list[DeferredEntity], provider: str) -> int:
        # Last occurrence of an id wins
        by_id = {d.entity.entity_id: d for d in entities}
        taken = self._owned_by_others(provider)

        stored = 0
        for entity_id, deferred in by_id.items():
            if entity_id in taken:
                logger.warning(
                    f"Skipping {entity_id}: already provided by another source"
                )
                continue
            self._insert_entity(deferred.entity, provider, deferred.locationKey)
            self._insert_relations(deferred.entity)
            stored += 1
        return stored

    def _insert_entity(
        self, entity: Entity, provider: str, location_key: str | None
    ) -> None:
        """Insert a single entity."""
        spec = entity.spec
        self.conn.execute(
            """
            INSERT INTO entities (
                id, kind, namespace, name, title,
                owner, lifecycle, type, system,
                tags, labels, annotations, asset_id,
                provider, location_key, raw_entity
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            [
                entity.entity_id,
                entity.kind.value,
                entity.metadata.namespace,
                entity.metadata.name,
                entity.metadata.title,
                getattr(spec, "owner", None),
                getattr(spec, "lifecycle", None),
                getattr(spec, "type", None),
                getattr(spec, "system", None),
                entity.metadata.tags,
                json.dumps(entity.metadata.labels),
                json.dumps(entity.metadata.annotations),
                entity.metadata.annotations.get(ASSET_ID_ANNOTATION),
                provider,
                location_key,
                json.dumps(entity.model_dump(mode="json", exclude_none=True)),
            ],
        )

    def _insert_relations(self, entity: Entity) -> None:
        """Extract and insert the relations declared by one entity."""
        source_id = entity.entity_id
        spec = entity.spec
        relations = []

        if getattr(spec, "system", None):
            relations.append((f"system:{spec.system}", "partOf"))
        for dep in getattr(spec, "dependsOn", []):
            relations.append((dep, "dependsOn"))
        for dep in getattr(spec, "dependencyOf", []):
            relations.append((dep, "dependencyOf"))

        for target_id, rel_type in relations:
            self.conn.execute(
                """
                INSERT INTO relations (id, source_id, target_id, relation_type)
                VALUES (nextval('relations_id_seq'), ?, ?, ?)
                """,
                [source_id, normalize_entity_ref(target_id), rel_type],
            )

    def get_entities(self, kind: str | None = None) -> list[Entity]:
        """Stored entities, optionally filtered by kind, ordered by kind and name."""
        sql = "SELECT raw_entity FROM entities"
        params: list[str] = []
        if kind:
            sql += " WHERE kind = ?"
            params.append(kind)
        sql += " ORDER BY kind, name"

        with self.lock:
            rows = self.conn.execute(sql, params).fetchall()

        entities = []
        for (raw,) in rows:
            entity = self._reader.parse_entity(json.loads(raw))
            if entity is not None:
                entities.append(entity)
        return entities

    def count(self) -> dict[str, int]:
        """Entity count by kind."""
        with self.lock:
            rows = self.conn.execute(
                "SELECT kind, COUNT(*) FROM entities GROUP BY kind ORDER BY kind"
            ).fetchall()
        counts = {kind: n for kind, n in rows}
        counts["Total"] = sum(counts.values())
        return counts

    def list_components(self) -> list[ComponentIdentifiers]:
        """Name, namespace and labels of every stored Component."""
        try:
            with self.lock:
                rows = self.conn.execute(
                    """
                    SELECT name, namespace, labels FROM entities
                    WHERE kind = 'Component'
                    ORDER BY namespace, name
                    """
                ).fetchall()
        except duckdb.Error as e:
            raise ComponentLookupError(f"Failed to query components: {e}") from e

        return [
            ComponentIdentifiers(
                name=name,
                namespace=namespace or "default",
                labels=json.loads(labels) if labels else {},
            )
            for name, namespace, labels in rows
        ]

    async def get_components(self) -> list[ComponentIdentifiers]:
        return await asyncio.to_thread(self.list_components)


@dataclass
class ProviderConnection:
    """Entity provider connection backed by a CatalogStore."""

    store: CatalogStore
    provider: str

    async def apply_mutation(self, mutation: EntityMutation) -> None:
        if mutation.type != "full":
            raise PublishError(f"Unsupported mutation type: {mutation.type}")
        try:
            await asyncio.to_thread(
                self.store.replace_provider_entities, self.provider, mutation.entities
            )
        except duckdb.Error as e:
            raise PublishError(f"Catalog rejected mutation: {e}") from e
