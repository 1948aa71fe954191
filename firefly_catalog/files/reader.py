"""Read and parse entity YAML files."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Iterator

import yaml
from pydantic import ValidationError

from ..models import Component, Entity, EntityKind, Resource, System

logger = logging.getLogger(__name__)

YAML_SUFFIXES = {".yaml", ".yml"}


class EntityReader:
    """Read and parse entity YAML files."""

    ENTITY_CLASSES = {
        EntityKind.COMPONENT: Component,
        EntityKind.RESOURCE: Resource,
        EntityKind.SYSTEM: System,
    }

    def scan(self, path: Path) -> Iterator[tuple[Path, dict[str, Any]]]:
        """Yield (file_path, document) for every YAML document under path.

        ``path`` may be a single file or a directory searched recursively.
        Files may hold several documents separated by ``---``.
        """
        if path.is_file():
            files = [path]
        else:
            files = sorted(p for p in path.rglob("*") if p.suffix in YAML_SUFFIXES)

        for yaml_file in files:
            try:
                with open(yaml_file, encoding="utf-8") as f:
                    documents = list(yaml.safe_load_all(f))
            except (yaml.YAMLError, OSError) as e:
                logger.warning(f"Failed to parse {yaml_file}: {e}")
                continue

            for data in documents:
                if data and isinstance(data, dict):
                    yield yaml_file, data

    def parse_entity(self, data: dict[str, Any]) -> Entity | None:
        """Parse dict to appropriate Entity type."""
        kind_str = data.get("kind")
        if not kind_str:
            return None

        try:
            kind = EntityKind.from_str(kind_str)
        except ValueError:
            logger.debug(f"Skipping unsupported entity kind: {kind_str}")
            return None

        entity_class = self.ENTITY_CLASSES[kind]
        try:
            return entity_class.model_validate(data)
        except ValidationError as e:
            logger.warning(f"Failed to validate {kind_str} entity: {e}")
            return None

    def read_entities(
        self, path: Path, kind: EntityKind | None = None
    ) -> list[Entity]:
        """Read all entities under path, optionally only those of one kind."""
        entities = []
        for _, data in self.scan(path):
            entity = self.parse_entity(data)
            if entity is None:
                continue
            if kind is not None and entity.kind != kind:
                continue
            entities.append(entity)
        return entities
