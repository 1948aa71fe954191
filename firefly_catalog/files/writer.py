"""Export catalog entities as descriptor files."""

from pathlib import Path

import yaml

from ..models import Entity


class EntityWriter:
    """Serializes entities to Backstage descriptor YAML."""

    KIND_DIRS = {
        "Component": "components",
        "Resource": "resources",
        "System": "systems",
    }

    def to_yaml(self, entity: Entity) -> str:
        # json mode turns EntityKind into its plain string value
        document = entity.model_dump(mode="json", exclude_none=True)
        return yaml.safe_dump(document, sort_keys=False, allow_unicode=True)

    def write_entity(self, entity: Entity, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.to_yaml(entity), encoding="utf-8")

    def export(self, entities: list[Entity], root: Path) -> list[Path]:
        """Write one file per entity to root/<kind dir>/<name>.yaml.

        Returns:
            The written paths, in input order.
        """
        written = []
        for entity in entities:
            kind_dir = self.KIND_DIRS[entity.kind.value]
            path = root / kind_dir / f"{entity.metadata.name}.yaml"
            self.write_entity(entity, path)
            written.append(path)
        return written
