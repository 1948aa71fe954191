import yaml

from firefly_catalog.files import EntityReader, EntityWriter
from firefly_catalog.models import EntityKind
from firefly_catalog.provider import asset_to_resource

from .conftest import make_asset

CATALOG_YAML = """\
apiVersion: backstage.io/v1alpha1
kind: Component
metadata:
  name: payments
spec:
  type: service
  lifecycle: production
  owner: team-payments
---
apiVersion: backstage.io/v1alpha1
kind: component
metadata:
  name: broken
spec:
  type: service
---
apiVersion: backstage.io/v1alpha1
kind: System
metadata:
  name: aws-123
spec:
  owner: firefly
  type: aws
---
apiVersion: backstage.io/v1alpha1
kind: API
metadata:
  name: payments-api
"""


def test_read_entities(tmp_path):
    (tmp_path / "catalog-info.yaml").write_text(CATALOG_YAML)
    (tmp_path / "notes.txt").write_text("kind: Component")

    entities = EntityReader().read_entities(tmp_path)

    assert [(e.kind, e.metadata.name) for e in entities] == [
        (EntityKind.COMPONENT, "payments"),
        (EntityKind.SYSTEM, "aws-123"),
    ]


def test_read_entities_of_one_kind(tmp_path):
    path = tmp_path / "catalog-info.yaml"
    path.write_text(CATALOG_YAML)

    entities = EntityReader().read_entities(path, kind=EntityKind.COMPONENT)

    assert [e.metadata.name for e in entities] == ["payments"]


def test_invalid_yaml_is_skipped(tmp_path):
    (tmp_path / "bad.yaml").write_text("kind: [unclosed")

    assert EntityReader().read_entities(tmp_path) == []


def test_export_and_read_back(tmp_path, asset):
    resource = asset_to_resource(asset)

    [path] = EntityWriter().export([resource], tmp_path)

    assert path == tmp_path / "resources" / f"{resource.metadata.name}.yaml"
    data = yaml.safe_load(path.read_text())
    assert data["kind"] == "Resource"
    assert data["spec"]["lifecycle"] == "managed"
    assert EntityReader().read_entities(tmp_path) == [resource]
