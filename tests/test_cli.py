import pytest
import respx
from typer.testing import CliRunner

from firefly_catalog.config import ConfigLoader
from firefly_catalog.main import app

BASE_URL = "https://api.firefly.test/api/v1.0"

COMPONENT_YAML = """\
apiVersion: backstage.io/v1alpha1
kind: Component
metadata:
  name: payments
  labels:
    app: payments
spec:
  type: service
  lifecycle: production
  owner: team-payments
---
apiVersion: backstage.io/v1alpha1
kind: Group
metadata:
  name: team-payments
spec:
  type: team
"""

runner = CliRunner()


@pytest.fixture
def project(tmp_path, monkeypatch):
    monkeypatch.setattr(ConfigLoader, "USER_CONFIG_DIR", tmp_path / "home")
    monkeypatch.setenv("FIREFLY_ACCESS_KEY", "ak")
    monkeypatch.setenv("FIREFLY_SECRET_KEY", "sk")
    (tmp_path / "firefly.yaml").write_text(
        f"""\
firefly:
  base_url: {BASE_URL}
  retry_delay: 0
  periodic_check:
    import_resources: true
    import_systems: true
    correlate_by_component_name: true
catalog:
  database: {tmp_path / "catalog.duckdb"}
"""
    )
    (tmp_path / "components.yaml").write_text(COMPONENT_YAML)
    return tmp_path


def invoke(project, *args):
    return runner.invoke(app, ["--project", str(project), *args])


def test_load_components(project):
    result = invoke(project, "load-components", str(project / "components.yaml"))

    assert result.exit_code == 0, result.output
    assert "Loaded 1 components" in result.output


@respx.mock
def test_sync_coverage_and_export(project):
    respx.post(f"{BASE_URL}/login").respond(json={"accessToken": "tok"})
    respx.post(f"{BASE_URL}/inventory").respond(
        json={
            "responseObjects": [
                {
                    "fireflyAssetId": "asset-1",
                    "assetId": "bucket-1",
                    "assetType": "aws_s3_bucket",
                    "providerId": "123456789012",
                    "state": "unmanaged",
                    "tagsList": ["app: payments"],
                }
            ],
            "totalObjects": 1,
        }
    )
    invoke(project, "load-components", str(project / "components.yaml"))

    result = invoke(project, "sync")
    assert result.exit_code == 0, result.output
    assert "1 resources, 1 systems" in result.output

    result = invoke(project, "coverage")
    assert result.exit_code == 0, result.output
    assert "Unmanaged" in result.output
    assert "default/payments" in result.output

    result = invoke(project, "export", str(project / "out"))
    assert result.exit_code == 0, result.output
    assert (project / "out" / "systems" / "123456789012.yaml").exists()
    assert (project / "out" / "components" / "payments.yaml").exists()


@respx.mock
def test_sync_failure_exits_non_zero(project):
    respx.post(f"{BASE_URL}/login").respond(500)

    result = invoke(project, "sync")

    assert result.exit_code == 1
    assert "Refresh failed" in result.output


def test_sync_without_credentials(project, monkeypatch):
    monkeypatch.delenv("FIREFLY_SECRET_KEY")

    result = invoke(project, "sync")

    assert result.exit_code == 1
    assert "not set" in result.output


def test_coverage_on_empty_catalog(project):
    result = invoke(project, "coverage")

    assert result.exit_code == 0
    assert "No Firefly resources found" in result.output


@respx.mock
def test_aggregations(project):
    respx.post(f"{BASE_URL}/login").respond(json={"accessToken": "tok"})
    route = respx.post(f"{BASE_URL}/inventory/aggregations").respond(
        json=[{"type": "managed", "count": 12}, {"type": "ghost", "count": 2}]
    )

    result = invoke(project, "aggregations")

    assert result.exit_code == 0, result.output
    assert "managed" in result.output
    assert "12" in result.output
    assert route.call_count == 1
