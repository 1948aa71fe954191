import json

from firefly_catalog.models import ComponentIdentifiers, EntityKind
from firefly_catalog.provider.synthesizer import (
    EntitySynthesizer,
    asset_id_hash,
    asset_to_resource,
    assets_to_systems,
    correlate_components,
    resource_ref,
)

from .conftest import make_asset


def test_asset_id_hash_is_deterministic():
    assert asset_id_hash("asset-1") == asset_id_hash("asset-1")
    assert asset_id_hash("asset-1") != asset_id_hash("asset-2")
    assert len(asset_id_hash("asset-1")) == 40


class TestSystems:
    def test_one_system_per_provider(self):
        assets = [
            make_asset(fireflyAssetId="a", providerId="aws-123", assetType="aws_s3_bucket"),
            make_asset(fireflyAssetId="b", providerId="aws-123", assetType="aws_lambda_function"),
            make_asset(fireflyAssetId="c", providerId="gcp-456", assetType="google_compute_instance"),
        ]

        systems = assets_to_systems(assets)

        assert [(s.metadata.name, s.spec.type) for s in systems] == [
            ("aws-123", "aws"),
            ("gcp-456", "google"),
        ]

    def test_system_fields(self):
        system = assets_to_systems([make_asset()])[0]

        assert system.kind == EntityKind.SYSTEM
        assert system.spec.owner == "firefly"
        annotations = system.metadata.annotations
        assert annotations["firefly.ai/managed-by-firefly"] == "true"
        assert annotations["firefly.ai/origin-provider-id"] == "123456789012"
        assert annotations["backstage.io/managed-by-location"] == "url:https://app.firefly.ai/"

    def test_first_seen_type_wins(self):
        assets = [
            make_asset(fireflyAssetId="a", providerId="p", assetType="aws_s3_bucket"),
            make_asset(fireflyAssetId="b", providerId="p", assetType="google_bucket"),
        ]
        assert assets_to_systems(assets)[0].spec.type == "aws"

    def test_assets_without_provider_are_skipped(self):
        assert assets_to_systems([make_asset(providerId=None)]) == []

    def test_empty(self):
        assert assets_to_systems([]) == []


class TestResource:
    def test_identity_and_spec(self, asset):
        resource = asset_to_resource(asset)

        assert resource.kind == EntityKind.RESOURCE
        assert resource.metadata.name == asset_id_hash("arn:aws:s3:::payments-bucket")
        assert resource.metadata.title == "payments-bucket"
        assert resource.spec.type == "aws_s3_bucket"
        assert resource.spec.owner == "team-payments"
        assert resource.spec.system == "123456789012"
        assert resource.spec.lifecycle == "managed"

    def test_unknown_defaults(self):
        resource = asset_to_resource(
            make_asset(assetType=None, owner=None, providerId=None, state=None)
        )
        assert resource.spec.type == "unknown"
        assert resource.spec.owner == "unknown"
        assert resource.spec.system == "unknown"
        assert resource.spec.lifecycle == "unknown"

    def test_labels_and_tags(self, asset):
        resource = asset_to_resource(asset)

        assert resource.metadata.labels == {
            "app": "payments",
            "env": "Production",
            "location": "us-east-1",
        }
        assert resource.metadata.tags == ["payments", "production", "us-east-1"]

    def test_annotations(self, asset):
        annotations = asset_to_resource(asset).metadata.annotations

        assert annotations["firefly.ai/fireflyAssetId"] == "arn:aws:s3:::payments-bucket"
        assert annotations["firefly.ai/asset-id"] == "payments-bucket"
        assert annotations["firefly.ai/iac-type"] == "terraform"
        assert annotations["firefly.ai/location"] == "us-east-1"
        assert annotations["backstage.io/managed-by-location"] == (
            "url:https://app.firefly.ai/inventory?asset=payments-bucket"
        )
        assert "firefly.ai/code-link" not in annotations

    def test_asset_config_is_serialized(self):
        asset = make_asset(tfObject={"bucket": "payments", "versioning": {"enabled": True}})
        annotations = asset_to_resource(asset).metadata.annotations
        assert json.loads(annotations["firefly.ai/asset-config"]) == {
            "bucket": "payments",
            "versioning": {"enabled": True},
        }

    def test_opaque_values_are_serialized_verbatim(self):
        asset = make_asset(tfObject=["first", {"k": 1}], resourceCreationDate=1700000000.5)
        annotations = asset_to_resource(asset).metadata.annotations

        assert json.loads(annotations["firefly.ai/asset-config"]) == ["first", {"k": 1}]
        assert annotations["firefly.ai/resource-creation-date"] == "1700000000.5"

    def test_links(self, asset):
        links = asset_to_resource(asset).metadata.links
        assert [link.title for link in links] == ["Cloud Link", "Firefly Link"]

    def test_connections(self):
        asset = make_asset(
            connectionSources=["src-1", "src-1", "src-2"],
            connectionTargets=["dst-1"],
        )
        resource = asset_to_resource(asset)

        assert resource.spec.dependsOn == [resource_ref("src-1"), resource_ref("src-2")]
        assert resource.spec.dependencyOf == [resource_ref("dst-1")]
        assert resource.spec.dependsOn[0] == f"resource:{asset_id_hash('src-1')}"


class TestCorrelation:
    components = [
        ComponentIdentifiers(name="payments", labels={"app": "payments", "env": "Production"}),
        ComponentIdentifiers(name="billing", labels={"app": "billing", "env": "Production"}),
        ComponentIdentifiers(name="us-east-1", namespace="infra"),
    ]

    def test_by_name(self, asset):
        resource = asset_to_resource(asset, self.components, correlate_by_name=True)
        assert resource.spec.dependencyOf == ["component:default/payments"]

    def test_by_name_ignores_location_tag(self):
        asset = make_asset(tagsList=[])
        resource = asset_to_resource(asset, self.components, correlate_by_name=True)
        assert resource.spec.dependencyOf == []

    def test_by_name_keeps_tag_that_differs_from_location_label(self):
        # label "US_East" turns into tag "us-east", which is not the label value
        asset = make_asset(region="US_East", tagsList=[])
        components = [ComponentIdentifiers(name="us-east")]

        resource = asset_to_resource(asset, components, correlate_by_name=True)

        assert resource.metadata.labels["location"] == "US_East"
        assert resource.spec.dependencyOf == ["component:default/us-east"]

    def test_by_tag_identifiers(self, asset):
        refs = correlate_components(
            {"app": "payments", "env": "Production", "location": "us-east-1"},
            [],
            self.components,
            tag_keys_identifiers=["app", "env"],
        )
        assert refs == ["component:default/payments"]

    def test_tag_identifiers_require_every_key(self):
        refs = correlate_components(
            {"app": "payments", "location": "us-east-1"},
            ["payments"],
            self.components,
            tag_keys_identifiers=["app", "env"],
        )
        assert refs == []

    def test_both_strategies_are_deduplicated(self, asset):
        resource = asset_to_resource(
            asset,
            self.components,
            tag_keys_identifiers=["app"],
            correlate_by_name=True,
        )
        assert resource.spec.dependencyOf == ["component:default/payments"]

    def test_component_refs_follow_connection_refs(self):
        asset = make_asset(connectionTargets=["dst-1"])
        resource = asset_to_resource(asset, self.components, correlate_by_name=True)
        assert resource.spec.dependencyOf == [
            resource_ref("dst-1"),
            "component:default/payments",
        ]

    def test_disabled_by_default(self, asset):
        assert asset_to_resource(asset, self.components).spec.dependencyOf == []


def test_synthesizer_uses_configured_correlation(asset):
    synthesizer = EntitySynthesizer(tag_keys_identifiers=["app", "env"])
    components = [ComponentIdentifiers(name="svc", labels={"app": "payments", "env": "Production"})]

    resources = synthesizer.synthesize_resources([asset], components)
    systems = synthesizer.synthesize_systems([asset])

    assert resources[0].spec.dependencyOf == ["component:default/svc"]
    assert [s.metadata.name for s in systems] == ["123456789012"]
