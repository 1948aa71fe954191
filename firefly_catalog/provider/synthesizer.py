"""Build catalog entities from Firefly assets."""

from __future__ import annotations

import hashlib
import json
import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from ..models import (
    ComponentIdentifiers,
    EntityLink,
    EntityMetadata,
    FireflyAsset,
    Resource,
    ResourceSpec,
    System,
    SystemSpec,
)
from .labels import build_labels_for_asset, build_tag_list

logger = logging.getLogger(__name__)

ANNOTATION_PREFIX = "firefly.ai/"
FIREFLY_APP_URL = "https://app.firefly.ai/"
FIREFLY_OWNER = "firefly"
UNKNOWN = "unknown"


def asset_id_hash(value: str) -> str:
    """Stable entity name for a Firefly id (SHA-1 hex digest)."""
    return hashlib.sha1(value.encode("utf-8")).hexdigest()


def resource_ref(firefly_id: str) -> str:
    return f"resource:{asset_id_hash(firefly_id)}"


def _unique(values: Iterable[str]) -> list[str]:
    """Drop duplicates, keeping first occurrence order."""
    return list(dict.fromkeys(values))


def correlate_components(
    labels: dict[str, str],
    tags: Sequence[str],
    components: Sequence[ComponentIdentifiers],
    tag_keys_identifiers: Sequence[str] = (),
    correlate_by_name: bool = False,
) -> list[str]:
    """Find the components an asset belongs to.

    Two strategies, results combined:

    - tag identifiers: when the asset carries every identifier key, a
      component matches if its labels hold the same value for each key;
    - component name: a component matches if its name equals one of the
      asset tags, ignoring a tag equal to the location label value.

    Returns:
        Component references without duplicates.
    """
    refs: list[str] = []

    if tag_keys_identifiers and all(key in labels for key in tag_keys_identifiers):
        wanted = {key: labels[key] for key in tag_keys_identifiers}
        for component in components:
            if all(component.labels.get(key) == value for key, value in wanted.items()):
                refs.append(component.ref)

    if correlate_by_name:
        location = labels.get("location")
        candidate_tags = {tag for tag in tags if tag != location}
        if candidate_tags:
            for component in components:
                if component.name in candidate_tags:
                    refs.append(component.ref)

    return _unique(refs)


def _annotations_for_asset(asset: FireflyAsset) -> dict[str, str]:
    values = {
        "managed-by-firefly": "true",
        # Asset identification
        "asset-id": asset.asset_id,
        "resource-id": asset.resource_id,
        "fireflyAssetId": asset.firefly_asset_id,
        # Resource metadata
        "name": asset.name,
        "arn": asset.arn,
        "state": asset.state,
        "location": asset.region,
        "owner": asset.owner,
        # Links
        "cloud-link": asset.console_url,
        "code-link": asset.vcs_code_link,
        "firefly-link": asset.firefly_link,
        # Infrastructure as code
        "iac-type": asset.iac_type,
        "terraform-module": asset.terraform_module,
        "terraform-object-name": asset.terraform_object_name,
        "delete-command": asset.delete_command,
        "state-location": asset.state_location_string,
        # Provider
        "origin-provider-id": asset.provider_id,
        "vcs-provider": asset.vcs_provider,
        "vcs-repo": asset.vcs_repo,
        # Timestamps
        "resource-creation-date": asset.resource_creation_date,
        "last-resource-state-change": asset.last_resource_state_change,
    }
    annotations = {}
    if asset.firefly_link:
        annotations["backstage.io/managed-by-location"] = f"url:{asset.firefly_link}"
        annotations["backstage.io/managed-by-origin-location"] = f"url:{asset.firefly_link}"
    for key, value in values.items():
        if value is not None and value != "":
            annotations[ANNOTATION_PREFIX + key] = str(value)
    if asset.tf_object is not None:
        annotations[ANNOTATION_PREFIX + "asset-config"] = json.dumps(
            asset.tf_object, default=str
        )
    return annotations


def _links_for_asset(asset: FireflyAsset) -> list[EntityLink]:
    links = []
    for url, title in (
        (asset.console_url, "Cloud Link"),
        (asset.vcs_code_link, "Code Link"),
        (asset.firefly_link, "Firefly Link"),
    ):
        if url:
            links.append(EntityLink(url=url, title=title))
    return links


def asset_to_resource(
    asset: FireflyAsset,
    components: Sequence[ComponentIdentifiers] = (),
    tag_keys_identifiers: Sequence[str] = (),
    correlate_by_name: bool = False,
) -> Resource:
    """Convert a Firefly asset into a Resource entity."""
    labels = build_labels_for_asset(asset)
    tags = build_tag_list(labels)
    component_refs = correlate_components(
        labels, tags, components, tag_keys_identifiers, correlate_by_name
    )

    depends_on = _unique(resource_ref(source) for source in asset.connection_sources)
    dependency_of = _unique(
        [resource_ref(target) for target in asset.connection_targets] + component_refs
    )

    return Resource(
        metadata=EntityMetadata(
            name=asset_id_hash(asset.firefly_asset_id),
            title=asset.name,
            labels=labels,
            tags=tags,
            annotations=_annotations_for_asset(asset),
            links=_links_for_asset(asset),
        ),
        spec=ResourceSpec(
            type=asset.asset_type or UNKNOWN,
            owner=asset.owner or UNKNOWN,
            system=asset.provider_id or UNKNOWN,
            lifecycle=asset.state or UNKNOWN,
            dependsOn=depends_on,
            dependencyOf=dependency_of,
        ),
    )


def assets_to_systems(assets: Iterable[FireflyAsset]) -> list[System]:
    """Create one System per provider account, in first-seen order.

    The system type is the provider family of the first asset seen for the
    account.
    """
    provider_types: dict[str, str] = {}
    for asset in assets:
        if not asset.provider_id or asset.provider_id in provider_types:
            continue
        provider_types[asset.provider_id] = asset.provider_type

    return [
        System(
            metadata=EntityMetadata(
                name=provider_id,
                annotations={
                    "backstage.io/managed-by-location": f"url:{FIREFLY_APP_URL}",
                    "backstage.io/managed-by-origin-location": f"url:{FIREFLY_APP_URL}",
                    ANNOTATION_PREFIX + "managed-by-firefly": "true",
                    ANNOTATION_PREFIX + "origin-provider-id": provider_id,
                },
            ),
            spec=SystemSpec(owner=FIREFLY_OWNER, type=provider_type or UNKNOWN),
        )
        for provider_id, provider_type in provider_types.items()
    ]


@dataclass
class EntitySynthesizer:
    """Turns fetched assets into catalog entities using the configured correlation."""

    tag_keys_identifiers: list[str] = field(default_factory=list)
    correlate_by_component_name: bool = False

    def synthesize_resources(
        self,
        assets: Sequence[FireflyAsset],
        components: Sequence[ComponentIdentifiers],
    ) -> list[Resource]:
        resources = [
            asset_to_resource(
                asset,
                components,
                self.tag_keys_identifiers,
                self.correlate_by_component_name,
            )
            for asset in assets
        ]
        correlated = sum(
            1 for r in resources if any(ref.startswith("component:") for ref in r.spec.dependencyOf)
        )
        logger.debug(f"Correlated {correlated} of {len(resources)} resources to components")
        return resources

    def synthesize_systems(self, assets: Sequence[FireflyAsset]) -> list[System]:
        return assets_to_systems(assets)
