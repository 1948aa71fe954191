"""Firefly entity provider: asset synthesis and periodic refresh."""

from .connection import ComponentRegistry, EntityProviderConnection
from .entity_provider import (
    LOCATION_KEY,
    PROVIDER_NAME,
    FireflyEntityProvider,
    RefreshResult,
    RefreshState,
)
from .labels import build_labels_for_asset, build_tag_list, tags_to_labels, valid_name
from .synthesizer import (
    EntitySynthesizer,
    asset_id_hash,
    asset_to_resource,
    assets_to_systems,
    correlate_components,
)

__all__ = [
    "ComponentRegistry",
    "EntityProviderConnection",
    "EntitySynthesizer",
    "FireflyEntityProvider",
    "LOCATION_KEY",
    "PROVIDER_NAME",
    "RefreshResult",
    "RefreshState",
    "asset_id_hash",
    "asset_to_resource",
    "assets_to_systems",
    "build_labels_for_asset",
    "build_tag_list",
    "correlate_components",
    "tags_to_labels",
    "valid_name",
]
