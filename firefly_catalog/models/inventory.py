"""Models for the Firefly inventory API payloads."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class FireflyAsset(BaseModel):
    """One cloud asset as reported by the Firefly inventory.

    Only ``fireflyAssetId`` is required: it is the vendor-unique id that the
    catalog identity of the asset is derived from.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    firefly_asset_id: str = Field(..., min_length=1)
    asset_id: str | None = None
    resource_id: str | None = None
    asset_type: str | None = None
    provider_id: str | None = None
    name: str | None = None
    state: str | None = None
    region: str | None = None
    owner: str | None = None
    arn: str | None = None
    tags_list: list[str] = Field(default_factory=list)
    connection_sources: list[str] = Field(default_factory=list)
    connection_targets: list[str] = Field(default_factory=list)

    console_url: str | None = Field(default=None, alias="consoleURL")
    vcs_code_link: str | None = None
    firefly_link: str | None = None
    vcs_provider: str | None = None
    vcs_repo: str | None = None

    iac_type: str | None = None
    terraform_module: str | None = None
    terraform_object_name: str | None = None
    delete_command: str | None = None
    state_location_string: str | None = None

    # Passed through verbatim: epoch numbers or date strings
    resource_creation_date: Any = None
    last_resource_state_change: Any = None

    tf_object: Any = None

    @property
    def provider_type(self) -> str:
        """Provider family encoded in the asset type (``aws_s3_bucket`` -> ``aws``)."""
        return (self.asset_type or "").split("_")[0]


class FireflyAssetFilters(BaseModel):
    """Inventory query filters.

    Unknown fields are kept and sent to the API verbatim.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    asset_types: list[str] | None = None
    provider_ids: list[str] | None = None
    asset_state: str | None = None
    names: list[str] | None = None
    arns: list[str] | None = None
    day_range_epoch: int | None = None

    def to_query(self) -> dict[str, Any]:
        """Render the filters as the camelCase request body."""
        return self.model_dump(by_alias=True, exclude_none=True)


class InventoryPage(BaseModel):
    """One page of inventory results."""

    items: list[FireflyAsset] = Field(default_factory=list)
    total_count: int = 0
    after_key: Any = None
    fetched_count: int = Field(
        default=0, description="Records on the page before validation"
    )


class FireflyAggregation(BaseModel):
    """Aggregated inventory counts."""

    model_config = ConfigDict(extra="allow")

    type: str
    count: int = 0
    details: dict[str, Any] = Field(default_factory=dict)
