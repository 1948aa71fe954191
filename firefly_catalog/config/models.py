"""Configuration models for firefly-catalog."""

from __future__ import annotations

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..models import FireflyAssetFilters


class PeriodicCheckConfig(BaseModel):
    """What to import from Firefly and how often."""

    interval: float = Field(
        default=3600, ge=0, description="Seconds between refreshes (0 disables)"
    )
    import_systems: bool = Field(default=False, description="Create System entities")
    import_resources: bool = Field(default=False, description="Create Resource entities")
    filters: FireflyAssetFilters = Field(default_factory=FireflyAssetFilters)
    tag_keys_identifiers: list[str] = Field(
        default_factory=list,
        description="Label keys that must match between a resource and a component",
    )
    correlate_by_component_name: bool = Field(
        default=False, description="Relate resources tagged with a component's name"
    )


class FireflySettings(BaseModel):
    """Firefly API connection settings."""

    base_url: str = Field(default="https://api.firefly.ai/api/v1.0")
    page_size: int = Field(default=10000, gt=0)
    retry_delay: float = Field(default=1.0, ge=0, description="Backoff base in seconds")
    timeout: float = Field(default=60.0, gt=0)
    periodic_check: PeriodicCheckConfig = Field(default_factory=PeriodicCheckConfig)


class CatalogSettings(BaseModel):
    """Local catalog store settings."""

    database: str = Field(
        default="firefly-catalog.duckdb", description="DuckDB file (':memory:' allowed)"
    )


class FireflyCatalogConfig(BaseModel):
    """Root configuration model."""

    version: int = Field(default=1)
    firefly: FireflySettings = Field(default_factory=FireflySettings)
    catalog: CatalogSettings = Field(default_factory=CatalogSettings)


class FireflyCredentials(BaseSettings):
    """Firefly API keys, read from FIREFLY_ACCESS_KEY and FIREFLY_SECRET_KEY."""

    model_config = SettingsConfigDict(env_prefix="FIREFLY_", extra="ignore")

    access_key: str = ""
    secret_key: str = ""

    @property
    def is_complete(self) -> bool:
        return bool(self.access_key and self.secret_key)
