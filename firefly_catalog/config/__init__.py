"""Configuration module for firefly-catalog."""

from .loader import ConfigLoader, load_config, load_credentials
from .models import (
    CatalogSettings,
    FireflyCatalogConfig,
    FireflyCredentials,
    FireflySettings,
    PeriodicCheckConfig,
)

__all__ = [
    "CatalogSettings",
    "ConfigLoader",
    "FireflyCatalogConfig",
    "FireflyCredentials",
    "FireflySettings",
    "PeriodicCheckConfig",
    "load_config",
    "load_credentials",
]
