"""DuckDB catalog store and coverage queries."""

from .queries import ComponentResourceCount, CoverageQueries, CoverageReport
from .schema import create_schema, get_connection
from .store import CatalogStore, ProviderConnection, normalize_entity_ref

__all__ = [
    "create_schema",
    "get_connection",
    "normalize_entity_ref",
    "CatalogStore",
    "ComponentResourceCount",
    "CoverageQueries",
    "CoverageReport",
    "ProviderConnection",
]
