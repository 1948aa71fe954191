"""IaC coverage queries over the catalog."""

from __future__ import annotations

from dataclasses import dataclass, field

from .store import CatalogStore, normalize_entity_ref

# Firefly lifecycle state -> coverage status, in display order
COVERAGE_STATUSES = (
    "Codified",
    "Unmanaged",
    "Ghost",
    "Drifted",
    "Undetermined",
    "IaC-Ignored",
    "Child",
    "Pending",
)
LIFECYCLE_STATUS = {
    "managed": "Codified",
    "unmanaged": "Unmanaged",
    "ghost": "Ghost",
    "drifted": "Drifted",
    "undetermined": "Undetermined",
    "iacIgnored": "IaC-Ignored",
    "child": "Child",
    "pending": "Pending",
}

TOP_COMPONENT_CATEGORIES = {
    "resources": None,
    "unmanaged": ("unmanaged",),
    "drifted": ("drifted",),
}


@dataclass
class CoverageReport:
    """Resource counts per IaC coverage status."""

    counts: dict[str, int] = field(
        default_factory=lambda: {status: 0 for status in COVERAGE_STATUSES}
    )

    @property
    def total(self) -> int:
        return sum(self.counts.values())

    def percent(self, status: str) -> int:
        """Share of a status, rounded to a whole percent (0 when empty)."""
        if self.total == 0:
            return 0
        return round(self.counts.get(status, 0) / self.total * 100)

    @property
    def codified_percent(self) -> int:
        return self.percent("Codified")

    @property
    def unmanaged_percent(self) -> int:
        return self.percent("Unmanaged")


@dataclass
class ComponentResourceCount:
    """A component and how many Firefly resources are related to it."""

    ref: str
    count: int

    @property
    def name(self) -> str:
        """Reference without the kind prefix (namespace/name)."""
        return self.ref.split(":", 1)[-1]


class CoverageQueries:
    """Queries backing the IaC coverage reports."""

    def __init__(self, store: CatalogStore):
        self.store = store
        self.conn = store.conn

    def iac_coverage(self, component_ref: str | None = None) -> CoverageReport:
        """Count Firefly resources by coverage status.

        Only resources imported from Firefly (those with an asset id) are
        counted. With component_ref, only resources related to that
        component through dependencyOf are counted.
        """
        sql = """
            SELECT lifecycle, COUNT(*) FROM entities
            WHERE kind = 'Resource' AND asset_id IS NOT NULL
        """
        params: list[str] = []
        if component_ref:
            sql += """
                AND id IN (
                    SELECT source_id FROM relations
                    WHERE relation_type = 'dependencyOf' AND target_id = ?
                )
            """
            params.append(normalize_entity_ref(component_ref))
        sql += " GROUP BY lifecycle"

        with self.store.lock:
            rows = self.conn.execute(sql, params).fetchall()

        report = CoverageReport()
        for lifecycle, n in rows:
            status = LIFECYCLE_STATUS.get(lifecycle or "", "Undetermined")
            report.counts[status] += n
        return report

    def top_components(
        self, category: str = "resources", limit: int = 5
    ) -> list[ComponentResourceCount]:
        """Components with the most related resources.

        Args:
            category: 'resources' counts all resources, 'unmanaged' and
                'drifted' only resources in that state.
            limit: Maximum number of components returned.
        """
        if category not in TOP_COMPONENT_CATEGORIES:
            raise ValueError(f"Unknown category: {category}")
        lifecycles = TOP_COMPONENT_CATEGORIES[category]

        sql = """
            SELECT r.target_id, COUNT(*) AS resource_count
            FROM relations r
            JOIN entities e ON e.id = r.source_id
            WHERE r.relation_type = 'dependencyOf'
              AND e.kind = 'Resource'
              AND r.target_id LIKE 'Component:%'
        """
        params: list = []
        if lifecycles:
            placeholders = ", ".join("?" for _ in lifecycles)
            sql += f" AND e.lifecycle IN ({placeholders})"
            params.extend(lifecycles)
        sql += " GROUP BY r.target_id ORDER BY resource_count DESC, r.target_id LIMIT ?"
        params.append(limit)

        with self.store.lock:
            rows = self.conn.execute(sql, params).fetchall()
        return [ComponentResourceCount(ref=row[0], count=row[1]) for row in rows]
