"""DuckDB tables backing the catalog store."""

import duckdb

# Entity ids are not declared unique: a full refresh deletes and re-inserts
# the same ids inside one transaction. CatalogStore keeps them unique.
ENTITIES_TABLE = """
    CREATE TABLE IF NOT EXISTS entities (
        id VARCHAR NOT NULL,
        kind VARCHAR NOT NULL,
        namespace VARCHAR NOT NULL DEFAULT 'default',
        name VARCHAR NOT NULL,
        title VARCHAR,
        owner VARCHAR,
        lifecycle VARCHAR,
        type VARCHAR,
        system VARCHAR,
        tags VARCHAR[],
        labels JSON,
        annotations JSON,
        asset_id VARCHAR,
        provider VARCHAR NOT NULL,
        location_key VARCHAR,
        raw_entity JSON NOT NULL,
        updated_at TIMESTAMP DEFAULT current_timestamp
    )
"""

# source_id is an entity id, target_id a normalized reference that may point
# outside the catalog (e.g. a resource Firefly did not return)
RELATIONS_TABLE = """
    CREATE TABLE IF NOT EXISTS relations (
        id INTEGER PRIMARY KEY,
        source_id VARCHAR NOT NULL,
        target_id VARCHAR NOT NULL,
        relation_type VARCHAR NOT NULL
    )
"""

INDEXES = {
    "idx_entities_id": "entities(id)",
    "idx_entities_kind": "entities(kind)",
    "idx_entities_provider": "entities(provider)",
    "idx_entities_lifecycle": "entities(lifecycle)",
    "idx_relations_source": "relations(source_id)",
    "idx_relations_target": "relations(target_id)",
}


def get_connection(path: str = ":memory:") -> duckdb.DuckDBPyConnection:
    return duckdb.connect(path)


def create_schema(conn: duckdb.DuckDBPyConnection) -> None:
    """Create tables, the relation id sequence and indexes if missing."""
    conn.execute(ENTITIES_TABLE)
    conn.execute(RELATIONS_TABLE)
    conn.execute("CREATE SEQUENCE IF NOT EXISTS relations_id_seq START 1")
    for index_name, target in INDEXES.items():
        conn.execute(f"CREATE INDEX IF NOT EXISTS {index_name} ON {target}")
