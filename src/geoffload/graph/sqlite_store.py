"""SQLite-backed entity store.

SqliteEntityStore implements the EntityStore protocol using stdlib sqlite3.
Labels and properties live in their own tables so that the label+key lookup
used for hook resolution is served by indexes. Property values are stored
as JSON text and compared after decoding, so integer and float values match
numerically while booleans stay distinct.

The connection runs in autocommit mode; wrap a load in :meth:`transaction`
to make it atomic.
"""

from __future__ import annotations

import json
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Any

from geoffload.graph.values import PropertyValue, values_equal

if TYPE_CHECKING:
    from collections.abc import Iterator

    from geoffload.graph.store import EntityId, RelationshipId

_SCHEMA = """\
CREATE TABLE IF NOT EXISTS entities (
    entity_id INTEGER PRIMARY KEY AUTOINCREMENT
);

CREATE TABLE IF NOT EXISTS entity_labels (
    entity_id INTEGER NOT NULL REFERENCES entities(entity_id),
    label     TEXT NOT NULL,
    PRIMARY KEY (entity_id, label)
);
CREATE INDEX IF NOT EXISTS idx_entity_labels_label ON entity_labels(label);

CREATE TABLE IF NOT EXISTS entity_properties (
    entity_id INTEGER NOT NULL REFERENCES entities(entity_id),
    key       TEXT NOT NULL,
    value     JSON NOT NULL,
    PRIMARY KEY (entity_id, key)
);
CREATE INDEX IF NOT EXISTS idx_entity_properties_key ON entity_properties(key);

CREATE TABLE IF NOT EXISTS relationships (
    relationship_id INTEGER PRIMARY KEY AUTOINCREMENT,
    start_id        INTEGER NOT NULL REFERENCES entities(entity_id),
    end_id          INTEGER NOT NULL REFERENCES entities(entity_id),
    type            TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_relationships_start ON relationships(start_id);
CREATE INDEX IF NOT EXISTS idx_relationships_end   ON relationships(end_id);

CREATE TABLE IF NOT EXISTS relationship_properties (
    relationship_id INTEGER NOT NULL REFERENCES relationships(relationship_id),
    key             TEXT NOT NULL,
    value           JSON NOT NULL,
    PRIMARY KEY (relationship_id, key)
);
"""


class SqliteEntityStore:
    """SQLite-backed entity store."""

    def __init__(
        self,
        db_path: str | Path = ":memory:",
        *,
        _conn: sqlite3.Connection | None = None,
    ) -> None:
        """Open or create an entity database.

        Args:
            db_path: Path to ``.db`` file, or ``":memory:"`` for in-memory.
            _conn: Pre-existing connection (for testing). If provided,
                   *db_path* is ignored.
        """
        if _conn is not None:
            self._conn = _conn
            self._db_path: str = ":memory:"
        else:
            self._db_path = str(db_path) if isinstance(db_path, Path) else db_path
            self._conn = sqlite3.connect(
                self._db_path,
                isolation_level=None,  # autocommit, transactions are explicit
            )
        self._conn.row_factory = sqlite3.Row
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.execute("PRAGMA synchronous=NORMAL")
        self._conn.execute("PRAGMA foreign_keys=ON")
        self._conn.executescript(_SCHEMA)

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """Run the enclosed operations in one transaction.

        Commits on normal exit and rolls back if the block raises.
        """
        self._conn.execute("BEGIN")
        try:
            yield
        except BaseException:
            self._conn.execute("ROLLBACK")
            raise
        else:
            self._conn.execute("COMMIT")

    # -- Entities --------------------------------------------------------------

    def find_entities(self, label: str, key: str, value: PropertyValue) -> set[EntityId]:
        if value is None:
            rows = self._conn.execute(
                "SELECT l.entity_id FROM entity_labels l WHERE l.label = ? "
                "AND NOT EXISTS (SELECT 1 FROM entity_properties p "
                "WHERE p.entity_id = l.entity_id AND p.key = ?)",
                (label, key),
            ).fetchall()
            return {row["entity_id"] for row in rows}
        rows = self._conn.execute(
            "SELECT l.entity_id, p.value FROM entity_labels l "
            "JOIN entity_properties p ON p.entity_id = l.entity_id "
            "WHERE l.label = ? AND p.key = ?",
            (label, key),
        ).fetchall()
        return {
            row["entity_id"] for row in rows if values_equal(json.loads(row["value"]), value)
        }

    def create_entity(self) -> EntityId:
        cursor = self._conn.execute("INSERT INTO entities DEFAULT VALUES")
        return int(cursor.lastrowid)  # type: ignore[arg-type]

    def add_label(self, entity_id: EntityId, label: str) -> None:
        self._conn.execute(
            "INSERT OR IGNORE INTO entity_labels (entity_id, label) VALUES (?, ?)",
            (entity_id, label),
        )

    def set_entity_property(self, entity_id: EntityId, key: str, value: PropertyValue) -> None:
        if value is None:
            raise ValueError(f"Refusing to store null for property {key!r}")
        self._conn.execute(
            "INSERT OR REPLACE INTO entity_properties (entity_id, key, value) VALUES (?, ?, ?)",
            (entity_id, key, json.dumps(value)),
        )

    def get_entity(self, entity_id: EntityId) -> dict[str, Any] | None:
        """Return an entity's labels and properties, or None if absent."""
        row = self._conn.execute(
            "SELECT entity_id FROM entities WHERE entity_id = ?", (entity_id,)
        ).fetchone()
        if row is None:
            return None
        labels = self._conn.execute(
            "SELECT label FROM entity_labels WHERE entity_id = ?", (entity_id,)
        ).fetchall()
        properties = self._conn.execute(
            "SELECT key, value FROM entity_properties WHERE entity_id = ?", (entity_id,)
        ).fetchall()
        return {
            "labels": {r["label"] for r in labels},
            "properties": {r["key"]: json.loads(r["value"]) for r in properties},
        }

    def entity_count(self) -> int:
        row = self._conn.execute("SELECT COUNT(*) FROM entities").fetchone()
        return int(row[0])

    # -- Relationships ---------------------------------------------------------

    def create_relationship(self, start: EntityId, end: EntityId, type: str) -> RelationshipId:
        cursor = self._conn.execute(
            "INSERT INTO relationships (start_id, end_id, type) VALUES (?, ?, ?)",
            (start, end, type),
        )
        return int(cursor.lastrowid)  # type: ignore[arg-type]

    def set_relationship_property(
        self, relationship_id: RelationshipId, key: str, value: PropertyValue
    ) -> None:
        if value is None:
            raise ValueError(f"Refusing to store null for property {key!r}")
        self._conn.execute(
            "INSERT OR REPLACE INTO relationship_properties (relationship_id, key, value) "
            "VALUES (?, ?, ?)",
            (relationship_id, key, json.dumps(value)),
        )

    def _relationship_dict(self, row: sqlite3.Row) -> dict[str, Any]:
        properties = self._conn.execute(
            "SELECT key, value FROM relationship_properties WHERE relationship_id = ?",
            (row["relationship_id"],),
        ).fetchall()
        return {
            "start": row["start_id"],
            "end": row["end_id"],
            "type": row["type"],
            "properties": {r["key"]: json.loads(r["value"]) for r in properties},
        }

    def get_relationship(self, relationship_id: RelationshipId) -> dict[str, Any] | None:
        row = self._conn.execute(
            "SELECT * FROM relationships WHERE relationship_id = ?", (relationship_id,)
        ).fetchone()
        return self._relationship_dict(row) if row is not None else None

    def relationships_from(self, entity_id: EntityId) -> list[dict[str, Any]]:
        rows = self._conn.execute(
            "SELECT * FROM relationships WHERE start_id = ? ORDER BY relationship_id",
            (entity_id,),
        ).fetchall()
        return [self._relationship_dict(row) for row in rows]

    def relationship_count(self) -> int:
        row = self._conn.execute("SELECT COUNT(*) FROM relationships").fetchone()
        return int(row[0])
