"""
DuckDB Query Layer

SQL queries over the Parquet part files written by ParquetBackend.

Tables are append-only: an update writes a new revision of the row. Reads
keep only the latest revision per id and order rows by their first revision,
which is creation order.
"""

import asyncio
import json
import threading
from pathlib import Path
from typing import Any

import duckdb

from atlas_kg.config import AtlasConfig
from atlas_kg.types import (
    Agent,
    ChatMessage,
    Document,
    Edge,
    Entity,
    Insight,
    Territory,
)

# Columns stored as JSON-encoded strings
_JSON_COLUMNS = {
    "entities": ("metadata",),
    "territories": ("entity_ids",),
    "messages": ("referenced_entity_ids",),
}

_MODELS: dict[str, type] = {
    "documents": Document,
    "entities": Entity,
    "edges": Edge,
    "insights": Insight,
    "territories": Territory,
    "agents": Agent,
    "messages": ChatMessage,
}


class DuckDBQueries:
    """
    DuckDB query layer for Parquet datasets.

    Thread safety:
        Uses thread-local storage for connections since DuckDB connections
        are not thread-safe and asyncio.to_thread() may use different threads.

    DuckDB reads Parquet files directly without loading them into memory.
    """

    def __init__(self, kb_path: Path, config: AtlasConfig | None = None):
        self.kb_path = kb_path
        self.config = config
        self._local = threading.local()
        self._initialized = False

    async def initialize(self) -> None:
        """Mark as ready; connections are created per thread."""
        self._initialized = True

    def _get_conn(self) -> duckdb.DuckDBPyConnection:
        """Get thread-local DuckDB connection, creating if needed."""
        if not self._initialized:
            raise RuntimeError("DuckDB not initialized. Call initialize() first.")

        conn = getattr(self._local, "conn", None)
        if conn is None:
            conn = duckdb.connect()
            self._local.conn = conn
        return conn

    async def close(self) -> None:
        """Close the current thread's connection."""
        self._initialized = False
        conn = getattr(self._local, "conn", None)
        if conn is not None:
            conn.close()
            self._local.conn = None

    def _dataset_glob(self, table: str) -> str | None:
        """Return the part-file glob for a table, or None when nothing is written yet."""
        path = self.kb_path / f"{table}.parquet"
        if not path.is_dir() or not any(path.glob("part-*.parquet")):
            return None
        return str(path / "part-*.parquet").replace("'", "''")

    # -------------------------------------------------------------------------
    # Latest-revision reads
    # -------------------------------------------------------------------------

    def fetch_latest(
        self,
        table: str,
        project_id: str,
        ids: list[str] | None = None,
    ) -> list[dict[str, Any]]:
        """
        Return the latest revision of each row of a project, in creation order.

        Blocking; call from a worker thread.
        """
        glob = self._dataset_glob(table)
        if glob is None:
            return []
        if ids is not None and not ids:
            return []

        params: list[Any] = [project_id]
        id_filter = ""
        if ids is not None:
            id_filter = f"AND id IN ({','.join('?' for _ in ids)})"
            params.extend(ids)

        sql = f"""
            SELECT * EXCLUDE (rn, first_revision) FROM (
                SELECT *,
                    ROW_NUMBER() OVER (PARTITION BY id ORDER BY revision DESC) AS rn,
                    MIN(revision) OVER (PARTITION BY id) AS first_revision
                FROM read_parquet('{glob}')
                WHERE project_id = ? {id_filter}
            )
            WHERE rn = 1
            ORDER BY first_revision
        """
        cursor = self._get_conn().execute(sql, params)
        columns = [d[0] for d in cursor.description]
        return [dict(zip(columns, row)) for row in cursor.fetchall()]

    def to_record(self, table: str, row: dict[str, Any]) -> Any:
        """Convert a stored row to its pydantic record."""
        data = {k: v for k, v in row.items() if k != "revision"}
        for column in _JSON_COLUMNS.get(table, ()):
            raw = data.get(column)
            data[column] = json.loads(raw) if raw else None
        if table == "entities" and data.get("metadata") is None:
            data["metadata"] = {}
        if table == "territories" and data.get("entity_ids") is None:
            data["entity_ids"] = []
        if table == "messages" and data.get("referenced_entity_ids") is None:
            data["referenced_entity_ids"] = []
        return _MODELS[table].model_validate(data)

    async def list_records(self, table: str, project_id: str) -> list[Any]:
        """List the latest revision of every record of a project."""
        def _query() -> list[Any]:
            return [self.to_record(table, row) for row in self.fetch_latest(table, project_id)]

        return await asyncio.to_thread(_query)

    async def get_record(self, table: str, project_id: str, record_id: str) -> Any | None:
        """Get the latest revision of one record, or None."""
        def _query() -> Any | None:
            rows = self.fetch_latest(table, project_id, [record_id])
            return self.to_record(table, rows[0]) if rows else None

        return await asyncio.to_thread(_query)
