"""
Parquet Storage Backend

Orchestrates Parquet part-file writing and DuckDB queries.
"""

import asyncio
import json
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any
from uuid import uuid4

import pyarrow as pa
import pyarrow.parquet as pq
from filelock import FileLock

from atlas_kg.config import AtlasConfig
from atlas_kg.errors import StorageError
from atlas_kg.storage.base import StorageBackend, validate_project_id
from atlas_kg.storage.duckdb.queries import DuckDBQueries
from atlas_kg.types import (
    Agent,
    ChatMessage,
    Document,
    Edge,
    Entity,
    Insight,
    Territory,
)
from atlas_kg.types.records import utc_now


class ParquetBackend(StorageBackend):
    """
    Parquet-based storage backend with multi-project support.

    Directory structure:
        kb_path/
        ├── documents.parquet/      # dataset directories of immutable part files
        ├── entities.parquet/
        ├── edges.parquet/
        ├── insights.parquet/
        ├── territories.parquet/
        ├── agents.parquet/
        ├── messages.parquet/
        └── metadata.json

    Revisions:
        Every row carries a monotonically increasing `revision`. Updates append
        a new revision instead of rewriting files; reads keep the latest one.

    Thread safety:
        - Write operations use file locking (.kb.lock)
        - Read operations are concurrent-safe (part files are immutable)
    """

    SCHEMA_VERSION = "1.0.0"

    def __init__(
        self,
        kb_path: Path | str,
        config: AtlasConfig | None = None,
    ):
        self._kb_path = Path(kb_path)
        self.config = config or AtlasConfig()
        self._lock = FileLock(self._kb_path / ".kb.lock", timeout=30)
        self._duckdb = DuckDBQueries(self._kb_path, self.config)
        self._last_revision = 0
        self._initialized = False

    @property
    def kb_path(self) -> Path:
        """Return the path to the knowledge base directory."""
        return self._kb_path

    async def initialize(self) -> None:
        """Initialize storage backend."""
        if self._initialized:
            return

        def _init() -> None:
            self.kb_path.mkdir(parents=True, exist_ok=True)
            self._write_metadata_if_missing()

        await asyncio.to_thread(_init)
        await self._duckdb.initialize()
        self._initialized = True

    async def close(self) -> None:
        """Close storage backend."""
        await self._duckdb.close()
        self._initialized = False

    def _write_metadata_if_missing(self) -> None:
        """Create metadata.json if it doesn't exist."""
        meta_path = self.kb_path / "metadata.json"
        if not meta_path.exists():
            metadata = {
                "schema_version": self.SCHEMA_VERSION,
                "created_at": datetime.now(timezone.utc).isoformat(),
            }
            meta_path.write_text(json.dumps(metadata, indent=2))

    # -------------------------------------------------------------------------
    # Parquet Schemas (all include project_id and revision)
    # -------------------------------------------------------------------------

    @staticmethod
    def _document_schema() -> pa.Schema:
        return pa.schema([
            ("id", pa.string()),
            ("project_id", pa.string()),
            ("filename", pa.string()),
            ("content", pa.string()),
            ("status", pa.string()),
            ("entity_count", pa.int64()),
            ("edge_count", pa.int64()),
            ("created_at", pa.string()),
            ("updated_at", pa.string()),
            ("revision", pa.int64()),
        ])

    @staticmethod
    def _entity_schema() -> pa.Schema:
        return pa.schema([
            ("id", pa.string()),
            ("project_id", pa.string()),
            ("document_id", pa.string()),
            ("name", pa.string()),
            ("type", pa.string()),
            ("subtype", pa.string()),
            ("description", pa.string()),
            ("metadata", pa.string()),  # JSON-encoded dict
            ("confidence", pa.float64()),
            ("review_status", pa.string()),
            ("territory_id", pa.string()),
            ("extracted_by", pa.string()),
            ("created_at", pa.string()),
            ("revision", pa.int64()),
        ])

    @staticmethod
    def _edge_schema() -> pa.Schema:
        return pa.schema([
            ("id", pa.string()),
            ("project_id", pa.string()),
            ("document_id", pa.string()),
            ("source_id", pa.string()),
            ("target_id", pa.string()),
            ("label", pa.string()),
            ("weight", pa.int64()),
            ("created_at", pa.string()),
            ("revision", pa.int64()),
        ])

    @staticmethod
    def _insight_schema() -> pa.Schema:
        return pa.schema([
            ("id", pa.string()),
            ("project_id", pa.string()),
            ("document_id", pa.string()),
            ("type", pa.string()),
            ("severity", pa.string()),
            ("text", pa.string()),
            ("acknowledged", pa.bool_()),
            ("created_at", pa.string()),
            ("revision", pa.int64()),
        ])

    @staticmethod
    def _territory_schema() -> pa.Schema:
        return pa.schema([
            ("id", pa.string()),
            ("project_id", pa.string()),
            ("name", pa.string()),
            ("type", pa.string()),
            ("status", pa.string()),
            ("description", pa.string()),
            ("hint", pa.string()),
            ("risk", pa.string()),
            ("value", pa.string()),
            ("access_needed", pa.string()),
            ("entity_ids", pa.string()),  # JSON-encoded list
            ("created_at", pa.string()),
            ("revision", pa.int64()),
        ])

    @staticmethod
    def _agent_schema() -> pa.Schema:
        return pa.schema([
            ("id", pa.string()),
            ("project_id", pa.string()),
            ("name", pa.string()),
            ("role", pa.string()),
            ("status", pa.string()),
            ("domain", pa.string()),
            ("description", pa.string()),
            ("entities_managed", pa.int64()),
            ("parent_agent_id", pa.string()),
            ("created_at", pa.string()),
            ("updated_at", pa.string()),
            ("revision", pa.int64()),
        ])

    @staticmethod
    def _message_schema() -> pa.Schema:
        return pa.schema([
            ("id", pa.string()),
            ("project_id", pa.string()),
            ("role", pa.string()),
            ("content", pa.string()),
            ("referenced_entity_ids", pa.string()),  # JSON-encoded list
            ("created_at", pa.string()),
            ("revision", pa.int64()),
        ])

    # -------------------------------------------------------------------------
    # Write Helpers
    # -------------------------------------------------------------------------

    def _next_revisions(self, count: int) -> list[int]:
        """Allocate `count` increasing revision numbers. Call with the lock held."""
        start = max(time.time_ns(), self._last_revision + 1)
        self._last_revision = start + count - 1
        return list(range(start, start + count))

    def _write_rows(
        self,
        table_name: str,
        rows: list[dict[str, Any]],
        schema: pa.Schema,
    ) -> None:
        """Stamp revisions on rows and append them as one part file. Call with the lock held."""
        for row, revision in zip(rows, self._next_revisions(len(rows))):
            row["revision"] = revision
        data = {field.name: [row.get(field.name) for row in rows] for field in schema}
        self._append_to_parquet(table_name, data, schema)

    def _append_to_parquet(
        self,
        table_name: str,
        data: dict[str, list[Any]],
        schema: pa.Schema,
    ) -> None:
        """
        Append data using a Parquet dataset directory.

        New writes append immutable part files (no read/concat rewrite).
        """
        path = self.kb_path / f"{table_name}.parquet"
        table = pa.Table.from_pydict(data, schema=schema)
        path.mkdir(parents=True, exist_ok=True)

        now_part = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S%f")
        part_name = f"part-{now_part}-{uuid4().hex}.parquet"
        part_path = path / part_name
        temp_part_path = path / f".{part_name}.tmp"
        pq.write_table(table, temp_part_path, compression=self.config.parquet_compression)
        temp_part_path.replace(part_path)

    async def _write_records(
        self,
        table_name: str,
        rows: list[dict[str, Any]],
        schema: pa.Schema,
    ) -> None:
        if not rows:
            return
        for row in rows:
            validate_project_id(row["project_id"])

        def _write() -> None:
            with self._lock:
                self._write_rows(table_name, rows, schema)

        await asyncio.to_thread(_write)

    # -------------------------------------------------------------------------
    # Documents
    # -------------------------------------------------------------------------

    async def write_document(self, document: Document) -> None:
        """Write a document (a new revision if the id exists)."""
        await self._write_records(
            "documents", [document.model_dump()], self._document_schema()
        )

    async def get_document(self, project_id: str, document_id: str) -> Document | None:
        validate_project_id(project_id)
        return await self._duckdb.get_record("documents", project_id, document_id)

    async def list_documents(self, project_id: str) -> list[Document]:
        validate_project_id(project_id)
        return await self._duckdb.list_records("documents", project_id)

    async def update_document(
        self, project_id: str, document_id: str, **fields: Any
    ) -> Document:
        """Append a new revision of the document with fields replaced."""
        validate_project_id(project_id)

        def _update() -> Document:
            with self._lock:
                rows = self._duckdb.fetch_latest("documents", project_id, [document_id])
                if not rows:
                    raise StorageError(f"Document not found: {document_id}")
                current = self._duckdb.to_record("documents", rows[0])
                updated = Document.model_validate(
                    {**current.model_dump(), **fields, "updated_at": utc_now()}
                )
                self._write_rows("documents", [updated.model_dump()], self._document_schema())
                return updated

        return await asyncio.to_thread(_update)

    # -------------------------------------------------------------------------
    # Write Operations
    # -------------------------------------------------------------------------

    async def write_entities(self, entities: list[Entity]) -> None:
        rows = []
        for e in entities:
            row = e.model_dump()
            row["metadata"] = json.dumps(e.metadata)
            rows.append(row)
        await self._write_records("entities", rows, self._entity_schema())

    async def write_edges(self, edges: list[Edge]) -> None:
        await self._write_records(
            "edges", [e.model_dump() for e in edges], self._edge_schema()
        )

    async def write_insights(self, insights: list[Insight]) -> None:
        await self._write_records(
            "insights", [i.model_dump() for i in insights], self._insight_schema()
        )

    async def write_territories(self, territories: list[Territory]) -> None:
        rows = []
        for t in territories:
            row = t.model_dump()
            row["entity_ids"] = json.dumps(t.entity_ids)
            rows.append(row)
        await self._write_records("territories", rows, self._territory_schema())

    async def write_agents(self, agents: list[Agent]) -> None:
        await self._write_records(
            "agents", [a.model_dump() for a in agents], self._agent_schema()
        )

    async def assign_territory(
        self, project_id: str, entity_ids: list[str], territory_id: str
    ) -> None:
        """Append new revisions of the entities with territory_id set."""
        validate_project_id(project_id)
        if not entity_ids:
            return

        def _assign() -> None:
            with self._lock:
                rows = self._duckdb.fetch_latest("entities", project_id, entity_ids)
                if not rows:
                    return
                for row in rows:
                    row["territory_id"] = territory_id
                self._write_rows("entities", rows, self._entity_schema())

        await asyncio.to_thread(_assign)

    # -------------------------------------------------------------------------
    # Read Operations (delegate to DuckDB)
    # -------------------------------------------------------------------------

    async def list_entities(self, project_id: str) -> list[Entity]:
        validate_project_id(project_id)
        return await self._duckdb.list_records("entities", project_id)

    async def list_edges(self, project_id: str) -> list[Edge]:
        validate_project_id(project_id)
        return await self._duckdb.list_records("edges", project_id)

    async def list_insights(self, project_id: str) -> list[Insight]:
        validate_project_id(project_id)
        return await self._duckdb.list_records("insights", project_id)

    async def list_territories(self, project_id: str) -> list[Territory]:
        validate_project_id(project_id)
        return await self._duckdb.list_records("territories", project_id)

    async def list_agents(self, project_id: str) -> list[Agent]:
        validate_project_id(project_id)
        return await self._duckdb.list_records("agents", project_id)

    # -------------------------------------------------------------------------
    # Chat
    # -------------------------------------------------------------------------

    async def write_messages(self, messages: list[ChatMessage]) -> None:
        rows = []
        for m in messages:
            row = m.model_dump()
            row["referenced_entity_ids"] = json.dumps(m.referenced_entity_ids)
            rows.append(row)
        await self._write_records("messages", rows, self._message_schema())

    async def list_messages(self, project_id: str) -> list[ChatMessage]:
        validate_project_id(project_id)
        return await self._duckdb.list_records("messages", project_id)
