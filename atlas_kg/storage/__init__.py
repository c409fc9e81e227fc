"""
Storage Backends

Embedded storage using Parquet files and DuckDB, plus an in-memory backend.

Modules:
    base: Abstract storage interface and project id validation
    memory/: Dict-backed backend for tests and embedding
    parquet/: Primary on-disk storage implementation
    duckdb/: Latest-revision queries over Parquet part files

Knowledge Base Directory Structure:
    my_kb/
    ├── metadata.json           # KB metadata and schema version
    ├── documents.parquet/      # Source documents and extraction status
    ├── entities.parquet/       # Extracted entities
    ├── edges.parquet/          # Entity-to-entity relationships
    ├── insights.parquet/       # Findings reported by the model
    ├── territories.parquet/    # Known and frontier territories (raw rows)
    ├── agents.parquet/         # Coordinator/explorer agents (raw rows)
    └── messages.parquet/       # Graph chat history

Design Principles:
    - Zero infrastructure (embedded database)
    - Portable (knowledge base is just a directory)
    - Append-only (updates write new revisions)
"""

from atlas_kg.storage.base import StorageBackend, validate_project_id
from atlas_kg.storage.memory.backend import MemoryBackend
from atlas_kg.storage.parquet.backend import ParquetBackend

__all__ = [
    "StorageBackend",
    "MemoryBackend",
    "ParquetBackend",
    "validate_project_id",
]
