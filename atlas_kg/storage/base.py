"""
Abstract Storage Backend Interface

Defines the contract for all storage backends.
"""

import re
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from atlas_kg.errors import StorageError

if TYPE_CHECKING:
    from atlas_kg.types import (
        Agent,
        ChatMessage,
        Document,
        Edge,
        Entity,
        Insight,
        Territory,
    )

_PROJECT_ID_PATTERN = re.compile(r"^[a-zA-Z0-9_-]+$")


def validate_project_id(project_id: str) -> str:
    """
    Check that a project id contains only safe characters.

    Raises:
        StorageError: If the id is empty or contains other characters
    """
    if not isinstance(project_id, str) or not _PROJECT_ID_PATTERN.match(project_id):
        raise StorageError(
            f"Invalid project_id: {project_id!r}. "
            "Must contain only alphanumeric characters, hyphens, and underscores."
        )
    return project_id


class StorageBackend(ABC):
    """
    Abstract interface for storage backends.

    Multi-tenancy:
        Every record carries a project_id and every read is scoped to one
        project. Project ids are validated before they reach a backend.

    Ordering:
        List operations return records in creation order. Reconciliation
        relies on this for its first-seen grouping.

    Lifecycle:
        backend = ParquetBackend(path, config)
        await backend.initialize()
        # ... operations ...
        await backend.close()

    Or using context manager:
        async with ParquetBackend(path, config) as backend:
            await backend.write_entities(entities)
    """

    @abstractmethod
    async def initialize(self) -> None:
        """Initialize storage (create directories, connections)."""
        ...

    @abstractmethod
    async def close(self) -> None:
        """Close storage and release resources."""
        ...

    async def __aenter__(self) -> "StorageBackend":
        await self.initialize()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    # -------------------------------------------------------------------------
    # Documents
    # -------------------------------------------------------------------------

    @abstractmethod
    async def write_document(self, document: "Document") -> None:
        """Insert a document, or replace it if the id already exists."""
        ...

    @abstractmethod
    async def get_document(self, project_id: str, document_id: str) -> "Document | None":
        """Get a document by id within a project."""
        ...

    @abstractmethod
    async def list_documents(self, project_id: str) -> list["Document"]:
        """List documents of a project."""
        ...

    @abstractmethod
    async def update_document(
        self, project_id: str, document_id: str, **fields: Any
    ) -> "Document":
        """
        Update fields of a document and bump its updated_at.

        Raises:
            StorageError: If the document does not exist
        """
        ...

    # -------------------------------------------------------------------------
    # Write Operations (knowledge records)
    # -------------------------------------------------------------------------

    @abstractmethod
    async def write_entities(self, entities: list["Entity"]) -> None:
        """Write entities in batch."""
        ...

    @abstractmethod
    async def write_edges(self, edges: list["Edge"]) -> None:
        """Write edges in batch."""
        ...

    @abstractmethod
    async def write_insights(self, insights: list["Insight"]) -> None:
        """Write insights in batch."""
        ...

    @abstractmethod
    async def write_territories(self, territories: list["Territory"]) -> None:
        """Write territories in batch."""
        ...

    @abstractmethod
    async def write_agents(self, agents: list["Agent"]) -> None:
        """Write agents in batch."""
        ...

    @abstractmethod
    async def assign_territory(
        self, project_id: str, entity_ids: list[str], territory_id: str
    ) -> None:
        """Set territory_id on the given entities. Unknown ids are ignored."""
        ...

    # -------------------------------------------------------------------------
    # Read Operations
    # -------------------------------------------------------------------------

    @abstractmethod
    async def list_entities(self, project_id: str) -> list["Entity"]:
        ...

    @abstractmethod
    async def list_edges(self, project_id: str) -> list["Edge"]:
        ...

    @abstractmethod
    async def list_insights(self, project_id: str) -> list["Insight"]:
        ...

    @abstractmethod
    async def list_territories(self, project_id: str) -> list["Territory"]:
        """List raw (unreconciled) territory rows."""
        ...

    @abstractmethod
    async def list_agents(self, project_id: str) -> list["Agent"]:
        """List raw (unreconciled) agent rows."""
        ...

    # -------------------------------------------------------------------------
    # Chat
    # -------------------------------------------------------------------------

    @abstractmethod
    async def write_messages(self, messages: list["ChatMessage"]) -> None:
        """Append chat messages."""
        ...

    @abstractmethod
    async def list_messages(self, project_id: str) -> list["ChatMessage"]:
        """List a project's chat messages, oldest first."""
        ...
