"""
In-Memory Storage Backend

Dict-backed storage for tests and embedding in other processes. Records are
copied on the way in and out so callers never share mutable state with the
store.
"""

from typing import Any, TypeVar

from pydantic import BaseModel

from atlas_kg.errors import StorageError
from atlas_kg.storage.base import StorageBackend, validate_project_id
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

_Record = TypeVar("_Record", bound=BaseModel)


class MemoryBackend(StorageBackend):
    """
    Storage backend holding every record in process memory.

    Each table is an insertion-ordered dict keyed by record id, so listing
    preserves creation order.
    """

    def __init__(self) -> None:
        self._documents: dict[str, Document] = {}
        self._entities: dict[str, Entity] = {}
        self._edges: dict[str, Edge] = {}
        self._insights: dict[str, Insight] = {}
        self._territories: dict[str, Territory] = {}
        self._agents: dict[str, Agent] = {}
        self._messages: dict[str, ChatMessage] = {}

    async def initialize(self) -> None:
        return None

    async def close(self) -> None:
        return None

    @staticmethod
    def _put(table: dict[str, _Record], records: list[_Record]) -> None:
        for record in records:
            validate_project_id(record.project_id)
            table[record.id] = record.model_copy(deep=True)

    @staticmethod
    def _scan(table: dict[str, _Record], project_id: str) -> list[_Record]:
        validate_project_id(project_id)
        return [
            r.model_copy(deep=True) for r in table.values() if r.project_id == project_id
        ]

    # -------------------------------------------------------------------------
    # Documents
    # -------------------------------------------------------------------------

    async def write_document(self, document: Document) -> None:
        self._put(self._documents, [document])

    async def get_document(self, project_id: str, document_id: str) -> Document | None:
        validate_project_id(project_id)
        document = self._documents.get(document_id)
        if document is None or document.project_id != project_id:
            return None
        return document.model_copy(deep=True)

    async def list_documents(self, project_id: str) -> list[Document]:
        return self._scan(self._documents, project_id)

    async def update_document(
        self, project_id: str, document_id: str, **fields: Any
    ) -> Document:
        current = await self.get_document(project_id, document_id)
        if current is None:
            raise StorageError(f"Document not found: {document_id}")

        updated = current.model_copy(update={**fields, "updated_at": utc_now()})
        # Re-validate so enum fields are normalized like on construction
        updated = Document.model_validate(updated.model_dump())
        self._documents[document_id] = updated
        return updated.model_copy(deep=True)

    # -------------------------------------------------------------------------
    # Write Operations
    # -------------------------------------------------------------------------

    async def write_entities(self, entities: list[Entity]) -> None:
        self._put(self._entities, entities)

    async def write_edges(self, edges: list[Edge]) -> None:
        self._put(self._edges, edges)

    async def write_insights(self, insights: list[Insight]) -> None:
        self._put(self._insights, insights)

    async def write_territories(self, territories: list[Territory]) -> None:
        self._put(self._territories, territories)

    async def write_agents(self, agents: list[Agent]) -> None:
        self._put(self._agents, agents)

    async def assign_territory(
        self, project_id: str, entity_ids: list[str], territory_id: str
    ) -> None:
        validate_project_id(project_id)
        for entity_id in entity_ids:
            entity = self._entities.get(entity_id)
            if entity is not None and entity.project_id == project_id:
                entity.territory_id = territory_id

    # -------------------------------------------------------------------------
    # Read Operations
    # -------------------------------------------------------------------------

    async def list_entities(self, project_id: str) -> list[Entity]:
        return self._scan(self._entities, project_id)

    async def list_edges(self, project_id: str) -> list[Edge]:
        return self._scan(self._edges, project_id)

    async def list_insights(self, project_id: str) -> list[Insight]:
        return self._scan(self._insights, project_id)

    async def list_territories(self, project_id: str) -> list[Territory]:
        return self._scan(self._territories, project_id)

    async def list_agents(self, project_id: str) -> list[Agent]:
        return self._scan(self._agents, project_id)

    # -------------------------------------------------------------------------
    # Chat
    # -------------------------------------------------------------------------

    async def write_messages(self, messages: list[ChatMessage]) -> None:
        self._put(self._messages, messages)

    async def list_messages(self, project_id: str) -> list[ChatMessage]:
        return self._scan(self._messages, project_id)
