"""
KnowledgeGraph - Primary Entry Point

The KnowledgeGraph class manages a knowledge base directory and provides
methods for document upload, extraction, and the reconciled read views.

A knowledge base is a self-contained directory containing:
    - documents.parquet/: Source documents and extraction status
    - entities.parquet/: Extracted entities
    - edges.parquet/: Relationships between entities
    - insights.parquet/: Findings reported by the model
    - territories.parquet/: Raw known/frontier territory rows
    - agents.parquet/: Raw coordinator/explorer rows
    - messages.parquet/: Graph chat history
    - metadata.json: KB metadata and version

Example:
    >>> kg = KnowledgeGraph("./my_kb")
    >>> doc = await kg.add_document("acme", text, filename="org-chart.txt")
    >>> summary = await kg.extract("acme", doc.id)
    >>> listing = await kg.list_territories("acme")
    >>> print([t.name for t in listing.known])

    # Or with sync API
    >>> kg = KnowledgeGraph("./my_kb")
    >>> summary = kg.extract_sync("acme", doc.id)
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable

from atlas_kg.errors import ConfigError, ExtractionError, StorageError

if TYPE_CHECKING:
    from atlas_kg.config.providers import ProviderConfig
    from atlas_kg.config.settings import AtlasConfig
    from atlas_kg.providers.base import LLMProvider
    from atlas_kg.storage.base import StorageBackend
    from atlas_kg.types import (
        AgentListing,
        ChatMessage,
        ConnectionCheck,
        Document,
        ExtractionSummary,
        GraphView,
        InsightListing,
        TerritoryListing,
    )

_SEVERITY_ORDER = ("critical", "warning", "info")


class KnowledgeGraph:
    """
    A portable, embedded organisational knowledge graph.

    Args:
        path: Directory for the knowledge base. Created if doesn't exist.
        config: Optional configuration. Uses defaults if not provided.
        storage: Storage backend to use instead of a ParquetBackend at `path`
        create: If True, create directory if missing. Default True.
    """

    def __init__(
        self,
        path: str | Path | None = None,
        config: "AtlasConfig | None" = None,
        *,
        storage: "StorageBackend | None" = None,
        create: bool = True,
    ) -> None:
        """Initialize knowledge graph at the specified path."""
        if path is None and storage is None:
            raise ValueError("Either a knowledge base path or a storage backend is required")

        self._path = Path(path).resolve() if path is not None else None
        self._create = create

        # Lazy import to avoid circular imports
        if config is None:
            from atlas_kg.config import AtlasConfig
            config = AtlasConfig()
        self._config = config

        self._storage = storage
        self._owns_storage = storage is None
        self._initialized = False

    async def _ensure_initialized(self) -> None:
        """Lazy initialization of storage on first use."""
        if self._initialized:
            return

        if self._storage is None:
            assert self._path is not None
            if self._create:
                self._path.mkdir(parents=True, exist_ok=True)
            elif not self._path.exists():
                raise FileNotFoundError(f"Knowledge base not found: {self._path}")

            from atlas_kg.storage.parquet.backend import ParquetBackend
            self._storage = ParquetBackend(self._path, self._config)

        await self._storage.initialize()
        self._initialized = True

    # === Lifecycle ===

    async def __aenter__(self) -> "KnowledgeGraph":
        """Async context manager entry."""
        await self._ensure_initialized()
        return self

    async def __aexit__(self, *args: Any) -> None:
        """Async context manager exit."""
        await self.close()

    async def close(self) -> None:
        """Release all resources."""
        if self._storage is not None:
            await self._storage.close()
            if self._owns_storage:
                self._storage = None
        self._initialized = False

    # === Properties ===

    @property
    def path(self) -> Path | None:
        """Path to the knowledge base directory (None for injected storage)."""
        return self._path

    @property
    def config(self) -> "AtlasConfig":
        """Current configuration."""
        return self._config

    @property
    def is_initialized(self) -> bool:
        """Whether the knowledge graph has been initialized."""
        return self._initialized

    # === Documents ===

    async def add_document(
        self,
        project_id: str,
        content: str,
        filename: str = "",
    ) -> "Document":
        """
        Store an uploaded document's text with status "uploaded".

        File decoding (PDF, DOCX) happens before this call.
        """
        from atlas_kg.storage.base import validate_project_id
        from atlas_kg.types import Document

        await self._ensure_initialized()
        assert self._storage is not None

        document = Document(
            project_id=validate_project_id(project_id),
            filename=filename,
            content=content,
        )
        await self._storage.write_document(document)
        return document

    async def get_document(self, project_id: str, document_id: str) -> "Document | None":
        await self._ensure_initialized()
        assert self._storage is not None
        return await self._storage.get_document(project_id, document_id)

    async def list_documents(self, project_id: str) -> list["Document"]:
        await self._ensure_initialized()
        assert self._storage is not None
        return await self._storage.list_documents(project_id)

    # === Extraction ===

    async def extract(
        self,
        project_id: str,
        document_id: str,
        provider_config: "ProviderConfig | None" = None,
        *,
        provider: "LLMProvider | None" = None,
        on_progress: Callable[[str, float], None] | None = None,
    ) -> "ExtractionSummary":
        """
        Run an extraction pass over a stored document.

        Args:
            project_id: Owning project
            document_id: Document to extract from
            provider_config: Provider for this pass (built from config when None)
            provider: Pre-built provider to use instead
            on_progress: Optional callback(stage, progress 0..1)

        Raises:
            StorageError: If the document does not exist
            ConfigError: If no usable provider is configured
            ExtractionError: If the pass failed (document marked "failed")
        """
        from atlas_kg.ingestion.pipeline import ExtractionPipeline

        await self._ensure_initialized()
        assert self._storage is not None

        document = await self._storage.get_document(project_id, document_id)
        if document is None:
            raise StorageError(f"Document not found: {document_id}")

        pipeline = ExtractionPipeline(self._storage, self._config)
        return await pipeline.extract(
            document, provider_config, provider=provider, on_progress=on_progress
        )

    async def extract_many(
        self,
        project_id: str,
        document_ids: list[str],
        provider_config: "ProviderConfig | None" = None,
        *,
        provider: "LLMProvider | None" = None,
    ) -> list["ExtractionSummary | ExtractionError"]:
        """
        Extract several documents concurrently.

        Concurrency is bounded by config.extraction_concurrency. A failed pass
        does not stop the others; its ExtractionError is returned in place of
        a summary.

        Raises:
            ConfigError: If no usable provider is configured
        """
        await self._ensure_initialized()
        semaphore = asyncio.Semaphore(max(1, self._config.extraction_concurrency))

        async def extract_one(document_id: str) -> "ExtractionSummary | ExtractionError":
            async with semaphore:
                try:
                    return await self.extract(
                        project_id, document_id, provider_config, provider=provider
                    )
                except ExtractionError as e:
                    return e

        return list(await asyncio.gather(*(extract_one(d) for d in document_ids)))

    def extract_sync(self, project_id: str, document_id: str, **kwargs: Any) -> "ExtractionSummary":
        """Sync wrapper for extract."""
        return asyncio.run(self.extract(project_id, document_id, **kwargs))

    async def test_provider(self, provider_config: "ProviderConfig") -> "ConnectionCheck":
        """Check that a provider configuration can reach its model."""
        from atlas_kg.providers.factory import build_provider
        from atlas_kg.types import ConnectionCheck

        try:
            provider = build_provider(provider_config, self._config)
        except ConfigError as e:
            return ConnectionCheck(success=False, message=str(e))

        async with provider:
            return await provider.check()

    # === Read Views ===

    async def list_territories(self, project_id: str) -> "TerritoryListing":
        """Reconciled territories: known then frontier, each sorted by name."""
        from atlas_kg.reconciliation import reconcile_territories
        from atlas_kg.types import TerritoryListing

        await self._ensure_initialized()
        assert self._storage is not None

        rows = await self._storage.list_territories(project_id)
        merged = reconcile_territories(rows)
        return TerritoryListing(
            known=sorted((t for t in merged if t.status == "known"), key=lambda t: t.name),
            frontier=sorted((t for t in merged if t.status == "frontier"), key=lambda t: t.name),
        )

    async def list_agents(self, project_id: str) -> "AgentListing":
        """Reconciled agents (coordinator first, then by name) and the coordinator tree."""
        from atlas_kg.reconciliation import build_hierarchy, reconcile_agents
        from atlas_kg.types import AgentListing

        await self._ensure_initialized()
        assert self._storage is not None

        rows = await self._storage.list_agents(project_id)
        agents = sorted(reconcile_agents(rows), key=lambda a: (a.role, a.name))
        return AgentListing(agents=agents, hierarchy=build_hierarchy(agents))

    async def list_insights(self, project_id: str) -> "InsightListing":
        """Insights ordered critical first then newest first, grouped by severity."""
        from atlas_kg.types import InsightCounts, InsightListing

        await self._ensure_initialized()
        assert self._storage is not None

        insights = await self._storage.list_insights(project_id)
        # Stable sorts: newest first, then by severity rank
        insights.sort(key=lambda i: i.created_at, reverse=True)
        insights.sort(key=lambda i: _SEVERITY_ORDER.index(i.severity))

        grouped = {s: [i for i in insights if i.severity == s] for s in _SEVERITY_ORDER}
        counts = InsightCounts(
            total=len(insights),
            critical=len(grouped["critical"]),
            warning=len(grouped["warning"]),
            info=len(grouped["info"]),
            unacknowledged=sum(1 for i in insights if not i.acknowledged),
        )
        return InsightListing(insights=insights, grouped=grouped, counts=counts)

    async def graph(self, project_id: str) -> "GraphView":
        """All entities and edges of a project shaped for graph rendering."""
        from atlas_kg.types import GraphEdge, GraphNode, GraphView

        await self._ensure_initialized()
        assert self._storage is not None

        entities = await self._storage.list_entities(project_id)
        edges = await self._storage.list_edges(project_id)

        nodes = [
            GraphNode(
                id=e.id,
                name=e.name,
                type=e.type,
                subtype=e.subtype,
                description=e.description,
                confidence=e.confidence,
                review_status=e.review_status,
                territory_id=e.territory_id,
                size=max(2, int(e.confidence * 5)),
                metadata=dict(e.metadata),
            )
            for e in entities
        ]
        links = [
            GraphEdge(
                id=edge.id,
                source=edge.source_id,
                target=edge.target_id,
                label=edge.label,
                weight=edge.weight,
            )
            for edge in edges
        ]
        return GraphView(nodes=nodes, edges=links)

    # === Chat ===

    async def chat(
        self,
        project_id: str,
        message: str,
        provider_config: "ProviderConfig | None" = None,
        *,
        provider: "LLMProvider | None" = None,
    ) -> "ChatMessage":
        """
        Ask a question about the project's graph and record the exchange.

        Raises:
            ValueError: If the message is blank
            ConfigError: If no usable provider is configured
            ProviderError: If the provider call failed (the question is kept)
        """
        from atlas_kg.query import GraphChat

        await self._ensure_initialized()
        assert self._storage is not None

        return await GraphChat(self._storage, self._config).ask(
            project_id, message, provider_config, provider=provider
        )

    async def list_messages(self, project_id: str, limit: int = 100) -> list["ChatMessage"]:
        """The latest `limit` chat messages of a project, oldest first."""
        from atlas_kg.query import GraphChat

        await self._ensure_initialized()
        assert self._storage is not None

        return await GraphChat(self._storage, self._config).history(project_id, limit)

    def chat_sync(self, project_id: str, message: str, **kwargs: Any) -> "ChatMessage":
        """Sync wrapper for chat."""
        return asyncio.run(self.chat(project_id, message, **kwargs))

    # === Statistics ===

    async def stats(self, project_id: str) -> dict[str, int]:
        """Get project statistics (territories and agents after reconciliation)."""
        await self._ensure_initialized()
        assert self._storage is not None

        territories = await self.list_territories(project_id)
        agents = await self.list_agents(project_id)
        return {
            "documents": len(await self._storage.list_documents(project_id)),
            "entities": len(await self._storage.list_entities(project_id)),
            "edges": len(await self._storage.list_edges(project_id)),
            "insights": len(await self._storage.list_insights(project_id)),
            "territories": len(territories.known) + len(territories.frontier),
            "agents": len(agents.agents),
            "messages": len(await self._storage.list_messages(project_id)),
        }

    def stats_sync(self, project_id: str) -> dict[str, int]:
        """Sync wrapper for stats."""
        return asyncio.run(self.stats(project_id))
