"""
Extraction Pipeline

Runs one extraction pass over a stored document:

    1. Validate the provider configuration (ConfigError, status untouched)
    2. Mark the document "processing"
    3. Chunk the text and run chunk steps sequentially
    4. Merge successful chunk results
    5. Materialize entities, edges and insights
    6. Derive territories and back-fill entity territory ids
    7. Build the agent hierarchy
    8. Record counts and mark the document "extracted"

A ProviderError in any chunk step is captured; later chunks still run and the
successful ones are materialized, then the document is marked "failed" and
ExtractionError is raised. Any other exception after step 2 also marks the
document "failed" and is re-raised as ExtractionError. Earlier side effects
are not rolled back.

Example:
    >>> pipeline = ExtractionPipeline(storage, config)
    >>> summary = await pipeline.extract(document, ProviderConfig(kind="local"))
    >>> print(f"{summary.entities} entities, {summary.relationships} relationships")
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any, Callable

from atlas_kg.config import AtlasConfig, ProviderConfig
from atlas_kg.errors import ExtractionError
from atlas_kg.ingestion.assembly import (
    Materializer,
    build_agents,
    derive_territories,
    group_by_type,
)
from atlas_kg.ingestion.chunking import chunk_text
from atlas_kg.ingestion.extraction import merge_results, run_chunk_tasks
from atlas_kg.providers.factory import build_provider, validate_provider_config
from atlas_kg.types import DocumentStatus, ExtractionSummary, TerritoryStatus

if TYPE_CHECKING:
    from atlas_kg.providers.base import LLMProvider
    from atlas_kg.storage.base import StorageBackend
    from atlas_kg.types import Document

logger = logging.getLogger(__name__)


class ExtractionPipeline:
    """
    Orchestrates extraction passes against a storage backend.

    Args:
        storage: Backend the pass writes to
        config: Package settings (chunk budget, retries, explorer threshold)
    """

    def __init__(self, storage: "StorageBackend", config: AtlasConfig | None = None):
        self.storage = storage
        self.config = config or AtlasConfig()
        self._materializer = Materializer(storage)

    async def extract(
        self,
        document: "Document",
        provider_config: ProviderConfig | None = None,
        *,
        provider: "LLMProvider | None" = None,
        on_progress: Callable[[str, float], None] | None = None,
    ) -> ExtractionSummary:
        """
        Run one extraction pass over a document.

        Args:
            document: Stored document to extract from
            provider_config: Provider for this pass (built from settings when None)
            provider: Pre-built provider to use instead of constructing one
            on_progress: Optional callback(stage, progress 0..1)

        Returns:
            ExtractionSummary with counts of created records

        Raises:
            ConfigError: No usable provider configuration (before any work)
            ExtractionError: The pass failed; the document is marked "failed"
        """
        def report(stage: str, progress: float) -> None:
            if on_progress:
                on_progress(stage, progress)

        if provider_config is None and provider is None:
            provider_config = ProviderConfig.from_settings(self.config)
        if provider_config is not None:
            validate_provider_config(provider_config)

        owns_provider = provider is None
        if provider is None:
            provider = build_provider(provider_config, self.config)

        start_time = time.time()
        try:
            await self.storage.update_document(
                document.project_id, document.id, status=DocumentStatus.PROCESSING
            )
            return await self._run_pass(document, provider, start_time, report)
        except ExtractionError:
            raise
        except Exception as e:
            logger.error(f"Extraction error for document {document.id}: {e}")
            await self._mark_failed(document)
            raise ExtractionError(
                f"Extraction failed: {e}", document_id=document.id
            ) from e
        finally:
            if owns_provider:
                await provider.close()

    async def _run_pass(
        self,
        document: "Document",
        provider: "LLMProvider",
        start_time: float,
        report: Callable[[str, float], None],
    ) -> ExtractionSummary:
        project_id = document.project_id

        # 1. Chunking
        chunks = chunk_text(document.content, self.config.max_chunk_chars)
        logger.info(
            f"Extracting from {len(chunks)} chunk(s) for document: "
            f"{document.filename or document.id}"
        )

        # 2. Chunk steps (sequential, errors captured per step)
        report("extraction", 0.0)
        outcomes = await run_chunk_tasks(
            chunks, provider, retries=self.config.provider_retries
        )
        report("extraction", 1.0)

        merged = merge_results(o.result for o in outcomes if o.result is not None)
        models = [o.model for o in outcomes if o.model]
        extracted_by = models[-1] if models else provider.model_name

        # 3. Materialization
        report("assembly", 0.0)
        materialized = await self._materializer.materialize(document, merged, extracted_by)

        # 4. Territories
        territories = derive_territories(project_id, materialized.entities, merged.frontier_hints)
        await self.storage.write_territories(territories)
        for territory in territories:
            if territory.status == TerritoryStatus.KNOWN:
                await self.storage.assign_territory(project_id, territory.entity_ids, territory.id)

        # 5. Agents
        agents = build_agents(
            project_id,
            group_by_type(materialized.entities),
            threshold=self.config.explorer_threshold,
        )
        await self.storage.write_agents(agents)
        report("assembly", 1.0)

        counts: dict[str, Any] = {
            "entity_count": len(materialized.entities),
            "edge_count": len(materialized.edges),
        }

        provider_failures = [o for o in outcomes if o.error_kind == "provider"]
        if provider_failures:
            await self._mark_failed(document, **counts)
            first = provider_failures[0]
            raise ExtractionError(
                f"Extraction failed: {len(provider_failures)} of {len(chunks)} chunk(s) "
                f"could not be processed (chunk {first.index + 1}: {first.error})",
                document_id=document.id,
            )

        await self.storage.update_document(
            project_id, document.id, status=DocumentStatus.EXTRACTED, **counts
        )

        summary = ExtractionSummary(
            document_id=document.id,
            chunks=len(chunks),
            failed_chunks=sum(1 for o in outcomes if not o.succeeded),
            entities=len(materialized.entities),
            relationships=len(materialized.edges),
            insights=len(materialized.insights),
            territories=len(territories),
            agents=len(agents),
            extracted_by=extracted_by,
            duration_seconds=time.time() - start_time,
        )
        logger.info(
            f"Extraction completed for document {document.id}: "
            f"{summary.entities} entities, {summary.relationships} relationships, "
            f"{summary.insights} insights"
        )
        return summary

    async def _mark_failed(self, document: "Document", **fields: Any) -> None:
        """Mark a document failed; a failure here is logged and never raised."""
        try:
            await self.storage.update_document(
                document.project_id, document.id, status=DocumentStatus.FAILED, **fields
            )
        except Exception as e:
            logger.error(f"Failed to update document status for {document.id}: {e}")
