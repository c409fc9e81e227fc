"""
Entity/Edge Materializer

Turns a merged extraction result into persisted records for one pass.

Identity is pass-local and exact: every extracted entity becomes a new Entity
with a fresh id, and relationships resolve endpoints through a case-sensitive
name -> id map built from this pass only. A later entity with the same name
overwrites the mapping. Relationships whose endpoints do not resolve are
dropped silently.

Write order:
    1. Entities
    2. Edges (reference entity ids)
    3. Insights (one per extracted insight, never merged)
"""

import logging
from dataclasses import dataclass, field

from atlas_kg.storage.base import StorageBackend
from atlas_kg.types import ChunkExtraction, Document, Edge, Entity, Insight

logger = logging.getLogger(__name__)


@dataclass
class MaterializedPass:
    """Records created by one materialization."""

    entities: list[Entity] = field(default_factory=list)
    edges: list[Edge] = field(default_factory=list)
    insights: list[Insight] = field(default_factory=list)
    dropped_relationships: int = 0


class Materializer:
    """
    Writes one pass's entities, edges and insights to storage.

    Usage:
        materializer = Materializer(storage)
        result = await materializer.materialize(document, merged, "claude-sonnet-4-20250514")
    """

    def __init__(self, storage: StorageBackend):
        self.storage = storage

    def build(
        self,
        document: Document,
        extraction: ChunkExtraction,
        extracted_by: str | None = None,
    ) -> MaterializedPass:
        """Build the pass's records without writing them."""
        result = MaterializedPass()
        name_to_id: dict[str, str] = {}

        for extracted in extraction.entities:
            entity = Entity(
                project_id=document.project_id,
                document_id=document.id,
                name=extracted.name,
                type=extracted.type,
                subtype=extracted.subtype,
                description=extracted.description,
                metadata=dict(extracted.metadata),
                extracted_by=extracted_by,
            )
            name_to_id[entity.name] = entity.id
            result.entities.append(entity)

        for rel in extraction.relationships:
            source_id = name_to_id.get(rel.source)
            target_id = name_to_id.get(rel.target)
            if source_id is None or target_id is None:
                result.dropped_relationships += 1
                continue
            result.edges.append(
                Edge(
                    project_id=document.project_id,
                    document_id=document.id,
                    source_id=source_id,
                    target_id=target_id,
                    label=rel.label,
                    weight=rel.weight,
                )
            )

        for extracted_insight in extraction.insights:
            result.insights.append(
                Insight(
                    project_id=document.project_id,
                    document_id=document.id,
                    type=extracted_insight.type,
                    severity=extracted_insight.severity,
                    text=extracted_insight.text,
                )
            )

        return result

    async def materialize(
        self,
        document: Document,
        extraction: ChunkExtraction,
        extracted_by: str | None = None,
    ) -> MaterializedPass:
        """
        Build and write the pass's records.

        Args:
            document: Document the pass belongs to
            extraction: Merged extraction result
            extracted_by: Identifier of the responding model

        Returns:
            MaterializedPass with the created records

        Raises:
            Exception: If storage writes fail (earlier writes are not rolled back)
        """
        result = self.build(document, extraction, extracted_by)

        await self.storage.write_entities(result.entities)
        await self.storage.write_edges(result.edges)
        await self.storage.write_insights(result.insights)

        if result.dropped_relationships:
            logger.info(
                f"Dropped {result.dropped_relationships} relationships with "
                f"unresolved endpoints for document {document.id}"
            )

        return result
