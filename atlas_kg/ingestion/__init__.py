"""
Ingestion Pipeline

Extraction pass that turns an organisational document into knowledge records.

Phases:
    Phase 1 - Chunking & Extraction (LLM-heavy):
        - Text -> paragraph-packed chunks
        - One provider call per chunk, strictly sequential
        - Tolerant JSON parsing; unparseable chunks contribute nothing

    Phase 2 - Merge:
        - Concatenate chunk results in order (no deduplication)

    Phase 3 - Assembly:
        - Entities, edges, insights with pass-local name identity
        - Known territories by entity type, frontier territories by hint
        - Coordinator and explorer agents

Modules:
    pipeline: Pass orchestrator (status lifecycle, error boundary)
    chunking/: Document chunking
    extraction/: Prompting, parsing and merging
    assembly/: Record materialization and derived views
"""

from atlas_kg.ingestion.assembly import Materializer, build_agents, derive_territories
from atlas_kg.ingestion.extraction import merge_results, parse_extraction, run_chunk_tasks
from atlas_kg.ingestion.pipeline import ExtractionPipeline

__all__ = [
    "ExtractionPipeline",
    "Materializer",
    "derive_territories",
    "build_agents",
    "merge_results",
    "parse_extraction",
    "run_chunk_tasks",
]
