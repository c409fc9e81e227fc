"""
LLM-Based Extraction

Per-chunk provider calls and tolerant parsing of the model's JSON output.

Modules:
    prompts: Extraction instructions and per-chunk prompt composition
    parser: Balanced-brace JSON location and shape validation
    extractor: Sequential chunk task list and cross-chunk merging

Chunk Step Outcomes:
    - Parsed result: contributes to the merged document result
    - ParseError: logged; the chunk contributes nothing
    - ProviderError: captured; the pass is marked failed after all chunks run
"""

from atlas_kg.ingestion.extraction.extractor import (
    extract_chunk,
    merge_results,
    run_chunk_tasks,
)
from atlas_kg.ingestion.extraction.parser import find_json_object, parse_extraction
from atlas_kg.ingestion.extraction.prompts import EXTRACTION_INSTRUCTIONS, build_prompt

__all__ = [
    "extract_chunk",
    "run_chunk_tasks",
    "merge_results",
    "find_json_object",
    "parse_extraction",
    "build_prompt",
    "EXTRACTION_INSTRUCTIONS",
]
