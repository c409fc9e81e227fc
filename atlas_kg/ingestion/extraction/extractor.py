"""
Chunk Extractor

Runs one provider call per chunk and turns each raw response into a
ChunkExtraction.

Chunk steps run strictly in order as an explicit task list. Each step records
its outcome (parsed result or captured error) instead of aborting the list, so
later chunks still run after a failure:

    - ProviderError: captured with error_kind="provider"; the caller decides
      that the pass failed
    - ParseError: captured with error_kind="parse"; the chunk contributes nothing

Example:
    >>> outcomes = await run_chunk_tasks(chunks, provider)
    >>> merged = merge_results(o.result for o in outcomes if o.succeeded)
"""

import logging
from typing import TYPE_CHECKING, Iterable

from atlas_kg.errors import ParseError, ProviderError
from atlas_kg.ingestion.extraction.parser import parse_extraction
from atlas_kg.ingestion.extraction.prompts import build_prompt
from atlas_kg.types.extraction import ChunkExtraction
from atlas_kg.types.results import ChunkOutcome

if TYPE_CHECKING:
    from atlas_kg.providers.base import LLMProvider

logger = logging.getLogger(__name__)


async def extract_chunk(
    chunk: str,
    provider: "LLMProvider",
    *,
    index: int = 0,
    total: int = 1,
    retries: int = 0,
) -> ChunkOutcome:
    """
    Run the provider call and parse step for a single chunk.

    Args:
        chunk: Chunk text
        provider: LLM provider for the call
        index: 0-based position of the chunk
        total: Number of chunks in the document
        retries: Extra attempts after a ProviderError (0 = single attempt)

    Returns:
        ChunkOutcome with either a parsed result or a captured error
    """
    prompt = build_prompt(chunk, index, total)
    outcome = ChunkOutcome(index=index, chars=len(chunk))

    attempt = 0
    while True:
        try:
            response = await provider.extract(prompt)
            break
        except ProviderError as e:
            if attempt < retries:
                attempt += 1
                logger.info(
                    f"Chunk {index + 1}/{total} provider call failed, "
                    f"retrying ({attempt}/{retries}): {e}"
                )
                continue
            logger.warning(f"Chunk {index + 1}/{total} provider call failed: {e}")
            outcome.error = str(e)
            outcome.error_kind = "provider"
            return outcome

    outcome.model = response.model
    try:
        outcome.result = parse_extraction(response.text)
    except ParseError as e:
        logger.warning(f"Failed to parse chunk {index + 1}/{total}: {e}")
        outcome.error = str(e)
        outcome.error_kind = "parse"

    return outcome


async def run_chunk_tasks(
    chunks: list[str],
    provider: "LLMProvider",
    *,
    retries: int = 0,
) -> list[ChunkOutcome]:
    """
    Extract every chunk sequentially, capturing per-step errors.

    Args:
        chunks: Chunk texts in document order
        provider: LLM provider for the calls
        retries: Extra attempts per chunk after a ProviderError

    Returns:
        One ChunkOutcome per chunk (same order as input)
    """
    total = len(chunks)
    outcomes: list[ChunkOutcome] = []

    for index, chunk in enumerate(chunks):
        logger.info(f"Processing chunk {index + 1}/{total} ({len(chunk)} chars)")
        outcomes.append(
            await extract_chunk(
                chunk, provider, index=index, total=total, retries=retries
            )
        )

    return outcomes


def merge_results(results: Iterable[ChunkExtraction]) -> ChunkExtraction:
    """
    Concatenate per-chunk results in chunk order.

    No deduplication happens here; identity is assigned during materialization.
    """
    merged = ChunkExtraction()
    for result in results:
        merged.entities.extend(result.entities)
        merged.relationships.extend(result.relationships)
        merged.insights.extend(result.insights)
        merged.frontier_hints.extend(result.frontier_hints)
    return merged
