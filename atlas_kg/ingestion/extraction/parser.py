"""
Result Parser

Pulls the extraction JSON out of a raw model response and validates its shape.

Models wrap JSON in prose or code fences, so the parser scans for the first
`{` that opens a balanced, decodable object. Brace matching is string-aware:
braces inside JSON string literals (and escaped quotes) do not count.

The four top-level arrays are validated item by item: an unusable item is
skipped with a warning instead of failing the whole chunk.
"""

import json
import logging
from typing import Any

from pydantic import BaseModel, ValidationError

from atlas_kg.errors import ParseError
from atlas_kg.types.extraction import (
    ChunkExtraction,
    ExtractedEntity,
    ExtractedInsight,
    ExtractedRelationship,
    FrontierHint,
)

logger = logging.getLogger(__name__)


def _balanced_end(text: str, start: int) -> int | None:
    """
    Return the index of the `}` closing the `{` at `start`, or None.

    Tracks JSON string literals so braces in values are ignored.
    """
    depth = 0
    in_string = False
    escaped = False

    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue

        if ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return i

    return None


def find_json_object(text: str) -> dict[str, Any]:
    """
    Find and decode the first balanced JSON object in text.

    Args:
        text: Raw model response

    Returns:
        The decoded object

    Raises:
        ParseError: If no balanced, decodable object exists
    """
    start = text.find("{")
    if start == -1:
        raise ParseError("No JSON object found in model response")

    while start != -1:
        end = _balanced_end(text, start)
        if end is not None:
            try:
                value = json.loads(text[start : end + 1])
            except json.JSONDecodeError:
                value = None
            if isinstance(value, dict):
                return value
        start = text.find("{", start + 1)

    raise ParseError("No balanced JSON object found in model response")


def _validate_items(
    data: dict[str, Any],
    key: str,
    model: type[BaseModel],
) -> list[Any]:
    """
    Validate one top-level array item by item.

    Items that fail validation are logged and skipped so their siblings survive.

    Raises:
        ParseError: If the array is present but not a list
    """
    raw = data.get(key)
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise ParseError(f"Extraction field '{key}' must be an array, got {type(raw).__name__}")

    items = []
    for position, item in enumerate(raw):
        try:
            items.append(model.model_validate(item))
        except ValidationError as e:
            logger.warning(
                f"Skipping invalid {key} item {position}: {e.errors()[0]['msg']} "
                f"(input: {str(item)[:100]})"
            )
    return items


def parse_extraction(text: str) -> ChunkExtraction:
    """
    Parse a raw model response into a ChunkExtraction.

    Missing top-level arrays default to empty. Individual items that do not
    fit their shape (an entity type outside the closed set, an insight
    without text, a hint without a name) are dropped with a warning; the rest
    of the chunk is kept.

    Raises:
        ParseError: If the JSON is absent, malformed, or a top-level array is not a list
    """
    data = find_json_object(text)

    return ChunkExtraction(
        entities=_validate_items(data, "entities", ExtractedEntity),
        relationships=_validate_items(data, "relationships", ExtractedRelationship),
        insights=_validate_items(data, "insights", ExtractedInsight),
        frontier_hints=_validate_items(data, "frontier_hints", FrontierHint),
    )
