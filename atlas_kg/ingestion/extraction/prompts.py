"""
Extraction Prompts

The instruction block sent with every chunk, and prompt composition.
"""

from atlas_kg.types.records import EntityType, InsightType, Severity

_ENTITY_TYPES = "|".join(t.value for t in EntityType)
_INSIGHT_TYPES = "|".join(t.value for t in InsightType)
_SEVERITIES = "|".join(s.value for s in Severity)

EXTRACTION_INSTRUCTIONS = f"""\
You are a knowledge extraction engine analysing organisational documents.
Extract ALL entities and relationships. Be thorough but precise.

Return valid JSON only:
{{
  "entities": [{{
    "name": "...",
    "type": "{_ENTITY_TYPES}",
    "subtype": "optional specific type",
    "description": "brief description",
    "metadata": {{ "role": "...", "salary": "..." }}
  }}],
  "relationships": [{{
    "source": "entity name (exact match)",
    "target": "entity name (exact match)",
    "label": "verb phrase describing relationship",
    "weight": 1-5
  }}],
  "insights": [{{
    "type": "{_INSIGHT_TYPES}",
    "severity": "{_SEVERITIES}",
    "text": "description of the finding"
  }}],
  "frontier_hints": [{{
    "name": "territory name",
    "hint": "what might be found here",
    "risk": "low|medium|high",
    "value": "low|medium|high|very_high",
    "access_needed": "what would be needed to explore this"
  }}]
}}"""


def build_prompt(chunk: str, index: int = 0, total: int = 1) -> str:
    """
    Compose the full prompt for one chunk.

    Args:
        chunk: Chunk text
        index: 0-based chunk position
        total: Number of chunks in the document

    Returns:
        Instructions followed by the labelled document text
    """
    label = f" (Part {index + 1} of {total})" if total > 1 else ""
    return f"{EXTRACTION_INSTRUCTIONS}\n\nDocument{label}:\n{chunk}"
