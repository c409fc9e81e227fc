"""
Extraction Types

Shapes of the JSON object the model is asked to return for each chunk.

Extraction Models (used during ingestion):
    - ExtractedEntity: Entity as named by the model
    - ExtractedRelationship: Edge between two entity names
    - ExtractedInsight: Finding about the document
    - FrontierHint: Suggested unexplored territory
    - ChunkExtraction: The four arrays above; also the merged per-document result
"""

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from atlas_kg.types.records import EntityType, InsightType, Severity

# Common spellings the model uses for closed-set entity types
_ENTITY_TYPE_ALIASES = {
    "organization": "organisation",
    "org": "organisation",
    "people": "person",
}


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


class ExtractedEntity(BaseModel):
    """An entity returned by the model, before identity assignment."""

    name: str = Field(..., min_length=1, description="Entity name as it appears in the text")
    type: EntityType = Field(..., description="One of the closed entity types")
    subtype: str | None = None
    description: str | None = None
    metadata: dict[str, str] = Field(default_factory=dict)

    model_config = ConfigDict(use_enum_values=True, extra="ignore")

    @field_validator("name", mode="before")
    @classmethod
    def _strip_name(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value

    @field_validator("type", mode="before")
    @classmethod
    def _normalize_type(cls, value: Any) -> Any:
        if isinstance(value, str):
            lowered = value.strip().lower()
            return _ENTITY_TYPE_ALIASES.get(lowered, lowered)
        return value

    @field_validator("subtype", "description", mode="before")
    @classmethod
    def _optional_text(cls, value: Any) -> Any:
        return _blank_to_none(value)

    @field_validator("metadata", mode="before")
    @classmethod
    def _stringify_metadata(cls, value: Any) -> Any:
        """Keep arbitrary key/value pairs, rendering non-string values as JSON."""
        if value is None:
            return {}
        if not isinstance(value, dict):
            return value
        return {
            str(k): v if isinstance(v, str) else json.dumps(v)
            for k, v in value.items()
        }


class ExtractedRelationship(BaseModel):
    """
    A relationship between two entity names.

    Fields default leniently: endpoints that never resolve are dropped during
    materialization rather than failing the chunk.
    """

    source: str = ""
    target: str = ""
    label: str = ""
    weight: int = 1

    model_config = ConfigDict(extra="ignore")

    @field_validator("source", "target", "label", mode="before")
    @classmethod
    def _text(cls, value: Any) -> Any:
        if value is None:
            return ""
        # Endpoints are matched against entity names, which are stripped too
        return value.strip() if isinstance(value, str) else value

    @field_validator("weight", mode="before")
    @classmethod
    def _clamp_weight(cls, value: Any) -> int:
        try:
            weight = int(value)
        except (TypeError, ValueError):
            return 1
        return min(5, max(1, weight))


class ExtractedInsight(BaseModel):
    """A finding reported by the model."""

    type: InsightType = InsightType.OBSERVATION
    severity: Severity = Severity.INFO
    text: str = Field(..., min_length=1)

    model_config = ConfigDict(use_enum_values=True, extra="ignore")

    @field_validator("type", "severity", mode="before")
    @classmethod
    def _lower(cls, value: Any) -> Any:
        return value.strip().lower() if isinstance(value, str) else value


class FrontierHint(BaseModel):
    """A model-suggested unexplored area. Values are stored verbatim."""

    name: str = Field(..., min_length=1)
    hint: str | None = None
    risk: str | None = None
    value: str | None = None
    access_needed: str | None = None

    model_config = ConfigDict(extra="ignore")

    @field_validator("hint", "risk", "value", "access_needed", mode="before")
    @classmethod
    def _as_text(cls, value: Any) -> Any:
        if value is None or isinstance(value, str):
            return value
        return str(value)


class ChunkExtraction(BaseModel):
    """
    Extraction result for one chunk, or for a whole document after merging.

    Missing top-level arrays default to empty.
    """

    entities: list[ExtractedEntity] = Field(default_factory=list)
    relationships: list[ExtractedRelationship] = Field(default_factory=list)
    insights: list[ExtractedInsight] = Field(default_factory=list)
    frontier_hints: list[FrontierHint] = Field(default_factory=list)

    model_config = ConfigDict(extra="ignore")

    @field_validator("entities", "relationships", "insights", "frontier_hints", mode="before")
    @classmethod
    def _null_to_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    @property
    def is_empty(self) -> bool:
        return not (
            self.entities or self.relationships or self.insights or self.frontier_hints
        )
