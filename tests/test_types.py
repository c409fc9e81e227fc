"""Tests for record, extraction and result types."""

import pytest
from pydantic import ValidationError

from atlas_kg.types import (
    Agent,
    ChunkExtraction,
    ChunkOutcome,
    Document,
    Edge,
    Entity,
    ExtractedEntity,
    ExtractedInsight,
    ExtractedRelationship,
    FrontierHint,
)


class TestDocument:
    """Tests for Document type."""

    def test_defaults(self):
        """A new document is uploaded with zero counts and a fresh id."""
        first = Document(project_id="proj", content="text")
        second = Document(project_id="proj", content="text")

        assert first.status == "uploaded"
        assert first.entity_count == 0
        assert first.edge_count == 0
        assert first.id != second.id
        assert first.created_at.endswith("+00:00")

    def test_rejects_unknown_status(self):
        with pytest.raises(ValidationError):
            Document(project_id="proj", status="archived")


class TestEntity:
    """Tests for Entity type."""

    def test_confidence_bounds(self):
        with pytest.raises(ValidationError):
            Entity(project_id="p", document_id="d", name="A", type="person", confidence=1.5)

    def test_type_stored_as_value(self):
        entity = Entity(project_id="p", document_id="d", name="A", type="team")
        assert entity.model_dump()["type"] == "team"


class TestEdge:
    """Tests for Edge type."""

    def test_weight_range(self):
        with pytest.raises(ValidationError):
            Edge(project_id="p", source_id="a", target_id="b", weight=6)


class TestAgent:
    """Tests for Agent type."""

    def test_default_status_is_value(self):
        agent = Agent(project_id="p", name="System Coordinator", role="coordinator")
        assert agent.model_dump()["status"] == "active"


class TestExtractedEntity:
    """Tests for ExtractedEntity normalization."""

    def test_type_aliases(self):
        """Common spellings map onto the closed type set."""
        assert ExtractedEntity(name="Acme", type="Organization").type == "organisation"
        assert ExtractedEntity(name="Ops", type=" TEAM ").type == "team"

    def test_unknown_type_rejected(self):
        with pytest.raises(ValidationError):
            ExtractedEntity(name="Acme", type="spaceship")

    def test_blank_name_rejected(self):
        with pytest.raises(ValidationError):
            ExtractedEntity(name="   ", type="person")

    def test_metadata_values_stringified(self):
        entity = ExtractedEntity(
            name="Alice", type="person", metadata={"age": 41, "skills": ["go", "sql"]}
        )
        assert entity.metadata == {"age": "41", "skills": '["go", "sql"]'}

    def test_blank_optional_text(self):
        entity = ExtractedEntity(name="Alice", type="person", subtype=" ", description="")
        assert entity.subtype is None
        assert entity.description is None


class TestExtractedRelationship:
    """Tests for ExtractedRelationship leniency."""

    @pytest.mark.parametrize("raw,expected", [(0, 1), (3, 3), (9, 5), ("4", 4), ("high", 1)])
    def test_weight_clamped(self, raw, expected):
        assert ExtractedRelationship(source="a", target="b", weight=raw).weight == expected

    def test_null_fields(self):
        rel = ExtractedRelationship(source=None, target="b", label=None)
        assert rel.source == ""
        assert rel.label == ""


class TestExtractedInsight:
    """Tests for ExtractedInsight defaults."""

    def test_defaults(self):
        insight = ExtractedInsight(text="Single point of failure")
        assert insight.type == "observation"
        assert insight.severity == "info"

    def test_case_insensitive(self):
        insight = ExtractedInsight(type="RISK", severity="Critical", text="x")
        assert (insight.type, insight.severity) == ("risk", "critical")


class TestFrontierHint:
    """Tests for FrontierHint."""

    def test_values_kept_verbatim(self):
        hint = FrontierHint(name="Finance", risk="Medium-ish", value=5)
        assert hint.risk == "Medium-ish"
        assert hint.value == "5"


class TestChunkExtraction:
    """Tests for ChunkExtraction."""

    def test_missing_and_null_arrays(self):
        extraction = ChunkExtraction.model_validate({"entities": None})
        assert extraction.entities == []
        assert extraction.relationships == []
        assert extraction.is_empty

    def test_not_empty(self):
        extraction = ChunkExtraction(insights=[ExtractedInsight(text="x")])
        assert not extraction.is_empty


class TestChunkOutcome:
    """Tests for ChunkOutcome."""

    def test_succeeded(self):
        assert ChunkOutcome(index=0, chars=10, result=ChunkExtraction()).succeeded
        assert not ChunkOutcome(index=0, chars=10, error="boom", error_kind="provider").succeeded
