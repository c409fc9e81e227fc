"""Tests for the result parser."""

import json

import pytest

from atlas_kg.errors import ParseError
from atlas_kg.ingestion.extraction.parser import find_json_object, parse_extraction


class TestFindJsonObject:
    """Tests for balanced-brace JSON location."""

    def test_plain_object(self):
        """A bare object decodes directly."""
        assert find_json_object('{"entities": []}') == {"entities": []}

    def test_object_with_surrounding_prose(self):
        """Prose before and after the object is ignored."""
        text = 'Here is the extraction:\n{"entities": [{"name": "Acme"}]}\nLet me know!'
        assert find_json_object(text) == {"entities": [{"name": "Acme"}]}

    def test_trailing_braces_after_object(self):
        """A second brace block after the first balanced object is ignored."""
        text = '{"a": 1} and then {"b": 2}'
        assert find_json_object(text) == {"a": 1}

    def test_braces_inside_strings(self):
        """Braces inside string values do not affect matching."""
        text = 'x {"text": "use {curly} braces }", "n": 1} y'
        assert find_json_object(text) == {"text": "use {curly} braces }", "n": 1}

    def test_escaped_quotes_inside_strings(self):
        """Escaped quotes do not end a string literal."""
        payload = {"text": 'she said "hi {"'}
        text = "prefix " + json.dumps(payload) + " suffix"
        assert find_json_object(text) == payload

    def test_code_fence(self):
        """Objects inside markdown code fences are found."""
        text = '```json\n{"insights": []}\n```'
        assert find_json_object(text) == {"insights": []}

    def test_skips_undecodable_candidate(self):
        """An unbalanced or invalid first candidate falls through to a later one."""
        text = '{not json} {"ok": true}'
        assert find_json_object(text) == {"ok": True}

    def test_no_brace_raises(self):
        """Text without any brace raises ParseError."""
        with pytest.raises(ParseError):
            find_json_object("I could not find anything useful.")

    def test_unbalanced_raises(self):
        """Text whose braces never balance raises ParseError."""
        with pytest.raises(ParseError):
            find_json_object('{"entities": [')


class TestParseExtraction:
    """Tests for parse_extraction."""

    def test_full_shape(self):
        """All four arrays are parsed."""
        text = json.dumps({
            "entities": [{
                "name": "Alice",
                "type": "person",
                "subtype": "engineer",
                "description": "Platform lead",
                "metadata": {"role": "Lead", "salary": 120000},
            }],
            "relationships": [
                {"source": "Alice", "target": "Platform", "label": "leads", "weight": 4}
            ],
            "insights": [{"type": "risk", "severity": "critical", "text": "Single point of failure"}],
            "frontier_hints": [{
                "name": "Finance",
                "hint": "Budgets",
                "risk": "low",
                "value": "high",
                "access_needed": "CFO approval",
            }],
        })

        result = parse_extraction(text)

        assert result.entities[0].name == "Alice"
        assert result.entities[0].type == "person"
        assert result.entities[0].metadata == {"role": "Lead", "salary": "120000"}
        assert result.relationships[0].weight == 4
        assert result.insights[0].severity == "critical"
        assert result.frontier_hints[0].access_needed == "CFO approval"

    def test_missing_arrays_default_to_empty(self):
        """Absent or null arrays become empty lists."""
        result = parse_extraction('{"entities": null}')
        assert result.is_empty

    def test_lenient_relationships(self):
        """Relationships with missing fields parse with defaults."""
        result = parse_extraction('{"relationships": [{"a": 1}]}')

        rel = result.relationships[0]
        assert rel.source == ""
        assert rel.target == ""
        assert rel.weight == 1

    def test_weight_is_clamped(self):
        """Weights outside 1..5 are clamped; unusable weights become 1."""
        result = parse_extraction(
            '{"relationships": [{"weight": 9}, {"weight": 0}, {"weight": "high"}]}'
        )
        assert [r.weight for r in result.relationships] == [5, 1, 1]

    def test_entity_type_aliases(self):
        """Common type spellings are normalized."""
        result = parse_extraction(
            '{"entities": [{"name": "Acme", "type": "Organization"}]}'
        )
        assert result.entities[0].type == "organisation"

    def test_unknown_entity_type_is_skipped(self):
        """An entity type outside the closed set drops only that entity."""
        result = parse_extraction(json.dumps({
            "entities": [
                {"name": "Alice", "type": "person"},
                {"name": "Ops", "type": "department"},
                {"name": "Bob", "type": "person"},
            ],
            "relationships": [{"source": "Alice", "target": "Bob", "label": "mentors"}],
            "insights": [{"text": "Alice mentors Bob"}],
        }))

        assert [e.name for e in result.entities] == ["Alice", "Bob"]
        assert len(result.relationships) == 1
        assert len(result.insights) == 1

    def test_invalid_items_are_skipped(self):
        """Entities without a name, insights without text and unnamed hints are dropped."""
        result = parse_extraction(json.dumps({
            "entities": [{"name": "  ", "type": "person"}, {"name": "Eve", "type": "person"}],
            "insights": [{"type": "risk"}, {"text": "Kept"}],
            "frontier_hints": [{"hint": "no name"}, {"name": "Finance"}, "not an object"],
        }))

        assert [e.name for e in result.entities] == ["Eve"]
        assert [i.text for i in result.insights] == ["Kept"]
        assert [h.name for h in result.frontier_hints] == ["Finance"]

    def test_skipped_items_are_logged(self, caplog):
        with caplog.at_level("WARNING", logger="atlas_kg.ingestion.extraction.parser"):
            parse_extraction('{"entities": [{"name": "X", "type": "spaceship"}]}')

        assert "Skipping invalid entities item 0" in caplog.text

    def test_non_list_array_raises(self):
        """A top-level field that is not an array is a structural failure."""
        with pytest.raises(ParseError, match="must be an array"):
            parse_extraction('{"entities": {"name": "Alice", "type": "person"}}')

    def test_endpoints_are_stripped_like_names(self):
        """Relationship endpoints lose surrounding whitespace, as entity names do."""
        result = parse_extraction(json.dumps({
            "entities": [{"name": "Acme ", "type": "organisation"}],
            "relationships": [{"source": " Acme ", "target": "Bob\n"}],
        }))

        assert result.entities[0].name == "Acme"
        assert (result.relationships[0].source, result.relationships[0].target) == ("Acme", "Bob")

    def test_no_json_raises(self):
        """A response without JSON raises ParseError."""
        with pytest.raises(ParseError):
            parse_extraction("Sorry, I cannot help with that.")
