"""Tests for the plain text chunker."""

import pytest

from atlas_kg.ingestion.chunking import DEFAULT_MAX_CHUNK_CHARS, chunk_text, split_paragraphs


def _paragraphs(count: int, size: int) -> list[str]:
    return [chr(ord("a") + i % 26) * size for i in range(count)]


class TestSplitParagraphs:
    """Tests for paragraph splitting."""

    def test_splits_on_blank_line_runs(self):
        """Runs of blank lines (including whitespace-only lines) separate paragraphs."""
        text = "one\n\ntwo\n\n\n\nthree\n  \nfour"
        assert split_paragraphs(text) == ["one", "two", "three", "four"]

    def test_single_newline_does_not_split(self):
        """A single newline stays inside a paragraph."""
        assert split_paragraphs("line one\nline two") == ["line one\nline two"]

    def test_drops_empty_paragraphs(self):
        """Leading and trailing blank runs produce no empty paragraphs."""
        assert split_paragraphs("\n\nbody\n\n") == ["body"]


class TestChunkText:
    """Tests for chunk_text."""

    def test_default_budget(self):
        """Default budget is 100,000 characters."""
        assert DEFAULT_MAX_CHUNK_CHARS == 100_000

    def test_short_text_is_single_chunk(self):
        """Text within the budget is returned unchanged as one chunk."""
        text = "Alice leads the platform team.\n\n\n\nBob reports to Alice."
        assert chunk_text(text, max_chars=1000) == [text]

    def test_text_exactly_at_budget_is_single_chunk(self):
        """The budget is inclusive."""
        text = "x" * 50
        assert chunk_text(text, max_chars=50) == [text]

    def test_whitespace_only_text_yields_no_chunks(self):
        """Blank documents produce no chunks."""
        assert chunk_text("") == []
        assert chunk_text("   \n\n \t") == []

    def test_large_document_packs_paragraphs(self):
        """25 paragraphs of ~10k chars at a 100k budget pack as 10, 10 and 5."""
        paragraphs = _paragraphs(25, 9_998)
        text = "\n\n".join(paragraphs)

        chunks = chunk_text(text, max_chars=100_000)

        assert len(chunks) == 3
        assert chunks[0] == "\n\n".join(paragraphs[:10])
        assert chunks[1] == "\n\n".join(paragraphs[10:20])
        assert chunks[2] == "\n\n".join(paragraphs[20:])

    def test_chunks_respect_budget(self):
        """No chunk exceeds the budget when every paragraph fits."""
        text = "\n\n".join(_paragraphs(40, 37))
        chunks = chunk_text(text, max_chars=200)

        assert len(chunks) > 1
        assert all(0 < len(c) <= 200 for c in chunks)

    def test_reassembly_collapses_blank_runs(self):
        """Joining chunks reproduces the text with blank runs collapsed."""
        paragraphs = _paragraphs(12, 30)
        text = "\n\n\n".join(paragraphs)

        chunks = chunk_text(text, max_chars=100)

        assert "\n\n".join(chunks) == "\n\n".join(paragraphs)

    def test_oversized_paragraph_is_own_chunk(self):
        """A paragraph longer than the budget is emitted alone, not split."""
        text = "short\n\n" + "y" * 500 + "\n\ntail"
        chunks = chunk_text(text, max_chars=100)

        assert chunks == ["short", "y" * 500, "tail"]

    def test_no_empty_chunks(self):
        """Chunking never produces an empty chunk."""
        text = "\n\n\n" + "\n\n".join(_paragraphs(10, 60)) + "\n\n\n"
        assert all(c.strip() for c in chunk_text(text, max_chars=150))

    def test_rejects_non_positive_budget(self):
        """A zero or negative budget is a programming error."""
        with pytest.raises(ValueError):
            chunk_text("text", max_chars=0)
