"""
Document Chunking

Splits extracted document text into model-sized chunks.

Modules:
    text: Plain text chunking (paragraph-based, character budget)

File-format decoding (PDF, DOCX) happens before text reaches the core.
"""

from atlas_kg.ingestion.chunking.text import DEFAULT_MAX_CHUNK_CHARS, chunk_text, split_paragraphs

__all__ = ["chunk_text", "split_paragraphs", "DEFAULT_MAX_CHUNK_CHARS"]
