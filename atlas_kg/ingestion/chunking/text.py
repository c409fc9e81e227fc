"""
Plain Text Chunker

Paragraph-based chunking under a character budget.

Algorithm:
    1. Text within the budget is returned as a single chunk
    2. Otherwise split on paragraph boundaries (runs of blank lines)
    3. Greedily pack paragraphs, joined by a blank line, up to the budget
    4. A paragraph longer than the budget becomes its own oversized chunk

Joining the chunks with "\\n\\n" reproduces the text with every run of blank
lines collapsed to one.
"""

import re

DEFAULT_MAX_CHUNK_CHARS = 100_000  # ~25K tokens of content, leaves room for the prompt

_PARAGRAPH_BREAK = re.compile(r"\n\s*\n")
_JOINER = "\n\n"


def split_paragraphs(text: str) -> list[str]:
    """Split text on runs of blank lines, dropping empty paragraphs."""
    return [p for p in _PARAGRAPH_BREAK.split(text) if p.strip()]


def chunk_text(text: str, max_chars: int = DEFAULT_MAX_CHUNK_CHARS) -> list[str]:
    """
    Split document text into ordered chunks of at most max_chars characters.

    Args:
        text: Plain document text
        max_chars: Character budget per chunk

    Returns:
        Ordered list of non-empty chunks (empty for whitespace-only text)

    Raises:
        ValueError: If max_chars is not positive
    """
    if max_chars <= 0:
        raise ValueError(f"max_chars must be positive, got {max_chars}")

    if not text.strip():
        return []

    if len(text) <= max_chars:
        return [text]

    chunks: list[str] = []
    current = ""

    for paragraph in split_paragraphs(text):
        if current and len(current) + len(_JOINER) + len(paragraph) > max_chars:
            chunks.append(current)
            current = paragraph
        else:
            current = f"{current}{_JOINER}{paragraph}" if current else paragraph

    if current:
        chunks.append(current)

    return chunks
