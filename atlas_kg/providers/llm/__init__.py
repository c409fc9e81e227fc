"""
LLM Provider Implementations

Modules:
    hosted: Hosted chat APIs via LangChain (Anthropic, OpenAI)
    local: Local Ollama-compatible server via httpx

Each provider implements the LLMProvider interface with:
    - extract(): Prompt in, raw text and model id out
    - check(): Connection test

Example:
    >>> from atlas_kg.providers.llm import LocalLLMProvider
    >>> provider = LocalLLMProvider("http://localhost:11434", "llama3.2")
    >>> response = await provider.extract("Hello!")
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from atlas_kg.providers.llm.hosted import HostedLLMProvider
    from atlas_kg.providers.llm.local import LocalLLMProvider


def __getattr__(name: str):
    """Lazy import of providers to avoid requiring all dependencies."""
    if name == "HostedLLMProvider":
        from atlas_kg.providers.llm.hosted import HostedLLMProvider
        return HostedLLMProvider
    if name == "LocalLLMProvider":
        from atlas_kg.providers.llm.local import LocalLLMProvider
        return LocalLLMProvider
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = ["HostedLLMProvider", "LocalLLMProvider"]
