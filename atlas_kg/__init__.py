"""
AtlasKG - Organisational Knowledge Graph Library

Extracts entities, relationships and insights from organisational documents
with an LLM and organises them into territories and an agent hierarchy.

Example:
    >>> from atlas_kg import KnowledgeGraph
    >>> kg = KnowledgeGraph("./my_kb")
    >>> doc = await kg.add_document("acme", text, filename="handbook.txt")
    >>> summary = await kg.extract("acme", doc.id)
    >>> print(summary.entities, summary.relationships)

Main Classes:
    KnowledgeGraph: Primary entry point for all operations
    ExtractionPipeline: One extraction pass over a stored document
    GraphChat: Questions answered from a project's graph
    AtlasConfig: Configuration management
    ProviderConfig: Per-pass provider selection
"""

__version__ = "0.1.0"

# Public API - lazy imports to avoid loading optional dependencies
def __getattr__(name: str):
    """Lazy import public API components."""

    if name == "KnowledgeGraph":
        from atlas_kg.api.knowledge_graph import KnowledgeGraph
        return KnowledgeGraph

    if name == "ExtractionPipeline":
        from atlas_kg.ingestion.pipeline import ExtractionPipeline
        return ExtractionPipeline

    if name == "GraphChat":
        from atlas_kg.query.chat import GraphChat
        return GraphChat

    if name == "AtlasConfig":
        from atlas_kg.config.settings import AtlasConfig
        return AtlasConfig

    if name == "ProviderConfig":
        from atlas_kg.config.providers import ProviderConfig
        return ProviderConfig

    # Types
    if name in ("Document", "Entity", "Edge", "Insight", "Territory", "Agent", "ChatMessage", "ExtractionSummary"):
        from atlas_kg import types
        return getattr(types, name)

    # Errors
    if name in ("AtlasError", "ConfigError", "ProviderError", "ParseError", "ExtractionError", "StorageError"):
        from atlas_kg import errors
        return getattr(errors, name)

    raise AttributeError(f"module 'atlas_kg' has no attribute {name!r}")


__all__ = [
    # Main classes
    "KnowledgeGraph",
    "ExtractionPipeline",
    "GraphChat",
    "AtlasConfig",
    "ProviderConfig",

    # Types
    "Document",
    "Entity",
    "Edge",
    "Insight",
    "Territory",
    "Agent",
    "ChatMessage",
    "ExtractionSummary",

    # Errors
    "AtlasError",
    "ConfigError",
    "ProviderError",
    "ParseError",
    "ExtractionError",
    "StorageError",

    # Version
    "__version__",
]
