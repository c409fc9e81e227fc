"""
Public API Layer

This module contains the user-facing API classes.

Modules:
    knowledge_graph: KnowledgeGraph class - main entry point

Design Principles:
    - Single entry point (KnowledgeGraph) for most operations
    - Async-first with sync wrappers (_sync suffix)
    - Lazy initialization - don't open storage until needed
    - Reads always go through reconciliation
"""

from atlas_kg.api.knowledge_graph import KnowledgeGraph

__all__ = ["KnowledgeGraph"]
