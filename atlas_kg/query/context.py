"""
Chat Context

Renders the stored graph as plain text for the chat system prompt.

Format:
    Entity lines:        "<name> (<type>): <description> <key>:<value> ..."
    Relationship lines:  "<source name> → <label> → <target name>"

Only the first MAX_CONTEXT_ENTITIES entities and MAX_CONTEXT_EDGES edges (in
creation order) are rendered. Edge endpoints are named from the full entity
list, so an edge may name an entity that did not fit in the entity section.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from atlas_kg.types import Edge, Entity

MAX_CONTEXT_ENTITIES = 200
MAX_CONTEXT_EDGES = 200

CHAT_PREAMBLE = (
    "You are an AI assistant analyzing a knowledge graph. "
    "Answer questions based on the following data:"
)

CHAT_GUIDANCE = (
    "Please provide a helpful, concise answer based on the knowledge graph data. "
    "If the question cannot be answered from the available data, say so clearly."
)


def _entity_line(entity: "Entity") -> str:
    metadata = " ".join(f"{k}:{v}" for k, v in entity.metadata.items())
    return f"{entity.name} ({entity.type}): {entity.description or ''} {metadata}".rstrip()


def build_graph_context(
    entities: list["Entity"],
    edges: list["Edge"],
    *,
    max_entities: int = MAX_CONTEXT_ENTITIES,
    max_edges: int = MAX_CONTEXT_EDGES,
) -> str:
    """
    Render entities and relationships as the ENTITIES/RELATIONSHIPS sections.

    Args:
        entities: Project entities in creation order
        edges: Project edges in creation order
        max_entities: Entity lines to include
        max_edges: Relationship lines to include

    Returns:
        The two sections separated by a blank line
    """
    names = {e.id: e.name for e in entities}

    entity_lines = [_entity_line(e) for e in entities[:max_entities]]
    edge_lines = [
        f"{names.get(edge.source_id, 'Unknown')} → {edge.label} → "
        f"{names.get(edge.target_id, 'Unknown')}"
        for edge in edges[:max_edges]
    ]

    return (
        "ENTITIES:\n" + "\n".join(entity_lines)
        + "\n\nRELATIONSHIPS:\n" + "\n".join(edge_lines)
    )


def build_chat_system_prompt(context: str) -> str:
    """Wrap rendered graph context with the assistant instructions."""
    return f"{CHAT_PREAMBLE}\n\n{context}\n\n{CHAT_GUIDANCE}"
