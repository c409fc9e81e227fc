"""
Graph Chat

Answers free-text questions about a project's knowledge graph.

Modules:
    context: Renders entities and relationships into the chat system prompt
    chat: GraphChat - persists the conversation and calls the provider
"""

from atlas_kg.query.chat import GraphChat
from atlas_kg.query.context import build_chat_system_prompt, build_graph_context

__all__ = ["GraphChat", "build_chat_system_prompt", "build_graph_context"]
