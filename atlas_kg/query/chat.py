"""
Graph Chat

Answers a question about a project's knowledge graph and records the exchange.

Flow:
    1. Reject a blank question (ValueError) and validate the provider
       configuration (ConfigError); nothing is written on either failure
    2. Load entities and edges and render them into the system prompt
    3. Save the user message
    4. Ask the provider (one call, no retry)
    5. Save and return the assistant message

A ProviderError from step 4 propagates and leaves the user message saved.

Example:
    >>> chat = GraphChat(storage, config)
    >>> answer = await chat.ask("proj", "Who leads the platform team?")
    >>> print(answer.content)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from atlas_kg.config import AtlasConfig, ProviderConfig
from atlas_kg.providers.factory import build_provider, validate_provider_config
from atlas_kg.query.context import build_chat_system_prompt, build_graph_context
from atlas_kg.storage.base import validate_project_id
from atlas_kg.types import ChatMessage, ChatRole

if TYPE_CHECKING:
    from atlas_kg.providers.base import LLMProvider
    from atlas_kg.storage.base import StorageBackend
    from atlas_kg.types import Entity

logger = logging.getLogger(__name__)

CHAT_MAX_TOKENS = 1000
HISTORY_LIMIT = 100
FALLBACK_ANSWER = "Sorry, I could not generate a response."


def _referenced_entities(answer: str, entities: list["Entity"]) -> list[str]:
    """Ids of entities whose name appears in the answer, first occurrence wins."""
    lowered = answer.lower()
    seen: set[str] = set()
    ids = []
    for entity in entities:
        name = entity.name.lower()
        if name and name not in seen and name in lowered:
            seen.add(name)
            ids.append(entity.id)
    return ids


class GraphChat:
    """
    Question answering over the stored graph of one project at a time.

    Args:
        storage: Backend holding the graph and the chat history
        config: Package settings (provider defaults, timeout)
    """

    def __init__(self, storage: "StorageBackend", config: AtlasConfig | None = None):
        self.storage = storage
        self.config = config or AtlasConfig()

    async def ask(
        self,
        project_id: str,
        message: str,
        provider_config: ProviderConfig | None = None,
        *,
        provider: "LLMProvider | None" = None,
    ) -> ChatMessage:
        """
        Answer a question from the project's entities and relationships.

        Args:
            project_id: Project whose graph is queried
            message: The user's question
            provider_config: Provider to ask (built from settings when None)
            provider: Pre-built provider to use instead of constructing one

        Returns:
            The saved assistant message

        Raises:
            ValueError: If the message is blank
            ConfigError: No usable provider configuration (nothing is saved)
            ProviderError: The provider call failed (the user message is kept)
        """
        validate_project_id(project_id)
        if not isinstance(message, str) or not message.strip():
            raise ValueError("Message is required")

        if provider_config is None and provider is None:
            provider_config = ProviderConfig.from_settings(self.config)
        if provider_config is not None:
            validate_provider_config(provider_config, purpose="chat")

        owns_provider = provider is None
        if provider is None:
            provider = build_provider(provider_config, self.config)

        try:
            entities = await self.storage.list_entities(project_id)
            edges = await self.storage.list_edges(project_id)
            system = build_chat_system_prompt(build_graph_context(entities, edges))

            await self.storage.write_messages([
                ChatMessage(project_id=project_id, role=ChatRole.USER, content=message)
            ])

            logger.info(
                f"Chat question for project {project_id} "
                f"({len(entities)} entities, {len(edges)} edges in graph)"
            )
            response = await provider.generate(
                message, system=system, max_tokens=CHAT_MAX_TOKENS
            )
            answer_text = response.text.strip() or FALLBACK_ANSWER

            answer = ChatMessage(
                project_id=project_id,
                role=ChatRole.ASSISTANT,
                content=answer_text,
                referenced_entity_ids=_referenced_entities(answer_text, entities),
            )
            await self.storage.write_messages([answer])
            return answer
        finally:
            if owns_provider:
                await provider.close()

    async def history(self, project_id: str, limit: int = HISTORY_LIMIT) -> list[ChatMessage]:
        """Return the latest `limit` messages of a project, oldest first."""
        messages = await self.storage.list_messages(project_id)
        if limit <= 0:
            return []
        return messages[-limit:]
