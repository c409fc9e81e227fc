"""Tests for graph chat: context rendering, question answering and history."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from atlas_kg.config import AtlasConfig, ProviderConfig
from atlas_kg.errors import ConfigError, ProviderError
from atlas_kg.query import GraphChat, build_chat_system_prompt, build_graph_context
from atlas_kg.query.chat import FALLBACK_ANSWER
from atlas_kg.query.context import CHAT_GUIDANCE, CHAT_PREAMBLE
from atlas_kg.storage import MemoryBackend
from atlas_kg.types import ChatMessage, Edge, Entity, ProviderResponse


def _entity(name: str, entity_type: str = "person", **kwargs) -> Entity:
    return Entity(project_id="proj", document_id="doc", name=name, type=entity_type, **kwargs)


def _provider(*side_effect) -> MagicMock:
    provider = MagicMock()
    provider.model_name = "test-model"
    provider.generate = AsyncMock(side_effect=list(side_effect))
    provider.close = AsyncMock()
    return provider


def _answer(text: str) -> ProviderResponse:
    return ProviderResponse(text=text, model="test-model")


@pytest.fixture
def storage() -> MemoryBackend:
    return MemoryBackend()


@pytest.fixture
def config() -> AtlasConfig:
    return AtlasConfig(provider_kind="hosted", anthropic_api_key=None, openai_api_key=None)


class TestGraphContext:
    """Tests for rendering the graph into prompt text."""

    def test_entity_and_relationship_lines(self):
        alice = _entity("Alice", description="CTO", metadata={"tenure": "5y", "site": "HQ"})
        platform = _entity("Platform", "team")
        edge = Edge(project_id="proj", source_id=alice.id, target_id=platform.id, label="leads")

        context = build_graph_context([alice, platform], [edge])

        assert context == (
            "ENTITIES:\n"
            "Alice (person): CTO tenure:5y site:HQ\n"
            "Platform (team):\n"
            "\n"
            "RELATIONSHIPS:\n"
            "Alice → leads → Platform"
        )

    def test_limits_keep_earliest_records(self):
        """Only the first entities and edges are rendered; edges still name any entity."""
        people = [_entity(f"P{i}") for i in range(5)]
        edges = [
            Edge(project_id="proj", source_id=people[4].id, target_id=people[0].id, label=f"l{i}")
            for i in range(3)
        ]

        context = build_graph_context(people, edges, max_entities=2, max_edges=1)

        entity_section, edge_section = context.split("\n\nRELATIONSHIPS:\n")
        assert entity_section.splitlines()[1:] == ["P0 (person):", "P1 (person):"]
        assert edge_section.splitlines() == ["P4 → l0 → P0"]

    def test_unknown_endpoint(self):
        edge = Edge(project_id="proj", source_id="gone", target_id="also-gone", label="x")

        assert build_graph_context([], [edge]).endswith("Unknown → x → Unknown")

    def test_empty_graph(self):
        assert build_graph_context([], []) == "ENTITIES:\n\n\nRELATIONSHIPS:\n"

    def test_system_prompt_wraps_context(self):
        prompt = build_chat_system_prompt("ENTITIES:\nA (team):")

        assert prompt.startswith(CHAT_PREAMBLE)
        assert prompt.endswith(CHAT_GUIDANCE)
        assert "ENTITIES:\nA (team):" in prompt


class TestGraphChatAsk:
    """Tests for GraphChat.ask."""

    @pytest.mark.asyncio
    async def test_saves_question_and_answer(self, storage, config):
        alice = _entity("Alice")
        bob = _entity("Bob")
        await storage.write_entities([alice, bob])
        await storage.write_edges([
            Edge(project_id="proj", source_id=alice.id, target_id=bob.id, label="manages")
        ])
        provider = _provider(_answer("  Alice manages Bob.  "))

        answer = await GraphChat(storage, config).ask(
            "proj", "Who manages Bob?", provider=provider
        )

        call = provider.generate.await_args
        assert call.args == ("Who manages Bob?",)
        assert call.kwargs["max_tokens"] == 1000
        assert "Alice → manages → Bob" in call.kwargs["system"]

        assert answer.role == "assistant"
        assert answer.content == "Alice manages Bob."
        assert answer.referenced_entity_ids == [alice.id, bob.id]

        messages = await storage.list_messages("proj")
        assert [(m.role, m.content) for m in messages] == [
            ("user", "Who manages Bob?"),
            ("assistant", "Alice manages Bob."),
        ]
        provider.close.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_empty_answer_uses_fallback(self, storage, config):
        answer = await GraphChat(storage, config).ask(
            "proj", "Anything?", provider=_provider(_answer("   "))
        )

        assert answer.content == FALLBACK_ANSWER
        assert answer.referenced_entity_ids == []

    @pytest.mark.asyncio
    async def test_blank_message_rejected(self, storage, config):
        provider = _provider()

        with pytest.raises(ValueError, match="Message is required"):
            await GraphChat(storage, config).ask("proj", "  \n", provider=provider)

        provider.generate.assert_not_awaited()
        assert await storage.list_messages("proj") == []

    @pytest.mark.asyncio
    async def test_no_provider_configured(self, storage, config):
        """A disabled provider fails before anything is saved."""
        with pytest.raises(ConfigError, match="AI chat is not configured"):
            await GraphChat(storage, config).ask(
                "proj", "Who leads?", ProviderConfig(kind="none")
            )

        assert await storage.list_messages("proj") == []

    @pytest.mark.asyncio
    async def test_hosted_without_key(self, storage, config, monkeypatch):
        monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)

        with pytest.raises(ConfigError, match="API key not configured"):
            await GraphChat(storage, config).ask(
                "proj", "Who leads?", ProviderConfig(kind="hosted", vendor="anthropic")
            )

        assert await storage.list_messages("proj") == []

    @pytest.mark.asyncio
    async def test_provider_failure_keeps_question(self, storage, config):
        provider = _provider(ProviderError("overloaded", status_code=529))

        with pytest.raises(ProviderError):
            await GraphChat(storage, config).ask("proj", "Who leads?", provider=provider)

        messages = await storage.list_messages("proj")
        assert [(m.role, m.content) for m in messages] == [("user", "Who leads?")]


class TestGraphChatHistory:
    """Tests for GraphChat.history."""

    @pytest.mark.asyncio
    async def test_latest_messages_oldest_first(self, storage, config):
        await storage.write_messages([
            ChatMessage(project_id="proj", role="user", content=f"m{i}") for i in range(5)
        ])

        chat = GraphChat(storage, config)

        assert [m.content for m in await chat.history("proj")] == [f"m{i}" for i in range(5)]
        assert [m.content for m in await chat.history("proj", limit=2)] == ["m3", "m4"]
        assert await chat.history("proj", limit=0) == []

    @pytest.mark.asyncio
    async def test_project_scoped(self, storage, config):
        await storage.write_messages([
            ChatMessage(project_id="other", role="user", content="hidden")
        ])

        assert await GraphChat(storage, config).history("proj") == []
