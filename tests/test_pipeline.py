"""Tests for the extraction pipeline (status lifecycle and error boundary)."""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from atlas_kg.config import AtlasConfig, ProviderConfig
from atlas_kg.errors import ConfigError, ExtractionError, ProviderError
from atlas_kg.ingestion.pipeline import ExtractionPipeline
from atlas_kg.storage import MemoryBackend
from atlas_kg.types import Document, ProviderResponse

ORG_PAYLOAD = {
    "entities": [
        {"name": "Alice", "type": "person", "metadata": {"role": "CTO"}},
        {"name": "Bob", "type": "person"},
        {"name": "Carol", "type": "person"},
        {"name": "Platform", "type": "team"},
    ],
    "relationships": [
        {"source": "Alice", "target": "Platform", "label": "leads", "weight": 5},
        {"source": "Bob", "target": "Nobody", "label": "reports to"},
    ],
    "insights": [{"type": "gap", "severity": "warning", "text": "No QA owner"}],
    "frontier_hints": [{"name": "Finance", "hint": "Budgets", "risk": "low",
                        "value": "high", "access_needed": "CFO"}],
}


def _response(payload: dict, model: str = "test-model") -> ProviderResponse:
    return ProviderResponse(text=json.dumps(payload), model=model)


def _chunk_payload(i: int) -> dict:
    return {"entities": [{"name": f"Person {i}", "type": "person"}]}


def _provider(*side_effect) -> MagicMock:
    provider = MagicMock()
    provider.model_name = "test-model"
    provider.extract = AsyncMock(side_effect=list(side_effect))
    provider.close = AsyncMock()
    return provider


@pytest.fixture
def config() -> AtlasConfig:
    return AtlasConfig(provider_kind="hosted", anthropic_api_key=None, openai_api_key=None)


@pytest.fixture
def stored():
    storage = MemoryBackend()

    async def _store(content: str) -> Document:
        document = Document(project_id="proj", filename="org.txt", content=content)
        await storage.write_document(document)
        return document

    return storage, _store


class TestSuccessfulPass:
    """Tests for a pass where every chunk succeeds."""

    @pytest.mark.asyncio
    async def test_records_and_status(self, stored, config):
        """A successful pass writes all records and marks the document extracted."""
        storage, store = stored
        document = await store("Alice is CTO and leads Platform.")
        provider = _provider(_response(ORG_PAYLOAD, model="claude-test"))

        summary = await ExtractionPipeline(storage, config).extract(document, provider=provider)

        assert summary.chunks == 1
        assert summary.entities == 4
        assert summary.relationships == 1
        assert summary.insights == 1
        assert summary.territories == 3
        assert summary.agents == 2
        assert summary.extracted_by == "claude-test"

        refreshed = await storage.get_document("proj", document.id)
        assert refreshed.status == "extracted"
        assert refreshed.entity_count == 4
        assert refreshed.edge_count == 1

        entities = await storage.list_entities("proj")
        territories = await storage.list_territories("proj")
        known = {t.id for t in territories if t.status == "known"}
        assert all(e.territory_id in known for e in entities)
        assert all(e.extracted_by == "claude-test" for e in entities)

        agents = await storage.list_agents("proj")
        assert [a.name for a in agents] == ["System Coordinator", "Person Explorer"]

    @pytest.mark.asyncio
    async def test_injected_provider_is_not_closed(self, stored, config):
        """The caller keeps ownership of an injected provider."""
        storage, store = stored
        document = await store("text")
        provider = _provider(_response({}))

        await ExtractionPipeline(storage, config).extract(document, provider=provider)

        provider.close.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_blank_document(self, stored, config):
        """A blank document makes no calls but still gets a coordinator."""
        storage, store = stored
        document = await store("   \n\n  ")
        provider = _provider()

        summary = await ExtractionPipeline(storage, config).extract(document, provider=provider)

        provider.extract.assert_not_awaited()
        assert summary.chunks == 0
        assert summary.entities == 0
        assert summary.extracted_by == "test-model"
        agents = await storage.list_agents("proj")
        assert [(a.role, a.entities_managed) for a in agents] == [("coordinator", 0)]
        assert (await storage.get_document("proj", document.id)).status == "extracted"

    @pytest.mark.asyncio
    async def test_unparseable_chunk_is_recovered(self, stored, config):
        """Unusable model output contributes nothing but does not fail the pass."""
        storage, store = stored
        document = await store("text")
        provider = _provider(ProviderResponse(text="I cannot help with that.", model="m"))

        summary = await ExtractionPipeline(storage, config).extract(document, provider=provider)

        assert summary.failed_chunks == 1
        assert summary.entities == 0
        assert (await storage.get_document("proj", document.id)).status == "extracted"

    @pytest.mark.asyncio
    async def test_off_set_entity_type_keeps_siblings(self, stored, config):
        """One entity with an unknown type is dropped; the rest of the chunk is kept."""
        storage, store = stored
        document = await store("Alice and Bob work in Ops.")
        provider = _provider(_response({"entities": [
            {"name": "Alice", "type": "person"},
            {"name": "Bob", "type": "person"},
            {"name": "Ops", "type": "department"},
        ]}))

        summary = await ExtractionPipeline(storage, config).extract(document, provider=provider)

        assert summary.failed_chunks == 0
        assert summary.entities == 2
        assert sorted(e.name for e in await storage.list_entities("proj")) == ["Alice", "Bob"]

    @pytest.mark.asyncio
    async def test_progress_callback(self, stored, config):
        """Progress is reported for extraction and assembly stages."""
        storage, store = stored
        document = await store("text")
        calls = []

        await ExtractionPipeline(storage, config).extract(
            document,
            provider=_provider(_response({})),
            on_progress=lambda stage, progress: calls.append((stage, progress)),
        )

        assert calls[0] == ("extraction", 0.0)
        assert calls[-1] == ("assembly", 1.0)


class TestLargeDocument:
    """Tests for multi-chunk documents."""

    @pytest.fixture
    def large_text(self) -> str:
        return "\n\n".join("x" * 9_998 for _ in range(25))

    @pytest.mark.asyncio
    async def test_three_chunks(self, stored, config, large_text):
        """A ~250k character document under a 100k budget makes three calls."""
        storage, store = stored
        document = await store(large_text)
        provider = _provider(*(_response(_chunk_payload(i)) for i in range(3)))

        summary = await ExtractionPipeline(storage, config).extract(document, provider=provider)

        assert provider.extract.await_count == 3
        assert summary.chunks == 3
        assert summary.entities == 3
        prompts = [call.args[0] for call in provider.extract.await_args_list]
        assert "(Part 1 of 3)" in prompts[0]
        assert "(Part 3 of 3)" in prompts[2]

    @pytest.mark.asyncio
    async def test_provider_failure_mid_document(self, stored, config, large_text):
        """A failing chunk fails the pass, but other chunks are still materialized."""
        storage, store = stored
        document = await store(large_text)
        provider = _provider(
            _response(_chunk_payload(1)),
            ProviderError("overloaded", status_code=529),
            _response(_chunk_payload(3)),
        )

        with pytest.raises(ExtractionError) as exc_info:
            await ExtractionPipeline(storage, config).extract(document, provider=provider)

        assert exc_info.value.document_id == document.id
        assert "chunk 2" in str(exc_info.value)
        assert provider.extract.await_count == 3

        entities = await storage.list_entities("proj")
        assert [e.name for e in entities] == ["Person 1", "Person 3"]

        refreshed = await storage.get_document("proj", document.id)
        assert refreshed.status == "failed"
        assert refreshed.entity_count == 2

    @pytest.mark.asyncio
    async def test_retry_recovers_failed_chunk(self, stored, large_text):
        """With retries configured a transient failure does not fail the pass."""
        storage, store = stored
        document = await store(large_text)
        provider = _provider(
            _response(_chunk_payload(1)),
            ProviderError("overloaded", status_code=529),
            _response(_chunk_payload(2)),
            _response(_chunk_payload(3)),
        )
        config = AtlasConfig(provider_retries=1)

        summary = await ExtractionPipeline(storage, config).extract(document, provider=provider)

        assert summary.entities == 3
        assert (await storage.get_document("proj", document.id)).status == "extracted"


class TestConfigurationErrors:
    """Configuration problems are raised before any work starts."""

    @pytest.mark.asyncio
    async def test_no_provider_configured(self, stored, config):
        storage, store = stored
        document = await store("text")

        with pytest.raises(ConfigError, match="not configured"):
            await ExtractionPipeline(storage, config).extract(
                document, ProviderConfig(kind="none")
            )

        assert (await storage.get_document("proj", document.id)).status == "uploaded"

    @pytest.mark.asyncio
    async def test_hosted_without_key(self, stored, config, monkeypatch):
        monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
        storage, store = stored
        document = await store("text")

        with pytest.raises(ConfigError, match="API key"):
            await ExtractionPipeline(storage, config).extract(
                document, ProviderConfig(kind="hosted", vendor="anthropic")
            )

        assert (await storage.get_document("proj", document.id)).status == "uploaded"
        assert await storage.list_entities("proj") == []


class TestStorageFailure:
    """Unexpected failures are wrapped and mark the document failed."""

    @pytest.mark.asyncio
    async def test_storage_error_is_wrapped(self, stored, config):
        storage, store = stored
        document = await store("Alice leads Platform.")
        storage.write_agents = AsyncMock(side_effect=OSError("disk full"))

        with pytest.raises(ExtractionError) as exc_info:
            await ExtractionPipeline(storage, config).extract(
                document, provider=_provider(_response(ORG_PAYLOAD))
            )

        assert isinstance(exc_info.value.__cause__, OSError)
        assert "disk full" in str(exc_info.value)
        assert (await storage.get_document("proj", document.id)).status == "failed"
        # Earlier writes are not rolled back
        assert len(await storage.list_entities("proj")) == 4
