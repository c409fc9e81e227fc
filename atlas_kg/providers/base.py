"""
Abstract Provider Interface

Base class for LLM providers used by extraction and graph chat.

The extraction pipeline depends only on `extract(prompt) -> ProviderResponse`.
Graph chat uses `generate(prompt, system=..., max_tokens=...)`, a free-text
call with an optional system message. Providers never retry; retry policy
belongs to the orchestrator.
"""

from abc import ABC, abstractmethod

from atlas_kg.types.results import ConnectionCheck, ProviderResponse


class LLMProvider(ABC):
    """Abstract interface for LLM providers."""

    @abstractmethod
    async def extract(self, prompt: str) -> ProviderResponse:
        """
        Send a fully composed prompt and return the raw response.

        Raises:
            ProviderError: On transport failure or a non-success response
        """
        ...

    @abstractmethod
    async def generate(
        self,
        prompt: str,
        *,
        system: str | None = None,
        max_tokens: int | None = None,
    ) -> ProviderResponse:
        """
        Send a free-text request, optionally preceded by a system message.

        Args:
            prompt: User message
            system: Optional system message
            max_tokens: Response token cap (provider default when None)

        Raises:
            ProviderError: On transport failure or a non-success response
        """
        ...

    @abstractmethod
    async def check(self) -> ConnectionCheck:
        """Test that the provider is reachable and usable."""
        ...

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Identifier of the model this provider responds with."""
        ...

    async def close(self) -> None:
        """Release any held connections."""
        return None

    async def __aenter__(self) -> "LLMProvider":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
