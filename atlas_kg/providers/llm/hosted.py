"""
Hosted LLM Provider (LangChain-based)

Implements LLMProvider over a hosted chat API using LangChain chat models.

Vendors:
    - anthropic: ChatAnthropic (default, claude-sonnet-4-20250514)
    - openai: ChatOpenAI (gpt-4o)

One request per call with client retries disabled. Any vendor exception is
surfaced as ProviderError carrying the vendor's status code when it has one.

Example:
    >>> provider = HostedLLMProvider(api_key="sk-ant-...")
    >>> response = await provider.extract("Return {} as JSON")
    >>> response.model
    'claude-sonnet-4-20250514'
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from atlas_kg.config.providers import PROVIDER_DEFAULTS
from atlas_kg.errors import ProviderError
from atlas_kg.providers.base import LLMProvider
from atlas_kg.types.results import ConnectionCheck, ProviderResponse

if TYPE_CHECKING:
    from langchain_core.language_models.chat_models import BaseChatModel

logger = logging.getLogger(__name__)

_CHECK_PROMPT = (
    "Hello! Just testing the connection. Please respond with 'Connection successful'."
)


def _get_chat_model(
    vendor: str,
    api_key: str | None,
    model: str,
    max_tokens: int,
    timeout: float | None,
) -> "BaseChatModel":
    """
    Get a LangChain chat model for the vendor.

    Uses lazy import to avoid requiring every vendor package.

    Raises:
        ImportError: If the vendor's LangChain package is not installed
        ValueError: If the vendor is unknown
    """
    kwargs: dict[str, Any] = {
        "model": model,
        "temperature": 0.0,
        "max_tokens": max_tokens,
        "max_retries": 0,
    }
    if api_key:
        kwargs["api_key"] = api_key
    if timeout is not None:
        kwargs["timeout"] = timeout

    if vendor == "anthropic":
        try:
            from langchain_anthropic import ChatAnthropic
        except ImportError:
            raise ImportError(
                "Hosted provider requires the 'langchain-anthropic' package. "
                "Install with: pip install langchain-anthropic"
            )
        return ChatAnthropic(**kwargs)

    if vendor == "openai":
        try:
            from langchain_openai import ChatOpenAI
        except ImportError:
            raise ImportError(
                "Hosted provider requires the 'langchain-openai' package. "
                "Install with: pip install langchain-openai"
            )
        return ChatOpenAI(**kwargs)

    raise ValueError(f"Unknown hosted vendor: {vendor}")


def _content_text(content: Any) -> str:
    """Flatten LangChain message content (string or content blocks) to text."""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for block in content:
            if isinstance(block, str):
                parts.append(block)
            elif isinstance(block, dict) and block.get("type") == "text":
                parts.append(str(block.get("text", "")))
        return "".join(parts)
    return str(content)


def _to_provider_error(exc: Exception) -> ProviderError:
    status_code = getattr(exc, "status_code", None)
    if status_code is None:
        response = getattr(exc, "response", None)
        status_code = getattr(response, "status_code", None)
    message = getattr(exc, "message", None) or str(exc) or type(exc).__name__
    return ProviderError(str(message), status_code=status_code)


class HostedLLMProvider(LLMProvider):
    """
    Hosted LLM provider implementation using LangChain.

    Args:
        api_key: Vendor API key. If None, the vendor SDK reads its standard env var.
        model: Model to use (vendor default when None)
        vendor: "anthropic" or "openai"
        max_tokens: Maximum tokens in the response
        timeout: Request timeout in seconds (None = no client-side timeout)
    """

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        *,
        vendor: str = "anthropic",
        max_tokens: int = 8000,
        timeout: float | None = None,
    ) -> None:
        if vendor not in ("anthropic", "openai"):
            raise ValueError(f"Unknown hosted vendor: {vendor}")
        self._api_key = api_key
        self._vendor = vendor
        self._model = model or PROVIDER_DEFAULTS[vendor]["model"]
        self._max_tokens = max_tokens
        self._timeout = timeout
        # Lazy initialization - create client on first use
        self._client: BaseChatModel | None = None

    def _get_client(self) -> "BaseChatModel":
        """Get or create the chat model."""
        if self._client is None:
            self._client = _get_chat_model(
                self._vendor,
                self._api_key,
                self._model,
                self._max_tokens,
                self._timeout,
            )
        return self._client

    @property
    def model_name(self) -> str:
        """Current model name."""
        return self._model

    @property
    def vendor(self) -> str:
        return self._vendor

    async def _invoke(self, client: Any, messages: list[Any]) -> ProviderResponse:
        try:
            response = await client.ainvoke(messages)
        except Exception as e:
            error = _to_provider_error(e)
            logger.warning(f"{self._vendor} request failed: {error}")
            raise error from e

        return ProviderResponse(text=_content_text(response.content), model=self._model)

    async def extract(self, prompt: str) -> ProviderResponse:
        """
        Send the prompt as a single user message.

        Args:
            prompt: Fully composed prompt (instructions + document text)

        Returns:
            ProviderResponse with the raw text and model name

        Raises:
            ProviderError: On any vendor or transport failure
        """
        from langchain_core.messages import HumanMessage

        return await self._invoke(self._get_client(), [HumanMessage(content=prompt)])

    async def generate(
        self,
        prompt: str,
        *,
        system: str | None = None,
        max_tokens: int | None = None,
    ) -> ProviderResponse:
        """
        Send a system message (when given) followed by the prompt.

        Raises:
            ProviderError: On any vendor or transport failure
        """
        from langchain_core.messages import BaseMessage, HumanMessage, SystemMessage

        client: Any = self._get_client()
        if max_tokens is not None:
            client = client.bind(max_tokens=max_tokens)

        messages: list[BaseMessage] = []
        if system:
            messages.append(SystemMessage(content=system))
        messages.append(HumanMessage(content=prompt))

        return await self._invoke(client, messages)

    async def check(self) -> ConnectionCheck:
        """Send a short prompt to verify credentials and connectivity."""
        try:
            response = await self.extract(_CHECK_PROMPT)
        except ProviderError as e:
            if e.status_code == 401 or "authentication" in e.message.lower():
                return ConnectionCheck(success=False, message="Invalid API key")
            return ConnectionCheck(
                success=False,
                message=f"Failed to connect to {self._vendor} API: {e.message}",
            )

        return ConnectionCheck(
            success=True,
            message=(
                f"{self._vendor} API connection successful. "
                f'Response: "{response.text.strip()}"'
            ),
            available_models=[self._model],
        )
