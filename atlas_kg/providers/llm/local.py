"""
Local LLM Provider (Ollama-compatible HTTP server)

Implements LLMProvider against a local server exposing `/api/generate`,
`/api/chat` and `/api/tags`, using httpx.

Any non-success HTTP status or transport failure raises ProviderError.

Example:
    >>> provider = LocalLLMProvider("http://localhost:11434", "llama3.2")
    >>> response = await provider.extract("Return {} as JSON")
    >>> response.model
    'ollama-llama3.2'
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from atlas_kg.errors import ProviderError
from atlas_kg.providers.base import LLMProvider
from atlas_kg.types.results import ConnectionCheck, ProviderResponse

logger = logging.getLogger(__name__)


class LocalLLMProvider(LLMProvider):
    """
    Local LLM server provider.

    Args:
        base_url: Server base URL (e.g. "http://localhost:11434")
        model: Model name served locally
        timeout: Request timeout in seconds (None = no client-side timeout)
        transport: Optional httpx transport (used by tests)
    """

    def __init__(
        self,
        base_url: str,
        model: str,
        *,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._model = model
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the async HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                headers={"Content-Type": "application/json"},
                timeout=httpx.Timeout(self._timeout),
                transport=self._transport,
            )
        return self._client

    @property
    def model_name(self) -> str:
        """Model id reported on responses."""
        return f"ollama-{self._model}"

    @property
    def base_url(self) -> str:
        return self._base_url

    async def _post(self, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        client = self._get_client()
        try:
            response = await client.post(path, json=payload)
        except httpx.HTTPError as e:
            logger.warning(f"Local LLM request to {self._base_url} failed: {e}")
            raise ProviderError(f"Local LLM transport error: {e}") from e

        if not response.is_success:
            raise ProviderError(
                f"Local LLM API error: {response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise ProviderError(
                "Local LLM returned a non-JSON body", status_code=response.status_code
            ) from e
        return data if isinstance(data, dict) else {}

    async def extract(self, prompt: str) -> ProviderResponse:
        """
        POST the prompt to /api/generate in non-streaming JSON mode.

        Raises:
            ProviderError: On non-2xx status, transport failure, or a non-JSON body
        """
        data = await self._post("/api/generate", {
            "model": self._model,
            "prompt": prompt,
            "stream": False,
            "format": "json",
        })
        return ProviderResponse(text=data.get("response") or "", model=self.model_name)

    async def generate(
        self,
        prompt: str,
        *,
        system: str | None = None,
        max_tokens: int | None = None,
    ) -> ProviderResponse:
        """
        POST a system and user message to /api/chat, non-streaming.

        Raises:
            ProviderError: On non-2xx status, transport failure, or a non-JSON body
        """
        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})

        payload: dict[str, Any] = {
            "model": self._model,
            "messages": messages,
            "stream": False,
        }
        if max_tokens is not None:
            payload["options"] = {"num_predict": max_tokens}

        data = await self._post("/api/chat", payload)
        message = data.get("message") or {}
        text = message.get("content") if isinstance(message, dict) else None
        return ProviderResponse(text=text or "", model=self.model_name)

    async def check(self) -> ConnectionCheck:
        """List served models via /api/tags and look for the configured one."""
        client = self._get_client()
        try:
            response = await client.get("/api/tags")
            response.raise_for_status()
            models = response.json().get("models") or []
        except httpx.HTTPStatusError as e:
            return ConnectionCheck(
                success=False,
                message=f"Local LLM connection failed: HTTP {e.response.status_code}",
            )
        except (httpx.HTTPError, ValueError):
            return ConnectionCheck(
                success=False,
                message="Could not connect to the local LLM server. Is it running?",
            )

        names = [str(m.get("name", "")) for m in models if isinstance(m, dict)]
        found = any(
            self._model in name or name.split(":")[0] in self._model
            for name in names
            if name
        )

        if found:
            return ConnectionCheck(
                success=True,
                message=(
                    f"Local LLM connection successful. Found {len(names)} models "
                    f"including '{self._model}'."
                ),
                available_models=names[:5],
            )
        return ConnectionCheck(
            success=True,
            message=(
                f"Local LLM connection successful, but model '{self._model}' was not "
                f"found. Available models: {', '.join(names)}"
            ),
            available_models=names,
        )

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
        self._client = None
