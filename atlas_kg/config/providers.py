"""
Provider Configurations

Default model configuration for each provider kind, and the per-pass
ProviderConfig handed to the extraction pipeline.

When a provider is selected, appropriate model defaults are applied:
    >>> cfg = ProviderConfig(kind="local")
    >>> cfg.resolved_model()
    'llama3.2'
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Literal

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from atlas_kg.config.settings import AtlasConfig

ProviderKind = Literal["hosted", "local", "none"]
HostedVendor = Literal["anthropic", "openai"]

# Hosted vendor default models
PROVIDER_DEFAULTS = {
    "anthropic": {
        "model": "claude-sonnet-4-20250514",
        "api_key_env": "ANTHROPIC_API_KEY",
    },
    "openai": {
        "model": "gpt-4o",
        "api_key_env": "OPENAI_API_KEY",
    },
    "local": {
        "model": "llama3.2",
        "base_url": "http://localhost:11434",
    },
}


class ProviderConfig(BaseModel):
    """
    Provider configuration for one extraction pass or chat question.

    Attributes:
        kind: "hosted", "local" or "none"
        vendor: Hosted vendor ("anthropic" or "openai"); ignored for local
        api_key: Hosted API key
        base_url: Local server base URL
        model_name: Model override (vendor/local default when None)
    """

    kind: ProviderKind = "hosted"
    vendor: HostedVendor = "anthropic"
    api_key: str | None = Field(default=None, repr=False)
    base_url: str | None = None
    model_name: str | None = None

    def resolved_model(self) -> str:
        """Model name to request, falling back to the provider default."""
        if self.model_name:
            return self.model_name
        if self.kind == "local":
            return PROVIDER_DEFAULTS["local"]["model"]
        return PROVIDER_DEFAULTS[self.vendor]["model"]

    def resolved_base_url(self) -> str:
        """Local server base URL without a trailing slash."""
        url = self.base_url or PROVIDER_DEFAULTS["local"]["base_url"]
        return url.rstrip("/")

    @classmethod
    def from_settings(cls, config: "AtlasConfig") -> "ProviderConfig":
        """Build a provider configuration from package settings."""
        if config.hosted_vendor == "openai":
            api_key = config.openai_api_key
        else:
            api_key = config.anthropic_api_key

        if config.provider_kind == "local":
            model = config.local_model
        else:
            model = config.hosted_model

        return cls(
            kind=config.provider_kind,
            vendor=config.hosted_vendor,
            api_key=api_key,
            base_url=config.local_base_url,
            model_name=model,
        )
