"""
Provider Factory

Turns a ProviderConfig into a constructed LLMProvider. The result is passed
explicitly into the extraction pipeline; there is no process-wide client.
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

from atlas_kg.config.providers import PROVIDER_DEFAULTS, ProviderConfig
from atlas_kg.errors import ConfigError

if TYPE_CHECKING:
    from atlas_kg.config.settings import AtlasConfig
    from atlas_kg.providers.base import LLMProvider


def validate_provider_config(
    provider_config: ProviderConfig,
    purpose: str = "extraction",
) -> str | None:
    """
    Check a provider configuration before any work is done.

    Args:
        provider_config: Provider configuration to check
        purpose: Feature named in the not-configured message ("extraction", "chat")

    Returns:
        The API key to use for hosted providers (None for local)

    Raises:
        ConfigError: If no provider is configured, or a hosted provider has no key
    """
    if provider_config.kind == "none":
        raise ConfigError(
            f"AI {purpose} is not configured. Please enable an AI provider in settings."
        )

    if provider_config.kind == "hosted":
        env_name = PROVIDER_DEFAULTS[provider_config.vendor]["api_key_env"]
        api_key = provider_config.api_key or os.getenv(env_name)
        if not api_key:
            raise ConfigError(
                f"{provider_config.vendor} API key not configured. Add an API key to "
                f"the provider settings or set {env_name}."
            )
        return api_key

    if provider_config.kind == "local":
        return None

    raise ConfigError(f"Unknown provider kind: {provider_config.kind}")


def build_provider(
    provider_config: ProviderConfig,
    config: "AtlasConfig | None" = None,
) -> "LLMProvider":
    """
    Construct the provider described by provider_config.

    Args:
        provider_config: Per-pass provider configuration
        config: Package settings (max_tokens, timeout)

    Raises:
        ConfigError: See validate_provider_config
    """
    api_key = validate_provider_config(provider_config)

    max_tokens = config.max_tokens if config else 8000
    timeout = config.provider_timeout if config else None

    if provider_config.kind == "hosted":
        from atlas_kg.providers.llm.hosted import HostedLLMProvider
        return HostedLLMProvider(
            api_key=api_key,
            model=provider_config.resolved_model(),
            vendor=provider_config.vendor,
            max_tokens=max_tokens,
            timeout=timeout,
        )

    from atlas_kg.providers.llm.local import LocalLLMProvider
    return LocalLLMProvider(
        provider_config.resolved_base_url(),
        provider_config.resolved_model(),
        timeout=timeout,
    )
