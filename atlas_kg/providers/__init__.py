"""
LLM Providers

Provider-agnostic interface for the extraction call.

Modules:
    base: Abstract provider interface
    llm/: Hosted (LangChain) and local (httpx) implementations
    factory: ProviderConfig -> LLMProvider construction

Design:
    - Providers implement LLMProvider.extract(prompt) -> ProviderResponse
    - Lazy import to avoid requiring all vendor packages
    - No retries inside providers; the pipeline owns retry policy

Example:
    >>> from atlas_kg.providers import build_provider
    >>> from atlas_kg.config import ProviderConfig
    >>> provider = build_provider(ProviderConfig(kind="local"))
"""

from atlas_kg.providers.base import LLMProvider
from atlas_kg.providers.factory import build_provider, validate_provider_config

__all__ = ["LLMProvider", "build_provider", "validate_provider_config"]
