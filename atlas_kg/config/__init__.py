"""
Configuration System

Manages configuration for atlas_kg with a layered approach.

Configuration Priority (highest to lowest):
    1. Programmatic (passed to AtlasConfig())
    2. Environment variables (ATLAS_* prefix, standard API key names)
    3. Config file (AtlasConfig.from_file)
    4. Built-in defaults

Modules:
    settings: AtlasConfig class
    providers: ProviderConfig and per-provider defaults
"""

from atlas_kg.config.providers import PROVIDER_DEFAULTS, ProviderConfig
from atlas_kg.config.settings import AtlasConfig

__all__ = ["AtlasConfig", "ProviderConfig", "PROVIDER_DEFAULTS"]
