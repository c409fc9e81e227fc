"""
AtlasConfig - Configuration Management

Sensible defaults with full override capability.

Example:
    >>> # Use defaults (reads from environment)
    >>> kg = KnowledgeGraph("./kb")

    >>> # Explicit configuration
    >>> config = AtlasConfig(
    ...     provider_kind="local",
    ...     local_model="llama3.2",
    ... )
    >>> kg = KnowledgeGraph("./kb", config=config)

    >>> # From config file
    >>> config = AtlasConfig.from_file("./atlas.toml")

Environment Variables:
    ATLAS_PROVIDER - Provider kind: "hosted", "local" or "none"
    ATLAS_HOSTED_VENDOR - Hosted vendor: "anthropic" or "openai"
    ATLAS_HOSTED_MODEL - Hosted model override
    ATLAS_LOCAL_URL - Local LLM server base URL
    ATLAS_LOCAL_MODEL - Local model name
    ATLAS_MAX_CHUNK_CHARS - Character budget per chunk
    ATLAS_PROVIDER_TIMEOUT - Provider request timeout in seconds (unset = no timeout)
    ATLAS_PROVIDER_RETRIES - Orchestrator retries per failed chunk call
    ATLAS_EXTRACTION_CONCURRENCY - Max documents extracted concurrently
    ANTHROPIC_API_KEY - Anthropic API key (standard name)
    OPENAI_API_KEY - OpenAI API key (standard name)
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, cast

# TOML support: tomllib is built-in for Python 3.11+, use tomli for 3.10
try:
    import tomllib

    def _load_toml(path: Path) -> dict[str, Any]:
        with open(path, "rb") as f:
            return cast(dict[str, Any], tomllib.load(f))

except ImportError:
    import tomli

    def _load_toml(path: Path) -> dict[str, Any]:
        with open(path, "rb") as f:
            return cast(dict[str, Any], tomli.load(f))


class AtlasConfig:
    """Configuration for atlas_kg."""

    # === Provider Configuration ===

    provider_kind: str = "hosted"
    """Provider kind: "hosted", "local", "none" """

    hosted_vendor: str = "anthropic"
    """Hosted vendor: "anthropic", "openai" """

    hosted_model: str | None = None
    """Hosted model override (vendor default when None)"""

    local_base_url: str = "http://localhost:11434"
    """Base URL of the local LLM server"""

    local_model: str = "llama3.2"
    """Model served by the local LLM server"""

    max_tokens: int = 8000
    """Maximum tokens requested from hosted models"""

    provider_timeout: float | None = None
    """Request timeout in seconds; None leaves calls unbounded"""

    # === API Keys ===

    anthropic_api_key: str | None = None
    openai_api_key: str | None = None

    # === Processing Configuration ===

    max_chunk_chars: int = 100_000
    """Character budget per chunk (~25K tokens, leaves room for the prompt)"""

    provider_retries: int = 0
    """Extra attempts for a chunk whose provider call failed"""

    extraction_concurrency: int = 4
    """Max documents extracted concurrently"""

    explorer_threshold: int = 3
    """Minimum entities of one type before an explorer agent is created"""

    # === Storage Configuration ===

    parquet_compression: str = "zstd"
    """Parquet compression: "zstd", "snappy", "gzip", "none" """

    def __init__(self, **kwargs: Any) -> None:
        """
        Initialize configuration.

        Args:
            **kwargs: Override any configuration option
        """
        # Load from environment first
        self._load_from_env()

        # Apply explicit overrides
        for key, value in kwargs.items():
            if hasattr(self, key):
                setattr(self, key, value)
            else:
                raise ValueError(f"Unknown configuration option: {key}")

    def _load_from_env(self) -> None:
        """Load configuration from environment variables."""
        import os

        # API keys (standard names)
        self.anthropic_api_key = os.getenv("ANTHROPIC_API_KEY")
        self.openai_api_key = os.getenv("OPENAI_API_KEY")

        # ATLAS_* prefixed settings
        if kind := os.getenv("ATLAS_PROVIDER"):
            self.provider_kind = kind
        if vendor := os.getenv("ATLAS_HOSTED_VENDOR"):
            self.hosted_vendor = vendor
        if model := os.getenv("ATLAS_HOSTED_MODEL"):
            self.hosted_model = model
        if url := os.getenv("ATLAS_LOCAL_URL"):
            self.local_base_url = url
        if model := os.getenv("ATLAS_LOCAL_MODEL"):
            self.local_model = model
        if chars := os.getenv("ATLAS_MAX_CHUNK_CHARS"):
            self.max_chunk_chars = int(chars)
        if timeout := os.getenv("ATLAS_PROVIDER_TIMEOUT"):
            self.provider_timeout = float(timeout)
        if retries := os.getenv("ATLAS_PROVIDER_RETRIES"):
            self.provider_retries = int(retries)
        if concurrency := os.getenv("ATLAS_EXTRACTION_CONCURRENCY"):
            self.extraction_concurrency = int(concurrency)

    @classmethod
    def from_file(cls, path: str | Path) -> "AtlasConfig":
        """
        Load configuration from TOML file.

        Nested sections are flattened into config keys.

        Example TOML:
            [provider]
            kind = "local"
            local_model = "llama3.2"

            [processing]
            max_chunk_chars = 50000

            [api_keys]
            anthropic = "sk-ant-..."

        Args:
            path: Path to TOML configuration file

        Returns:
            AtlasConfig instance with values from file

        Raises:
            FileNotFoundError: If config file doesn't exist
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        data = _load_toml(path)

        flat_config: dict[str, Any] = {}

        for section in ("provider", "processing", "storage", "api_keys"):
            for key, value in data.get(section, {}).items():
                if section == "api_keys":
                    # api_keys.anthropic -> anthropic_api_key
                    flat_config[f"{key}_api_key"] = value
                elif section == "provider" and key in ("kind", "retries", "timeout"):
                    # provider.kind -> provider_kind
                    flat_config[f"provider_{key}"] = value
                else:
                    flat_config[key] = value

        # Also support flat top-level keys
        for key, value in data.items():
            if not isinstance(value, dict):
                flat_config[key] = value

        return cls(**flat_config)

    @classmethod
    def from_env(cls) -> "AtlasConfig":
        """Load configuration from environment variables only."""
        return cls()

    def to_file(self, path: str | Path) -> None:
        """
        Save configuration to TOML file.

        API keys are never written; set them via environment variables.

        Args:
            path: Path to write TOML configuration file
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        sections: dict[str, dict[str, str | int | float | bool | None]] = {
            "provider": {
                "kind": self.provider_kind,
                "hosted_vendor": self.hosted_vendor,
                "hosted_model": self.hosted_model,
                "local_base_url": self.local_base_url,
                "local_model": self.local_model,
                "max_tokens": self.max_tokens,
                "timeout": self.provider_timeout,
                "retries": self.provider_retries,
            },
            "processing": {
                "max_chunk_chars": self.max_chunk_chars,
                "extraction_concurrency": self.extraction_concurrency,
                "explorer_threshold": self.explorer_threshold,
            },
            "storage": {
                "parquet_compression": self.parquet_compression,
            },
        }

        # Build TOML string manually (None values are omitted)
        lines = ["# atlas-kg configuration", ""]

        for section_name, section_values in sections.items():
            lines.append(f"[{section_name}]")
            for key, value in section_values.items():
                if isinstance(value, str):
                    lines.append(f'{key} = "{value}"')
                elif isinstance(value, bool):
                    lines.append(f"{key} = {str(value).lower()}")
                elif isinstance(value, (int, float)):
                    lines.append(f"{key} = {value}")
            lines.append("")

        lines.extend([
            "# API keys should be set via environment variables:",
            "# ANTHROPIC_API_KEY, OPENAI_API_KEY",
            "",
        ])

        path.write_text("\n".join(lines))

    def with_overrides(self, **kwargs: Any) -> "AtlasConfig":
        """Return new config with specified overrides."""
        new_config = AtlasConfig.__new__(AtlasConfig)
        for key in dir(self):
            if not key.startswith("_") and not callable(getattr(self, key)):
                setattr(new_config, key, getattr(self, key))
        for key, value in kwargs.items():
            setattr(new_config, key, value)
        return new_config
