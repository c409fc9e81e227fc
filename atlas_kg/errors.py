"""
Error Taxonomy

Exceptions raised across the extraction pipeline.

    AtlasError
    ├── ConfigError      - no provider configured, or missing credentials
    ├── ProviderError    - transport failure or non-success response from a provider
    ├── ParseError       - model output did not contain a usable JSON object
    ├── ExtractionError  - an extraction pass ended with the document marked failed
    └── StorageError     - invalid storage usage (unknown ids, bad project ids)
"""

from __future__ import annotations


class AtlasError(Exception):
    """Base class for all atlas_kg errors."""


class ConfigError(AtlasError):
    """Provider configuration is missing or unusable."""


class ProviderError(AtlasError):
    """
    A provider call failed.

    Attributes:
        status_code: HTTP status code reported by the provider (None for transport errors)
        message: Provider error message
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.message = message
        self.status_code = status_code
        if status_code is not None:
            super().__init__(f"[{status_code}] {message}")
        else:
            super().__init__(message)


class ParseError(AtlasError):
    """Raw model output could not be parsed into an extraction result."""


class ExtractionError(AtlasError):
    """
    An extraction pass failed.

    Attributes:
        document_id: Document whose pass failed
    """

    def __init__(self, message: str, document_id: str | None = None) -> None:
        self.document_id = document_id
        super().__init__(message)


class StorageError(AtlasError):
    """Storage backend was asked for something it cannot do."""
