"""
In-Memory Storage Backend

Modules:
    backend: MemoryBackend class
"""

from atlas_kg.storage.memory.backend import MemoryBackend

__all__ = ["MemoryBackend"]
