"""Backend implementations."""

from .in_memory_backend import InMemoryBackend, StoredObject

__all__ = [
    "InMemoryBackend",
    "StoredObject",
]
