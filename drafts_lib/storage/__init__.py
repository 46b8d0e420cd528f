"""Storage abstraction package for the draft store."""

from typing import Optional

from .base import KeyValueBackend
from .file_backend import FileStorageBackend
from .keys import WELL_KNOWN_KEYS, StorageKey
from .memory_backend import MemoryStorage
from .serializer import RecordDecodeError, RecordSerializer, content_signature
from .ttl_store import TTLStore


def create_backend(backend: str = "file", data_dir: Optional[str] = None) -> KeyValueBackend:
    """Build a key-value backend by name (`file` or `memory`)."""
    if backend == "memory":
        return MemoryStorage()
    if backend == "file":
        return FileStorageBackend(data_dir or "./data/drafts")
    raise ValueError(f"Unknown storage backend: {backend!r}")


__all__ = [
    "KeyValueBackend",
    "FileStorageBackend",
    "MemoryStorage",
    "StorageKey",
    "WELL_KNOWN_KEYS",
    "RecordDecodeError",
    "RecordSerializer",
    "content_signature",
    "TTLStore",
    "create_backend",
]
