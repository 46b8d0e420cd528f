"""Simple memory-backed key-value backend

This backend keeps the raw strings in a dict. Nothing survives the process,
which makes it the natural substitute for the device store in tests.
"""
from threading import RLock
from typing import Dict, Iterable, Optional

from .base import KeyValueBackend


class MemoryStorage(KeyValueBackend):
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._lock = RLock()
        self._store: Dict[str, str] = dict(initial or {})

    async def get_item(self, key: str) -> Optional[str]:
        with self._lock:
            return self._store.get(key)

    async def set_item(self, key: str, value: str) -> None:
        if not isinstance(value, str):
            raise TypeError(f"MemoryStorage only stores strings, got {type(value).__name__}")
        with self._lock:
            self._store[key] = value

    async def remove_item(self, key: str) -> None:
        with self._lock:
            self._store.pop(key, None)

    async def multi_remove(self, keys: Iterable[str]) -> None:
        with self._lock:
            for key in keys:
                self._store.pop(key, None)

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._store.keys())

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._store
