"""Key-value backend interface definitions.

Defines the KeyValueBackend abstract class the draft store writes through.
Backends only move strings around; JSON encoding and expiry are handled
above them by `drafts_lib.storage.ttl_store.TTLStore`.
"""
from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Iterable, Optional


class KeyValueBackend(ABC):
    """Abstract async string key-value backend.

    Mirrors the device key-value storage the app runs on: every operation is
    awaitable and values are opaque strings.
    """

    @abstractmethod
    async def get_item(self, key: str) -> Optional[str]:
        """Return the string stored under `key` or None if it is absent."""

    @abstractmethod
    async def set_item(self, key: str, value: str) -> None:
        """Store `value` under `key`, replacing any previous value.

        Implementations should make the write atomic when possible so a
        crash never leaves a half-written record behind.
        """

    @abstractmethod
    async def remove_item(self, key: str) -> None:
        """Remove `key`. Removing an absent key is not an error."""

    @abstractmethod
    async def multi_remove(self, keys: Iterable[str]) -> None:
        """Remove every key in `keys`, ignoring the ones that are absent."""
