"""TTL-aware record store layered on a string key-value backend.

Every value is wrapped in a `StorageRecord` carrying its own expiry. Expired
or unreadable records are evicted lazily, the first time somebody reads
them. Backend failures never propagate: the store behaves as if nothing
had been saved.
"""
from __future__ import annotations
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Iterable, Optional
import logging

from .base import KeyValueBackend
from .keys import WELL_KNOWN_KEYS, KeyLike, key_name
from .models import KeyStats, StorageRecord, StorageStats
from .serializer import RecordDecodeError, RecordSerializer, Serializer

logger = logging.getLogger(__name__)

DEFAULT_TTL_HOURS = 24.0


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TTLStore:
    """Save/get/remove primitive with per-record expiry.

    Args:
        backend: async string key-value backend (device store, file, memory).
        serializer: record codec; defaults to `RecordSerializer`.
        clock: callable returning the current aware UTC datetime. Injected
            by tests to cross expiry boundaries without sleeping.
        default_ttl_hours: TTL used when `save` is called without one.
    """

    def __init__(
        self,
        backend: KeyValueBackend,
        *,
        serializer: Optional[Serializer] = None,
        clock: Callable[[], datetime] = utcnow,
        default_ttl_hours: float = DEFAULT_TTL_HOURS,
    ) -> None:
        if default_ttl_hours <= 0:
            raise ValueError("default_ttl_hours must be > 0")
        self.backend = backend
        self.serializer = serializer or RecordSerializer()
        self.clock = clock
        self.default_ttl_hours = default_ttl_hours

    async def save(self, key: KeyLike, data: Any, ttl_hours: Optional[float] = None) -> bool:
        """Wrap `data` in a record expiring after `ttl_hours` and store it.

        Returns False when the ttl is not positive or when encoding or the
        backend write fails.
        """
        ttl = self.default_ttl_hours if ttl_hours is None else ttl_hours
        k = key_name(key)
        if ttl <= 0:
            logger.error("Refusing to save key %s with non-positive ttl %r", k, ttl)
            return False
        now = self.clock()
        try:
            record = StorageRecord(data=data, saved_at=now, expires_at=now + timedelta(hours=ttl))
            payload = self.serializer.encode(record)
            await self.backend.set_item(k, payload)
        except Exception:
            logger.exception("Error saving data for key %s", k)
            return False
        logger.info("Saved data for key %s (ttl=%sh)", k, ttl)
        return True

    async def get_record(self, key: KeyLike) -> Optional[StorageRecord]:
        """Return the live record for `key`, evicting it if expired or corrupt."""
        k = key_name(key)
        try:
            raw = await self.backend.get_item(k)
        except Exception:
            logger.exception("Error retrieving data for key %s", k)
            return None
        if raw is None:
            logger.debug("No data stored for key %s", k)
            return None

        try:
            record = self.serializer.decode(raw)
        except RecordDecodeError as exc:
            logger.warning("Unreadable data for key %s, removing: %s", k, exc)
            await self.remove(k)
            return None

        if record.is_expired(self.clock()):
            logger.info("Data expired for key %s, removing", k)
            await self.remove(k)
            return None

        logger.info("Retrieved data for key %s", k)
        return record

    async def get(self, key: KeyLike) -> Any:
        record = await self.get_record(key)
        return record.data if record is not None else None

    async def remove(self, key: KeyLike) -> None:
        k = key_name(key)
        try:
            await self.backend.remove_item(k)
        except Exception:
            logger.exception("Error removing data for key %s", k)
            return
        logger.info("Removed data for key %s", k)

    async def clear_all(self, keys: Optional[Iterable[KeyLike]] = None) -> None:
        """Remove every well-known key (or `keys`) in one backend call."""
        names = [key_name(k) for k in (keys if keys is not None else WELL_KNOWN_KEYS)]
        try:
            await self.backend.multi_remove(names)
        except Exception:
            logger.exception("Error clearing temporary data")
            return
        logger.info("Cleared all temporary data (%d keys)", len(names))

    async def cleanup_expired(self, keys: Optional[Iterable[KeyLike]] = None) -> list[str]:
        """Read each key so expired or corrupt records get evicted.

        Returns the keys that were present before and gone afterwards.
        """
        evicted: list[str] = []
        for k in (key_name(k) for k in (keys if keys is not None else WELL_KNOWN_KEYS)):
            try:
                present = await self.backend.get_item(k) is not None
            except Exception:
                logger.exception("Error checking key %s during cleanup", k)
                continue
            if present and await self.get_record(k) is None:
                evicted.append(k)
        logger.info("Cleanup completed: %d expired keys removed", len(evicted))
        return evicted

    async def stats(self, keys: Optional[Iterable[KeyLike]] = None) -> Optional[StorageStats]:
        """Report stored size and save time for each present key."""
        stats = StorageStats()
        try:
            for k in (key_name(k) for k in (keys if keys is not None else WELL_KNOWN_KEYS)):
                raw = await self.backend.get_item(k)
                if raw is None:
                    continue
                try:
                    saved_at: Optional[str] = self.serializer.decode(raw).saved_at.isoformat()
                except RecordDecodeError:
                    saved_at = None
                stats.total_keys += 1
                stats.total_size += len(raw)
                stats.key_details[k] = KeyStats(size=len(raw), saved_at=saved_at)
        except Exception:
            logger.exception("Error getting storage stats")
            return None
        return stats
