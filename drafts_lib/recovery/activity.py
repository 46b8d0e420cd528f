from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from drafts_lib.storage.keys import StorageKey
from drafts_lib.storage.interfaces import RecordStoreProtocol

logger = logging.getLogger(__name__)

ACTIVITY_TTL_HOURS = 1.0


class ActivityMarker:
    """Short-lived "user was here" timestamp stored under `LAST_ACTIVITY`."""

    def __init__(self, store: RecordStoreProtocol, ttl_hours: float = ACTIVITY_TTL_HOURS) -> None:
        self.store = store
        self.ttl_hours = ttl_hours

    async def touch(self) -> bool:
        return await self.store.save(StorageKey.LAST_ACTIVITY, self.store.clock().isoformat(), self.ttl_hours)

    async def last_seen(self) -> Optional[datetime]:
        raw = await self.store.get(StorageKey.LAST_ACTIVITY)
        if not isinstance(raw, str):
            return None
        try:
            return datetime.fromisoformat(raw)
        except ValueError:
            logger.warning("Ignoring malformed last activity value %r", raw)
            return None
