"""
Named form drafts multiplexed into a single storage record.

All drafts live in one map `{form_id: {"data": ..., "last_updated": ...}}`
saved under `StorageKey.FORM_DRAFTS`. Every write rewrites the whole map.
"""
import asyncio
import logging
from typing import Any, Dict, List, Optional

from drafts_lib.storage.keys import StorageKey
from drafts_lib.storage.interfaces import RecordStoreProtocol

logger = logging.getLogger(__name__)

DRAFTS_KEY = StorageKey.FORM_DRAFTS


class DraftStore:
    def __init__(self, store: RecordStoreProtocol, ttl_hours: Optional[float] = None) -> None:
        self.store = store
        self.ttl_hours = ttl_hours
        # Serializes read-modify-write of the map for callers sharing this instance
        self._lock = asyncio.Lock()

    async def load_draft_map(self) -> Dict[str, Dict[str, Any]]:
        """Load the whole draft map, `{}` when absent, expired or malformed."""
        drafts = await self.store.get(DRAFTS_KEY)
        if not isinstance(drafts, dict):
            if drafts is not None:
                logger.warning("Ignoring malformed draft map of type %s", type(drafts).__name__)
            return {}
        return drafts

    async def save_draft(self, form_id: str, data: Any) -> bool:
        """Store `data` as the draft for `form_id`, keeping other forms' drafts."""
        async with self._lock:
            drafts = await self.load_draft_map()
            drafts[form_id] = {
                "data": data,
                "last_updated": self.store.clock().isoformat(),
            }
            ok = await self.store.save(DRAFTS_KEY, drafts, self.ttl_hours)
        if ok:
            logger.info("Saved draft for form %s", form_id)
        else:
            logger.error("Error saving draft for form %s", form_id)
        return ok

    async def get_draft(self, form_id: str) -> Optional[Any]:
        entry = (await self.load_draft_map()).get(form_id)
        if not isinstance(entry, dict):
            return None
        return entry.get("data")

    async def remove_draft(self, form_id: str) -> None:
        """Drop the draft for `form_id`. Unknown ids are ignored."""
        async with self._lock:
            drafts = await self.load_draft_map()
            if form_id not in drafts:
                logger.debug("No draft to remove for form %s", form_id)
                return
            del drafts[form_id]
            if drafts:
                await self.store.save(DRAFTS_KEY, drafts, self.ttl_hours)
            else:
                await self.store.remove(DRAFTS_KEY)
        logger.info("Removed draft for form %s", form_id)

    async def list_drafts(self) -> List[str]:
        return list((await self.load_draft_map()).keys())
