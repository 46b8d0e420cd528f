"""Recovery decision over the independent save streams.

The wizard progress record, the draft map and the last-activity marker each
expire on their own schedule. `RecoveryReconciler.reconcile` reads all three
and answers one question for the recovery prompt: is there anything worth
offering back to the user, and what is it.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from drafts_lib.drafts.draft_store import DraftStore
from drafts_lib.registration.progress import ProgressSnapshot, ProgressStore
from drafts_lib.storage.interfaces import RecordStoreProtocol

from .activity import ActivityMarker

logger = logging.getLogger(__name__)

LAST_ACTIVITY_FORMAT = "%Y-%m-%d %H:%M:%S"


class RecoverySummary(BaseModel):
    has_registration_data: bool = False
    registration_progress: Optional[ProgressSnapshot] = None
    form_drafts: List[str] = Field(default_factory=list)
    last_activity: Optional[str] = None
    can_recover: bool = False


class RecoveredState(BaseModel):
    form_data: Dict[str, Any] = Field(default_factory=dict)
    current_step: int
    total_steps: int


def format_last_activity(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    return value.astimezone().strftime(LAST_ACTIVITY_FORMAT)


class RecoveryReconciler:
    """Read-only aggregation plus the recover/discard actions.

    Holds no persisted state of its own; repeated `reconcile` calls without
    intervening writes return the same summary unless a TTL runs out between
    them.
    """

    def __init__(
        self,
        store: RecordStoreProtocol,
        progress: ProgressStore,
        drafts: DraftStore,
        activity: ActivityMarker,
    ) -> None:
        self.store = store
        self.progress = progress
        self.drafts = drafts
        self.activity = activity

    async def reconcile(self) -> RecoverySummary:
        registration = await self.progress.get_registration_data()
        form_drafts = await self.drafts.list_drafts()
        last_seen = await self.activity.last_seen()

        summary = RecoverySummary(
            has_registration_data=registration is not None,
            registration_progress=registration.snapshot() if registration is not None else None,
            form_drafts=form_drafts,
            last_activity=format_last_activity(last_seen),
            can_recover=registration is not None or len(form_drafts) > 0,
        )
        logger.debug("Recovery summary: %s", summary)
        return summary

    async def recover(self) -> Optional[RecoveredState]:
        """Return the saved wizard state without deleting it."""
        registration = await self.progress.get_registration_data()
        if registration is None:
            logger.info("Nothing to recover")
            return None
        logger.info(
            "Recovering registration at step %d of %d",
            registration.current_step,
            registration.total_steps,
        )
        return RecoveredState(
            form_data=registration.form_data,
            current_step=registration.current_step,
            total_steps=registration.total_steps,
        )

    async def discard(self) -> None:
        """Start fresh: drop progress, projection, drafts and activity marker."""
        await self.store.clear_all()
