"""Registration wizard progress persisted across two records.

`REGISTRATION_DATA` holds the full form payload plus step counters.
`REGISTRATION_PROGRESS` holds only the counters and the percentage so a
progress indicator can read it without loading the whole payload.
"""
from __future__ import annotations

import logging
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, ValidationError, model_validator

from drafts_lib.storage.keys import StorageKey
from drafts_lib.storage.interfaces import RecordStoreProtocol

logger = logging.getLogger(__name__)


def progress_percentage(current_step: int, total_steps: int) -> int:
    """Percent complete rounded half-up, so step 3 of 8 is 38 and 1 of 8 is 13."""
    ratio = Decimal(current_step) / Decimal(total_steps) * 100
    return int(ratio.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def check_step_bounds(current_step: int, total_steps: int) -> None:
    if total_steps < 1:
        raise ValueError(f"total_steps must be >= 1, got {total_steps}")
    if not 1 <= current_step <= total_steps:
        raise ValueError(f"current_step must be within 1..{total_steps}, got {current_step}")


class ProgressSnapshot(BaseModel):
    current_step: int
    total_steps: int
    percentage: int

    @classmethod
    def of(cls, current_step: int, total_steps: int) -> "ProgressSnapshot":
        return cls(
            current_step=current_step,
            total_steps=total_steps,
            percentage=progress_percentage(current_step, total_steps),
        )


class RegistrationProgress(BaseModel):
    """
    Full wizard state persisted under `REGISTRATION_DATA`.

    Invariant: 1 <= current_step <= total_steps. A stored record violating it
    fails validation and is treated as absent.
    """

    form_data: Dict[str, Any] = Field(default_factory=dict)
    current_step: int
    total_steps: int
    last_updated: datetime

    @model_validator(mode="after")
    def _check_bounds(self) -> "RegistrationProgress":
        check_step_bounds(self.current_step, self.total_steps)
        return self

    def snapshot(self) -> ProgressSnapshot:
        return ProgressSnapshot.of(self.current_step, self.total_steps)


class ProgressStore:
    def __init__(self, store: RecordStoreProtocol, ttl_hours: Optional[float] = None) -> None:
        self.store = store
        self.ttl_hours = ttl_hours

    async def save_progress(self, form_data: Dict[str, Any], current_step: int, total_steps: int) -> bool:
        """Persist the full record then the projection.

        The two writes are sequential, not atomic: a crash between them
        leaves a fresh full record next to a stale projection, which readers
        tolerate. Returns True only if both writes succeeded.
        """
        check_step_bounds(current_step, total_steps)
        progress = RegistrationProgress(
            form_data=form_data,
            current_step=current_step,
            total_steps=total_steps,
            last_updated=self.store.clock(),
        )
        saved_data = await self.store.save(
            StorageKey.REGISTRATION_DATA, progress.model_dump(mode="json"), self.ttl_hours
        )
        saved_progress = await self.store.save(
            StorageKey.REGISTRATION_PROGRESS, progress.snapshot().model_dump(mode="json"), self.ttl_hours
        )
        return saved_data and saved_progress

    async def get_registration_data(self) -> Optional[RegistrationProgress]:
        raw = await self.store.get(StorageKey.REGISTRATION_DATA)
        if raw is None:
            return None
        try:
            return RegistrationProgress.model_validate(raw)
        except ValidationError as exc:
            logger.warning("Discarding invalid registration data: %s", exc)
            await self.store.remove(StorageKey.REGISTRATION_DATA)
            return None

    async def get_progress(self) -> Optional[ProgressSnapshot]:
        raw = await self.store.get(StorageKey.REGISTRATION_PROGRESS)
        if raw is None:
            return None
        try:
            snapshot = ProgressSnapshot.model_validate(raw)
            check_step_bounds(snapshot.current_step, snapshot.total_steps)
        except (ValidationError, ValueError) as exc:
            logger.warning("Discarding invalid registration progress: %s", exc)
            await self.store.remove(StorageKey.REGISTRATION_PROGRESS)
            return None
        return snapshot

    async def clear(self) -> None:
        await self.store.clear_all([StorageKey.REGISTRATION_DATA, StorageKey.REGISTRATION_PROGRESS])
