from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


SCHEMA_VERSION = "1.0"


class StorageRecord(BaseModel):
    """
    Envelope persisted under every key of the draft store.

    Fields
    - data: opaque JSON-serializable payload supplied by the caller.
    - saved_at: UTC time of the write.
    - expires_at: saved_at + ttl; always strictly later than saved_at.
    - schema_version: tag checked on decode so a future layout change can be
      detected instead of misread.
    """

    data: Any = None
    saved_at: datetime
    expires_at: datetime
    schema_version: str = SCHEMA_VERSION

    @field_validator("saved_at", "expires_at")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @model_validator(mode="after")
    def _check_window(self) -> "StorageRecord":
        if self.expires_at <= self.saved_at:
            raise ValueError("expires_at must be later than saved_at")
        return self

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at


class KeyStats(BaseModel):
    size: int
    saved_at: Optional[str] = None


class StorageStats(BaseModel):
    """Size report over the well-known keys, as returned by `TTLStore.stats`."""

    total_keys: int = 0
    total_size: int = 0
    key_details: Dict[str, KeyStats] = Field(default_factory=dict)
