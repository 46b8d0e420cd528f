from typing import Any, Protocol
import json

from pydantic import ValidationError

from .models import SCHEMA_VERSION, StorageRecord


class RecordDecodeError(ValueError):
    """Raised when a stored string cannot be turned back into a StorageRecord."""


class Serializer(Protocol):
    """Encode/decode StorageRecords for backends that store text.

    Implementations should be symmetric: `encode` -> str, `decode` <- str.
    This is the only place JSON is produced or parsed for stored records.
    """

    def encode(self, record: StorageRecord) -> str: ...

    def decode(self, raw: str) -> StorageRecord: ...


class RecordSerializer:
    """Default serializer using JSON with a pinned schema version.

    Records written with a different `schema_version` are rejected on decode
    so callers treat them as absent instead of misinterpreting them.
    """

    def __init__(self, schema_version: str = SCHEMA_VERSION) -> None:
        self.schema_version = schema_version

    def encode(self, record: StorageRecord) -> str:
        if record.schema_version != self.schema_version:
            record = record.model_copy(update={"schema_version": self.schema_version})
        return record.model_dump_json()

    def decode(self, raw: str) -> StorageRecord:
        try:
            record = StorageRecord.model_validate_json(raw)
        except ValidationError as exc:
            raise RecordDecodeError(f"Failed to parse stored record: {exc}") from exc
        if record.schema_version != self.schema_version:
            raise RecordDecodeError(
                f"Stored record schema version {record.schema_version!r} differs "
                f"from current {self.schema_version!r}"
            )
        return record


def content_signature(value: Any) -> str:
    """Stable serialization of `value` used to detect unchanged content.

    Deterministic JSON: sorted keys, no extra whitespace. Two values that
    compare equal as JSON documents always produce the same signature.
    """
    return json.dumps(value, sort_keys=True, separators=(",", ":"), default=str)
