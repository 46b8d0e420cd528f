from datetime import datetime, timedelta, timezone
from typing import Any, Iterable, List, Optional, Tuple

from drafts_lib.storage.memory_backend import MemoryStorage
from drafts_lib.storage.serializer import content_signature


class FakeClock:
    """Callable clock for TTLStore; advance it instead of sleeping."""

    def __init__(self, start: Optional[datetime] = None) -> None:
        self.now = start or datetime(2025, 1, 15, 9, 30, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta: float) -> None:
        self.now = self.now + timedelta(**delta)


class RecordingBackend(MemoryStorage):
    """Memory backend that records every write so tests can count them."""

    def __init__(self) -> None:
        super().__init__()
        self.writes: List[Tuple[str, str]] = []
        self.removed: List[str] = []

    async def set_item(self, key: str, value: str) -> None:
        self.writes.append((key, value))
        await super().set_item(key, value)

    async def remove_item(self, key: str) -> None:
        self.removed.append(key)
        await super().remove_item(key)


class FailingBackend(MemoryStorage):
    """Memory backend whose selected operations raise OSError."""

    def __init__(self, fail_get: bool = False, fail_set: bool = False, fail_remove: bool = False) -> None:
        super().__init__()
        self.fail_get = fail_get
        self.fail_set = fail_set
        self.fail_remove = fail_remove

    async def get_item(self, key: str) -> Optional[str]:
        if self.fail_get:
            raise OSError("disk read failed")
        return await super().get_item(key)

    async def set_item(self, key: str, value: str) -> None:
        if self.fail_set:
            raise OSError("quota exceeded")
        await super().set_item(key, value)

    async def remove_item(self, key: str) -> None:
        if self.fail_remove:
            raise OSError("permission denied")
        await super().remove_item(key)

    async def multi_remove(self, keys: Iterable[str]) -> None:
        if self.fail_remove:
            raise OSError("permission denied")
        await super().multi_remove(keys)


class RecordingNotifier:
    def __init__(self) -> None:
        self.events: List[Tuple[str, str, int]] = []

    def success(self, message: str, duration_ms: int = 3000) -> None:
        self.events.append(("success", message, duration_ms))

    def error(self, message: str, duration_ms: int = 4000) -> None:
        self.events.append(("error", message, duration_ms))

    def info(self, message: str, duration_ms: int = 3000) -> None:
        self.events.append(("info", message, duration_ms))

    def kinds(self) -> List[str]:
        return [kind for kind, _, _ in self.events]


class CountingTarget:
    """SaveTarget double that stores in memory and counts writes."""

    name = "counting"

    def __init__(self, results: Optional[List[Any]] = None) -> None:
        self.saved: Any = None
        self.writes: List[Any] = []
        self.cleared = 0
        # Each entry is True/False to return, or an exception to raise
        self._results = list(results or [])

    async def write(self, data: Any) -> bool:
        self.writes.append(data)
        if self._results:
            result = self._results.pop(0)
            if isinstance(result, BaseException):
                raise result
            if not result:
                return False
        self.saved = data
        return True

    async def read(self) -> Any:
        return self.saved

    async def clear(self) -> None:
        self.cleared += 1
        self.saved = None

    def signature(self, data: Any) -> str:
        return content_signature(data)
