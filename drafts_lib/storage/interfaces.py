from datetime import datetime
from typing import Protocol, Any, Callable, Iterable, Optional, runtime_checkable

from .keys import KeyLike


@runtime_checkable
class KeyValueStorageProtocol(Protocol):
    """Backend protocol mirroring `drafts_lib.storage.base.KeyValueBackend`.

    Implementations should follow the semantics documented on the abstract
    base class (None for missing keys, no error on removing absent keys).
    """

    async def get_item(self, key: str) -> Optional[str]: ...

    async def set_item(self, key: str, value: str) -> None: ...

    async def remove_item(self, key: str) -> None: ...

    async def multi_remove(self, keys: Iterable[str]) -> None: ...


@runtime_checkable
class RecordStoreProtocol(Protocol):
    """Capability the draft, progress and recovery layers need from a TTL store.

    `drafts_lib.storage.ttl_store.TTLStore` is the production implementation.
    `clock` is shared so timestamps written inside payloads agree with the
    record envelope.
    """

    clock: Callable[[], datetime]

    async def save(self, key: KeyLike, data: Any, ttl_hours: Optional[float] = None) -> bool: ...

    async def get(self, key: KeyLike) -> Any: ...

    async def remove(self, key: KeyLike) -> None: ...

    async def clear_all(self, keys: Optional[Iterable[KeyLike]] = None) -> None: ...
