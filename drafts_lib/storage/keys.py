"""Well-known storage keys owned by the draft store.

The string values are persisted on user devices. Changing one orphans every
in-progress draft saved under the old name, so they must stay stable.
"""
from enum import Enum
from typing import Union


class StorageKey(str, Enum):
    REGISTRATION_DATA = "temp_registration_data"
    REGISTRATION_PROGRESS = "temp_registration_progress"
    FORM_DRAFTS = "temp_form_drafts"
    LAST_ACTIVITY = "temp_last_activity"


WELL_KNOWN_KEYS: tuple[str, ...] = tuple(k.value for k in StorageKey)

KeyLike = Union[StorageKey, str]


def key_name(key: KeyLike) -> str:
    """Return the raw backend key for `key`.

    `str(StorageKey.X)` yields the member name on recent Pythons, so enum
    members are always unwrapped through `.value`.
    """
    if isinstance(key, StorageKey):
        return key.value
    return str(key)
