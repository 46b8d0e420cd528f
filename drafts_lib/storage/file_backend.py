"""File-backed key-value backend.

This backend stores each key as a UTF-8 text file `<data_dir>/<key>.json`.
It provides atomic writes by writing to a temporary file then renaming.
Blocking file I/O runs in a worker thread so the event loop driving the
auto-save timers is never stalled.
"""
from __future__ import annotations
import asyncio
import logging
import os
from pathlib import Path
from typing import Iterable, Optional

from .base import KeyValueBackend

logger = logging.getLogger(__name__)


class FileStorageBackend(KeyValueBackend):
    def __init__(self, data_dir: str | Path = "./data/drafts") -> None:
        self.data_dir = Path(data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def _path_for(self, key: str) -> Path:
        safe_key = key.replace("/", "_").replace("\\", "_")
        return self.data_dir / f"{safe_key}.json"

    def _read(self, key: str) -> Optional[str]:
        path = self._path_for(key)
        if not path.exists():
            return None
        data = path.read_text(encoding="utf-8")
        logger.debug("FileStorageBackend loaded %s (%d chars)", path, len(data))
        return data

    def _write(self, key: str, value: str) -> None:
        path = self._path_for(key)
        tmp = path.with_suffix(path.suffix + ".tmp")
        with open(tmp, "w", encoding="utf-8") as f:
            f.write(value)
            f.flush()
            os.fsync(f.fileno())
        tmp.replace(path)

    def _unlink(self, key: str) -> None:
        path = self._path_for(key)
        if path.exists():
            path.unlink()

    async def get_item(self, key: str) -> Optional[str]:
        return await asyncio.to_thread(self._read, key)

    async def set_item(self, key: str, value: str) -> None:
        await asyncio.to_thread(self._write, key, value)

    async def remove_item(self, key: str) -> None:
        await asyncio.to_thread(self._unlink, key)

    async def multi_remove(self, keys: Iterable[str]) -> None:
        keys = list(keys)

        def _unlink_all() -> None:
            for key in keys:
                self._unlink(key)

        await asyncio.to_thread(_unlink_all)

    def list_keys(self) -> Iterable[str]:
        for p in self.data_dir.iterdir():
            if p.is_file() and p.suffix == ".json":
                yield p.stem
