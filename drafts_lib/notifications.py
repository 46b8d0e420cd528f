"""Notification sink for auto-save feedback.

The draft store only emits signals; whatever renders toasts implements
`Notifier`. `LoggingNotifier` is the default when no UI is attached.
"""
from __future__ import annotations

import logging
from typing import Protocol

logger = logging.getLogger(__name__)

SAVE_SUCCESS_MESSAGE = "Data saved successfully"
SAVE_FAILED_MESSAGE = "Save failed, please try again"
RESTORE_SUCCESS_MESSAGE = "Previous data restored successfully"
RESTORE_FAILED_MESSAGE = "Data recovery failed"


class Notifier(Protocol):
    def success(self, message: str, duration_ms: int = 3000) -> None: ...

    def error(self, message: str, duration_ms: int = 4000) -> None: ...

    def info(self, message: str, duration_ms: int = 3000) -> None: ...


class LoggingNotifier:
    def success(self, message: str, duration_ms: int = 3000) -> None:
        logger.info("[toast:success %dms] %s", duration_ms, message)

    def error(self, message: str, duration_ms: int = 4000) -> None:
        logger.warning("[toast:error %dms] %s", duration_ms, message)

    def info(self, message: str, duration_ms: int = 3000) -> None:
        logger.info("[toast:info %dms] %s", duration_ms, message)
