"""Debounced plus periodic auto-save for a mounted form.

Each scheduler owns exactly two timer handles: the debounce task, replaced
on every data change, and the periodic task, cancelled only on teardown.
`state` reports where the scheduler is in the idle -> scheduled -> saving
cycle so tests can check that no timer outlives `stop()`.
"""
from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Optional

from drafts_lib.notifications import (
    LoggingNotifier,
    Notifier,
    RESTORE_FAILED_MESSAGE,
    RESTORE_SUCCESS_MESSAGE,
    SAVE_FAILED_MESSAGE,
    SAVE_SUCCESS_MESSAGE,
)
from drafts_lib.storage.ttl_store import utcnow

from .targets import SaveTarget

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL = 3.0
DEFAULT_DEBOUNCE_DELAY = 1.0


class SchedulerState(str, Enum):
    IDLE = "idle"
    SCHEDULED = "scheduled"
    SAVING = "saving"


class SaveStatus(str, Enum):
    IDLE = "idle"
    SAVING = "saving"
    SAVED = "saved"
    ERROR = "error"


class DraftSaveError(RuntimeError):
    """Passed to `on_error` when the storage layer reports a failed write."""


def format_last_save_time(saved_at: Optional[datetime], now: Optional[datetime] = None) -> str:
    """Human-friendly age of the last save: 'Just now', '5m ago', '2h ago'."""
    if saved_at is None:
        return ""
    now = now or utcnow()
    seconds = (now - saved_at).total_seconds()
    if seconds < 60:
        return "Just now"
    if seconds < 3600:
        return f"{int(seconds // 60)}m ago"
    return f"{int(seconds // 3600)}h ago"


class AutoSaveScheduler:
    """
    Auto-save driver for one form.

    - `update(data)` restarts the debounce timer; when it fires the latest
      data is saved.
    - A periodic timer saves every `interval` seconds regardless of the
      debounce, so continuous typing cannot starve persistence.
    - `save()` skips the write entirely when the content signature matches
      the last successful save.

    Must be started from inside a running event loop. Exceptions raised by
    `on_save`/`on_error` propagate to whoever called `save()`.
    """

    def __init__(
        self,
        target: SaveTarget,
        *,
        interval: float = DEFAULT_INTERVAL,
        debounce_delay: float = DEFAULT_DEBOUNCE_DELAY,
        enabled: bool = True,
        on_save: Optional[Callable[[Any], None]] = None,
        on_error: Optional[Callable[[BaseException], None]] = None,
        notifier: Optional[Notifier] = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        if interval < 0:
            raise ValueError("interval must be >= 0")
        if debounce_delay < 0:
            raise ValueError("debounce_delay must be >= 0")
        self.target = target
        self.interval = interval
        self.debounce_delay = debounce_delay
        self.enabled = enabled
        self.on_save = on_save
        self.on_error = on_error
        self.notifier: Notifier = notifier or LoggingNotifier()
        self.clock = clock

        self.state = SchedulerState.IDLE
        self.status = SaveStatus.IDLE
        self.last_saved_at: Optional[datetime] = None
        self._data: Any = None
        self._last_signature: Optional[str] = None
        self._started = False
        self._debounce_task: Optional[asyncio.Task] = None
        self._interval_task: Optional[asyncio.Task] = None
        self._save_lock = asyncio.Lock()

    # -------- Lifecycle --------
    def start(self, initial_data: Any = None) -> None:
        """Mount: remember the initial data (without saving it) and arm the periodic timer."""
        if initial_data is not None:
            self._data = initial_data
        self._started = True
        self._arm_interval()

    def stop(self) -> None:
        """Unmount: cancel both timers. An in-flight write still completes."""
        self._started = False
        self._cancel_debounce()
        if self._interval_task is not None:
            self._interval_task.cancel()
            self._interval_task = None
        if self.state is SchedulerState.SCHEDULED:
            self.state = SchedulerState.IDLE

    def enable(self) -> None:
        self.enabled = True
        if self._started:
            self._arm_interval()

    def disable(self) -> None:
        self.enabled = False
        self._cancel_debounce()
        if self._interval_task is not None:
            self._interval_task.cancel()
            self._interval_task = None

    async def __aenter__(self) -> "AutoSaveScheduler":
        self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.stop()

    @property
    def data(self) -> Any:
        return self._data

    @property
    def has_pending_save(self) -> bool:
        return self._debounce_task is not None and not self._debounce_task.done()

    @property
    def is_running(self) -> bool:
        return self._interval_task is not None and not self._interval_task.done()

    @property
    def last_save_label(self) -> str:
        return format_last_save_time(self.last_saved_at, self.clock())

    # -------- Timers --------
    def update(self, data: Any) -> None:
        """Record a form-data change and restart the debounce timer."""
        self._data = data
        if not self.enabled or not self._started:
            return
        self._cancel_debounce()
        self._debounce_task = asyncio.get_running_loop().create_task(self._fire_debounce())
        if self.state is SchedulerState.IDLE:
            self.state = SchedulerState.SCHEDULED

    def _cancel_debounce(self) -> None:
        if self._debounce_task is not None:
            self._debounce_task.cancel()
            self._debounce_task = None

    async def _fire_debounce(self) -> None:
        await asyncio.sleep(self.debounce_delay)
        # Detach before saving so a later cancel never interrupts the write
        self._debounce_task = None
        await self.save()

    def _arm_interval(self) -> None:
        if not self.enabled or not self.interval or self.is_running:
            return
        self._interval_task = asyncio.get_running_loop().create_task(self._run_interval())

    async def _run_interval(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            try:
                await asyncio.shield(self.save())
            except asyncio.CancelledError:
                raise
            except Exception:
                # Keep ticking like a repeating timer would
                logger.exception("Periodic auto-save for %s raised", self.target.name)

    def _settle_state(self) -> None:
        self.state = SchedulerState.SCHEDULED if self.has_pending_save else SchedulerState.IDLE

    # -------- Operations --------
    async def save(self, force_immediate: bool = False) -> bool:
        """Persist the current data unless it is unchanged since the last save.

        Returns True when a write happened and succeeded.
        """
        if not self.enabled or self._data is None:
            return False

        error: Optional[BaseException] = None
        async with self._save_lock:
            data = self._data
            signature = self.target.signature(data)
            if signature == self._last_signature:
                logger.debug("Skipping save for %s: content unchanged", self.target.name)
                self._settle_state()
                return False

            self.state = SchedulerState.SAVING
            self.status = SaveStatus.SAVING
            try:
                if await self.target.write(data):
                    self._last_signature = signature
                else:
                    error = DraftSaveError(f"Storage rejected save for form {self.target.name}")
            except Exception as exc:
                logger.exception("Error saving form data for %s", self.target.name)
                error = exc
            finally:
                self._settle_state()

        if error is not None:
            self.status = SaveStatus.ERROR
            self.notifier.error(SAVE_FAILED_MESSAGE, 3000)
            if self.on_error is not None:
                self.on_error(error)
            return False

        self.status = SaveStatus.SAVED
        self.last_saved_at = self.clock()
        logger.info("Auto-saved data for form %s", self.target.name)
        if force_immediate:
            self.notifier.success(SAVE_SUCCESS_MESSAGE, 2000)
        if self.on_save is not None:
            self.on_save(data)
        return True

    def mark_saved(self, data: Any) -> None:
        """Treat `data` as already persisted so unchanged content is not written again.

        For callers that write through the target's store directly.
        """
        self._last_signature = self.target.signature(data)

    async def force_save(self) -> bool:
        """Cancel the pending debounce and save now, e.g. before changing step."""
        self._cancel_debounce()
        return await self.save(force_immediate=True)

    async def load_saved_data(self) -> Optional[Any]:
        """Read back what was saved; None when nothing is saved or it expired."""
        try:
            data = await self.target.read()
        except Exception as exc:
            logger.exception("Error loading saved data for %s", self.target.name)
            self.notifier.error(RESTORE_FAILED_MESSAGE, 3000)
            if self.on_error is not None:
                self.on_error(exc)
            return None
        if data is not None:
            logger.info("Loaded saved data for form %s", self.target.name)
            self.notifier.info(RESTORE_SUCCESS_MESSAGE, 2500)
        return data

    async def clear_saved_data(self) -> None:
        """Remove the stored draft and forget the last signature."""
        try:
            await self.target.clear()
        except Exception:
            logger.exception("Error clearing saved data for %s", self.target.name)
            return
        self._last_signature = None
        logger.info("Cleared saved data for form %s", self.target.name)
