"""Vendor registration wizard state with durable step transitions.

The wizard keeps the in-memory form data and current step, mirrors every
change into an `AutoSaveScheduler` backed by the progress record, and
forces a save before each step transition so navigating away never loses
what was typed on the previous screen.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from drafts_lib.autosave.scheduler import AutoSaveScheduler
from drafts_lib.autosave.targets import ProgressTarget
from drafts_lib.recovery.activity import ActivityMarker
from drafts_lib.recovery.reconciler import RecoveryReconciler

from .progress import ProgressSnapshot, ProgressStore

logger = logging.getLogger(__name__)

REGISTRATION_STEPS = (
    "phone_email",
    "otp_verification",
    "profile_setup",
    "restaurant_details",
    "gst_fssai_details",
    "location_details",
    "confirmation",
    "success",
)


class RegistrationWizard:
    """
    Step controller for the multi-step vendor registration.

    Invariant: 1 <= current_step <= total_steps at all times. Navigation
    requests outside that range are clamped. Reaching the last step means
    the registration was submitted, so all draft state is cleared.
    """

    def __init__(
        self,
        progress: ProgressStore,
        reconciler: RecoveryReconciler,
        activity: ActivityMarker,
        *,
        total_steps: int = len(REGISTRATION_STEPS),
        interval: float = 3.0,
        debounce_delay: float = 1.0,
        scheduler: Optional[AutoSaveScheduler] = None,
    ) -> None:
        if total_steps < 1:
            raise ValueError("total_steps must be >= 1")
        self.progress = progress
        self.reconciler = reconciler
        self.activity = activity
        self.total_steps = total_steps
        self.current_step = 1
        self.form_data: Dict[str, Any] = {}
        self.scheduler = scheduler or AutoSaveScheduler(
            ProgressTarget(progress, self._steps),
            interval=interval,
            debounce_delay=debounce_delay,
        )

    def _steps(self) -> tuple[int, int]:
        return self.current_step, self.total_steps

    @property
    def step_name(self) -> str:
        if self.total_steps == len(REGISTRATION_STEPS):
            return REGISTRATION_STEPS[self.current_step - 1]
        return f"step_{self.current_step}"

    @property
    def is_complete(self) -> bool:
        return self.current_step == self.total_steps

    def snapshot(self) -> ProgressSnapshot:
        return ProgressSnapshot.of(self.current_step, self.total_steps)

    # -------- Mount / unmount --------
    async def mount(self) -> None:
        self.scheduler.start(self.form_data)

    def unmount(self) -> None:
        self.scheduler.stop()

    async def __aenter__(self) -> "RegistrationWizard":
        await self.mount()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.unmount()

    # -------- Recovery --------
    async def resume(self) -> bool:
        """Rehydrate form data and step from a previous session if available."""
        recovered = await self.reconciler.recover()
        if recovered is None:
            return False
        self.form_data = dict(recovered.form_data)
        self.current_step = min(max(recovered.current_step, 1), self.total_steps)
        self.scheduler.update(self.form_data)
        self.scheduler.mark_saved(self.form_data)
        logger.info("Resumed registration at step %d of %d", self.current_step, self.total_steps)
        return True

    async def discard(self) -> None:
        """Throw away the saved session and start again from step 1.

        Nothing is written again until the form is edited, so the discarded
        session stays gone.
        """
        self.scheduler.disable()
        await self.reconciler.discard()
        self.form_data = {}
        self.current_step = 1
        self.scheduler.update(self.form_data)
        self.scheduler.mark_saved(self.form_data)
        self.scheduler.enable()
        logger.info("Discarded saved registration progress")

    # -------- Editing --------
    def update_fields(self, **fields: Any) -> None:
        self.form_data = {**self.form_data, **fields}
        self.scheduler.update(self.form_data)

    # -------- Navigation --------
    async def next_step(self) -> int:
        return await self.go_to(self.current_step + 1)

    async def previous_step(self) -> int:
        return await self.go_to(self.current_step - 1)

    async def go_to(self, step: int) -> int:
        """Move to `step` (clamped), persisting before and after the move."""
        target = min(max(step, 1), self.total_steps)
        if target == self.current_step:
            return self.current_step

        await self.scheduler.force_save()
        self.current_step = target
        data = self.form_data
        if await self.progress.save_progress(data, self.current_step, self.total_steps):
            self.scheduler.mark_saved(data)
        await self.activity.touch()
        logger.info("Registration moved to step %d (%s)", self.current_step, self.step_name)

        if self.is_complete:
            await self.complete()
        return self.current_step

    async def complete(self) -> None:
        """Registration submitted: drop every piece of draft state."""
        self.scheduler.disable()
        await self.reconciler.discard()
        logger.info("Registration complete, cleared saved progress")
