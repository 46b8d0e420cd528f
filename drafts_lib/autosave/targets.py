"""Write targets the auto-save scheduler persists through."""
from __future__ import annotations

from typing import Any, Callable, Optional, Protocol, Tuple

from drafts_lib.drafts.draft_store import DraftStore
from drafts_lib.registration.progress import ProgressStore
from drafts_lib.storage.serializer import content_signature


class SaveTarget(Protocol):
    name: str

    async def write(self, data: Any) -> bool: ...

    async def read(self) -> Optional[Any]: ...

    async def clear(self) -> None: ...

    def signature(self, data: Any) -> str: ...


class DraftTarget:
    """Saves one form's data as an entry of the shared draft map."""

    def __init__(self, drafts: DraftStore, form_id: str) -> None:
        if not form_id:
            raise ValueError("form_id is required")
        self.drafts = drafts
        self.name = form_id

    async def write(self, data: Any) -> bool:
        return await self.drafts.save_draft(self.name, data)

    async def read(self) -> Optional[Any]:
        return await self.drafts.get_draft(self.name)

    async def clear(self) -> None:
        await self.drafts.remove_draft(self.name)

    def signature(self, data: Any) -> str:
        return content_signature(data)


class ProgressTarget:
    """Saves the wizard's form data together with its current step counters.

    `step_source` returns `(current_step, total_steps)` at save time, so a
    step change alone also counts as a content change.
    """

    name = "registration"

    def __init__(self, progress: ProgressStore, step_source: Callable[[], Tuple[int, int]]) -> None:
        self.progress = progress
        self.step_source = step_source

    async def write(self, data: Any) -> bool:
        current_step, total_steps = self.step_source()
        return await self.progress.save_progress(data, current_step, total_steps)

    async def read(self) -> Optional[Any]:
        registration = await self.progress.get_registration_data()
        return registration.form_data if registration is not None else None

    async def clear(self) -> None:
        await self.progress.clear()

    def signature(self, data: Any) -> str:
        current_step, total_steps = self.step_source()
        return content_signature({"form_data": data, "current_step": current_step, "total_steps": total_steps})
