from .scheduler import (
    AutoSaveScheduler,
    DraftSaveError,
    SaveStatus,
    SchedulerState,
    format_last_save_time,
)
from .targets import DraftTarget, ProgressTarget, SaveTarget

__all__ = [
    "AutoSaveScheduler",
    "DraftSaveError",
    "SaveStatus",
    "SchedulerState",
    "format_last_save_time",
    "DraftTarget",
    "ProgressTarget",
    "SaveTarget",
]
