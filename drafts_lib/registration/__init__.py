"""Vendor registration wizard persistence.

`RegistrationWizard` lives in `drafts_lib.registration.wizard`; it is not
re-exported here because it depends on the recovery package, which in turn
imports the progress models from this one.
"""

from .progress import ProgressSnapshot, ProgressStore, RegistrationProgress, progress_percentage

__all__ = ["ProgressSnapshot", "ProgressStore", "RegistrationProgress", "progress_percentage"]
