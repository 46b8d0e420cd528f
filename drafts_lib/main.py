"""Service composition for the draft store.

`create_services(config)` builds the backend, the TTL store and every layer
on top of it from one `DraftsConfig`, so the wizard, the CLI and tests all
wire things the same way. Nothing is created at import time.

    from drafts_lib.main import create_services
    services = create_services(DraftsConfig(storage_backend="memory"))
"""
from dataclasses import dataclass
from typing import Optional

from drafts_lib.autosave.scheduler import AutoSaveScheduler
from drafts_lib.autosave.targets import DraftTarget
from drafts_lib.config import DraftsConfig
from drafts_lib.drafts.draft_store import DraftStore
from drafts_lib.notifications import LoggingNotifier, Notifier
from drafts_lib.recovery.activity import ActivityMarker
from drafts_lib.recovery.reconciler import RecoveryReconciler
from drafts_lib.registration.progress import ProgressStore
from drafts_lib.registration.wizard import RegistrationWizard
from drafts_lib.storage import KeyValueBackend, TTLStore, create_backend


@dataclass
class DraftServices:
    config: DraftsConfig
    backend: KeyValueBackend
    store: TTLStore
    drafts: DraftStore
    progress: ProgressStore
    activity: ActivityMarker
    reconciler: RecoveryReconciler
    notifier: Notifier

    def form_autosave(self, form_id: str, **options) -> AutoSaveScheduler:
        """Scheduler saving one named form into the shared draft map."""
        options.setdefault("interval", self.config.autosave_interval)
        options.setdefault("debounce_delay", self.config.debounce_delay)
        options.setdefault("notifier", self.notifier)
        return AutoSaveScheduler(DraftTarget(self.drafts, form_id), **options)

    def registration_wizard(self) -> RegistrationWizard:
        wizard = RegistrationWizard(
            self.progress,
            self.reconciler,
            self.activity,
            total_steps=self.config.total_steps,
            interval=self.config.autosave_interval,
            debounce_delay=self.config.debounce_delay,
        )
        wizard.scheduler.notifier = self.notifier
        return wizard


def create_services(
    config: DraftsConfig,
    *,
    backend: Optional[KeyValueBackend] = None,
    notifier: Optional[Notifier] = None,
) -> DraftServices:
    """Compose the draft store layers. `backend` overrides the configured one."""
    backend = backend or create_backend(config.storage_backend, config.data_dir)
    store = TTLStore(backend, default_ttl_hours=config.ttl_hours)
    drafts = DraftStore(store, ttl_hours=config.ttl_hours)
    progress = ProgressStore(store, ttl_hours=config.ttl_hours)
    activity = ActivityMarker(store, ttl_hours=config.activity_ttl_hours)
    reconciler = RecoveryReconciler(store, progress, drafts, activity)
    return DraftServices(
        config=config,
        backend=backend,
        store=store,
        drafts=drafts,
        progress=progress,
        activity=activity,
        reconciler=reconciler,
        notifier=notifier or LoggingNotifier(),
    )
