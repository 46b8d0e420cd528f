import asyncio

import pytest

from drafts_lib.config import DraftsConfig
from drafts_lib.main import create_services
from drafts_lib.registration.wizard import REGISTRATION_STEPS, RegistrationWizard
from drafts_lib.storage import WELL_KNOWN_KEYS
from drafts_lib.storage.memory_backend import MemoryStorage
from tests.helpers import RecordingBackend


def _services(backend=None):
    config = DraftsConfig(storage_backend="memory", autosave_interval=0, debounce_delay=0.01)
    return create_services(config, backend=backend or MemoryStorage())


def test_step_transitions_persist_progress():
    services = _services()

    async def scenario():
        async with services.registration_wizard() as wizard:
            wizard.update_fields(phone="+91 98450 00000", email="owner@dosacorner.in")
            await wizard.next_step()
            await wizard.next_step()
            wizard.update_fields(name="Dosa Corner")
        return wizard, await services.reconciler.reconcile()

    wizard, summary = asyncio.run(scenario())
    assert wizard.current_step == 3
    assert wizard.step_name == "profile_setup"
    assert summary.registration_progress.model_dump() == {"current_step": 3, "total_steps": 8, "percentage": 38}
    assert summary.last_activity is not None


def test_navigation_is_clamped_to_valid_steps():
    services = _services()

    async def scenario():
        wizard = services.registration_wizard()
        await wizard.mount()
        first = await wizard.previous_step()
        jumped = await wizard.go_to(42)
        wizard.unmount()
        return first, jumped

    first, jumped = asyncio.run(scenario())
    assert first == 1
    assert jumped == 8


def test_reaching_the_final_step_clears_saved_state():
    backend = MemoryStorage()
    services = _services(backend)

    async def scenario():
        async with services.registration_wizard() as wizard:
            wizard.update_fields(name="Dosa Corner")
            while not wizard.is_complete:
                await wizard.next_step()
        return await services.reconciler.reconcile()

    summary = asyncio.run(scenario())
    assert summary.can_recover is False
    for key in WELL_KNOWN_KEYS:
        assert key not in backend


def test_resume_rehydrates_a_new_wizard():
    backend = MemoryStorage()

    async def first_session():
        async with _services(backend).registration_wizard() as wizard:
            wizard.update_fields(name="Dosa Corner", fssai="12345678901234")
            await wizard.go_to(5)

    async def second_session():
        wizard = _services(backend).registration_wizard()
        resumed = await wizard.resume()
        return resumed, wizard

    asyncio.run(first_session())
    resumed, wizard = asyncio.run(second_session())
    assert resumed is True
    assert wizard.current_step == 5
    assert wizard.step_name == "gst_fssai_details"
    assert wizard.form_data == {"name": "Dosa Corner", "fssai": "12345678901234"}


def test_resume_with_nothing_saved():
    wizard = _services().registration_wizard()
    assert asyncio.run(wizard.resume()) is False
    assert wizard.current_step == 1


def test_discard_resets_wizard_and_storage():
    backend = MemoryStorage()
    services = _services(backend)

    async def scenario():
        async with services.registration_wizard() as wizard:
            wizard.update_fields(name="Dosa Corner")
            await wizard.go_to(4)
            await wizard.discard()
            return wizard, await services.reconciler.reconcile()

    wizard, summary = asyncio.run(scenario())
    assert wizard.current_step == 1
    assert wizard.form_data == {}
    assert summary.can_recover is False
    assert backend.keys() == []


def test_debounced_edits_are_saved_with_current_step():
    services = _services()

    async def scenario():
        async with services.registration_wizard() as wizard:
            await wizard.go_to(2)
            wizard.update_fields(otp_verified=True)
            await asyncio.sleep(0.1)
        return await services.progress.get_registration_data()

    registration = asyncio.run(scenario())
    assert registration.current_step == 2
    assert registration.form_data == {"otp_verified": True}


def test_custom_step_count():
    services = create_services(DraftsConfig(storage_backend="memory", total_steps=3, autosave_interval=0))
    wizard = services.registration_wizard()
    assert wizard.total_steps == 3
    assert wizard.step_name == "step_1"
    assert len(REGISTRATION_STEPS) == 8


def test_rejects_empty_wizard():
    services = _services()
    with pytest.raises(ValueError):
        RegistrationWizard(services.progress, services.reconciler, services.activity, total_steps=0)


def _ticking_services(backend):
    config = DraftsConfig(storage_backend="memory", autosave_interval=0.02, debounce_delay=0.01)
    return create_services(config, backend=backend)


def test_discard_stays_discarded_while_timers_run():
    backend = MemoryStorage()
    services = _ticking_services(backend)

    async def scenario():
        async with services.registration_wizard() as wizard:
            wizard.update_fields(name="Dosa Corner")
            await wizard.go_to(4)
            await wizard.discard()
            assert wizard.scheduler.is_running
            await asyncio.sleep(0.15)
            return await services.reconciler.reconcile()

    summary = asyncio.run(scenario())
    assert summary.can_recover is False
    assert summary.has_registration_data is False
    assert backend.keys() == []


def test_edits_after_discard_are_saved_again():
    services = _ticking_services(MemoryStorage())

    async def scenario():
        async with services.registration_wizard() as wizard:
            wizard.update_fields(name="Dosa Corner")
            await wizard.go_to(4)
            await wizard.discard()
            wizard.update_fields(phone="+91 98450 00000")
            await asyncio.sleep(0.1)
        return await services.progress.get_registration_data()

    registration = asyncio.run(scenario())
    assert registration.current_step == 1
    assert registration.form_data == {"phone": "+91 98450 00000"}


def test_step_change_without_edits_is_not_rewritten():
    backend = RecordingBackend()
    services = _ticking_services(backend)

    async def scenario():
        async with services.registration_wizard() as wizard:
            wizard.update_fields(name="Dosa Corner")
            await wizard.go_to(3)
            backend.writes.clear()
            await asyncio.sleep(0.15)

    asyncio.run(scenario())
    assert backend.writes == []


def test_resumed_state_is_not_rewritten():
    backend = RecordingBackend()

    async def first_session():
        async with _ticking_services(backend).registration_wizard() as wizard:
            wizard.update_fields(name="Dosa Corner")
            await wizard.go_to(5)

    async def second_session():
        wizard = _ticking_services(backend).registration_wizard()
        await wizard.resume()
        backend.writes.clear()
        async with wizard:
            await asyncio.sleep(0.15)

    asyncio.run(first_session())
    asyncio.run(second_session())
    assert backend.writes == []
