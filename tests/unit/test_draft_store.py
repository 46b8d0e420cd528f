import asyncio

from drafts_lib.drafts import DRAFTS_KEY, DraftStore
from drafts_lib.storage import StorageKey, TTLStore
from drafts_lib.storage.interfaces import RecordStoreProtocol
from drafts_lib.storage.memory_backend import MemoryStorage
from tests.helpers import FailingBackend


def _drafts(clock, backend=None):
    return DraftStore(TTLStore(backend or MemoryStorage(), clock=clock))


def test_drafts_for_different_forms_do_not_clobber(clock):
    drafts = _drafts(clock)

    async def scenario():
        await drafts.save_draft("A", {"x": 1})
        await drafts.save_draft("B", {"y": 2})
        return await drafts.get_draft("A"), await drafts.get_draft("B")

    assert asyncio.run(scenario()) == ({"x": 1}, {"y": 2})


def test_save_overwrites_existing_entry(clock):
    drafts = _drafts(clock)

    async def scenario():
        await drafts.save_draft("A", {"x": 1})
        clock.advance(minutes=5)
        await drafts.save_draft("A", {"x": 2})
        return await drafts.get_draft("A"), await drafts.load_draft_map()

    value, draft_map = asyncio.run(scenario())
    assert value == {"x": 2}
    assert draft_map["A"]["last_updated"] == clock.now.isoformat()


def test_missing_draft_is_none(clock):
    assert asyncio.run(_drafts(clock).get_draft("nope")) is None


def test_remove_draft_keeps_the_others(clock):
    drafts = _drafts(clock)

    async def scenario():
        await drafts.save_draft("step3_profile", {"owner": "Asha"})
        await drafts.save_draft("step5_gst", {"gstin": "29ABCDE1234F1Z5"})
        await drafts.remove_draft("step3_profile")
        return await drafts.list_drafts(), await drafts.get_draft("step5_gst")

    ids, gst = asyncio.run(scenario())
    assert ids == ["step5_gst"]
    assert gst == {"gstin": "29ABCDE1234F1Z5"}


def test_remove_unknown_draft_is_a_noop(clock):
    backend = MemoryStorage()
    drafts = _drafts(clock, backend)

    async def scenario():
        await drafts.save_draft("A", {"x": 1})
        await drafts.remove_draft("B")
        return await drafts.list_drafts()

    assert asyncio.run(scenario()) == ["A"]


def test_removing_last_draft_drops_the_key(clock):
    backend = MemoryStorage()
    drafts = _drafts(clock, backend)

    async def scenario():
        await drafts.save_draft("A", {"x": 1})
        await drafts.remove_draft("A")

    asyncio.run(scenario())
    assert StorageKey.FORM_DRAFTS.value not in backend


def test_expired_draft_map_reads_as_empty(clock):
    drafts = DraftStore(TTLStore(MemoryStorage(), clock=clock), ttl_hours=1)

    async def scenario():
        await drafts.save_draft("A", {"x": 1})
        clock.advance(hours=2)
        return await drafts.list_drafts()

    assert asyncio.run(scenario()) == []


def test_non_mapping_payload_is_ignored(clock):
    store = TTLStore(MemoryStorage(), clock=clock)
    drafts = DraftStore(store)

    async def scenario():
        await store.save(StorageKey.FORM_DRAFTS, ["not", "a", "map"])
        await drafts.save_draft("A", {"x": 1})
        return await drafts.load_draft_map()

    assert list(asyncio.run(scenario())) == ["A"]


def test_concurrent_saves_on_shared_store_keep_both_entries(clock):
    drafts = _drafts(clock)

    async def scenario():
        await asyncio.gather(
            drafts.save_draft("A", {"x": 1}),
            drafts.save_draft("B", {"y": 2}),
            drafts.save_draft("C", {"z": 3}),
        )
        return sorted(await drafts.list_drafts())

    assert asyncio.run(scenario()) == ["A", "B", "C"]


def test_save_draft_reports_storage_failure(clock):
    drafts = _drafts(clock, FailingBackend(fail_set=True))
    assert asyncio.run(drafts.save_draft("A", {"x": 1})) is False


class DictRecordStore:
    """Record store without expiry, enough for the draft map's needs."""

    def __init__(self, clock):
        self.clock = clock
        self.records = {}

    async def save(self, key, data, ttl_hours=None):
        self.records[key] = data
        return True

    async def get(self, key):
        return self.records.get(key)

    async def remove(self, key):
        self.records.pop(key, None)

    async def clear_all(self, keys=None):
        self.records.clear()


def test_draft_store_runs_on_any_record_store(clock):
    store = DictRecordStore(clock)
    assert isinstance(store, RecordStoreProtocol)
    drafts = DraftStore(store)

    async def scenario():
        await drafts.save_draft("step5_gst", {"gstin": "29ABCDE1234F1Z5"})
        return await drafts.get_draft("step5_gst")

    assert asyncio.run(scenario()) == {"gstin": "29ABCDE1234F1Z5"}
    assert list(store.records) == [DRAFTS_KEY]
