"""Tests for remote sync."""

import asyncio
import time

from caltrax.services.storage import PENDING_SYNC_KEY, InMemoryStore
from caltrax.services.sync import (
    DELETE_ENTRY,
    UPSERT_ENTRY,
    UPSERT_PROFILE,
    RemoteSync,
    SyncOperation,
)
from tests.conftest import (
    InMemoryFoodEntryRepository,
    InMemoryProfileRepository,
    build_remote_sync,
)


def _upsert(entry_id: str) -> SyncOperation:
    return SyncOperation(
        kind=UPSERT_ENTRY,
        user_id="user_1",
        payload={
            "date": "2024-03-13",
            "entry": {"id": entry_id, "name": "Toast", "nutrition": {}},
        },
    )


def test_submit_without_loop_keeps_operation_pending() -> None:
    remote_sync = build_remote_sync()

    remote_sync.submit(_upsert("a"))

    assert remote_sync.pending() == [_upsert("a")]


def test_flush_applies_operations_in_order() -> None:
    entries = InMemoryFoodEntryRepository()
    profiles = InMemoryProfileRepository()
    remote_sync = build_remote_sync(entries=entries, profiles=profiles)
    remote_sync.submit(_upsert("a"))
    remote_sync.submit(
        SyncOperation(
            kind=DELETE_ENTRY, user_id="user_1", payload={"entry_id": "a"}
        )
    )
    remote_sync.submit(
        SyncOperation(
            kind=UPSERT_PROFILE, user_id="user_1", payload={"calories": 2000}
        )
    )

    remaining = asyncio.run(remote_sync.flush())

    assert remaining == 0
    assert entries.calls == ["upsert:a", "delete:a"]
    assert entries.rows == {}
    assert profiles.profiles["user_1"] == {"calories": 2000}


def test_flush_stops_at_first_failure_and_keeps_order() -> None:
    entries = InMemoryFoodEntryRepository(fail=True)
    remote_sync = build_remote_sync(entries=entries)
    remote_sync.submit(_upsert("a"))
    remote_sync.submit(_upsert("b"))

    remaining = asyncio.run(remote_sync.flush())

    assert remaining == 2
    assert entries.calls == ["upsert:a"]
    assert [op.payload["entry"]["id"] for op in remote_sync.pending()] == ["a", "b"]

    entries.fail = False
    assert asyncio.run(remote_sync.flush()) == 0
    assert set(entries.rows) == {"a", "b"}


def test_pending_operations_survive_restart() -> None:
    store = InMemoryStore()
    first = build_remote_sync(store=store)
    first.submit(_upsert("a"))

    entries = InMemoryFoodEntryRepository()
    second = build_remote_sync(store=store, entries=entries)
    remaining = asyncio.run(second.flush())

    assert remaining == 0
    assert "a" in entries.rows
    assert store.get(PENDING_SYNC_KEY) is None


def test_queue_drops_oldest_when_full() -> None:
    remote_sync = build_remote_sync()
    remote_sync.max_pending = 2

    for entry_id in ("a", "b", "c"):
        remote_sync.submit(_upsert(entry_id))

    assert [op.payload["entry"]["id"] for op in remote_sync.pending()] == ["b", "c"]


class _SlowEntryRepository(InMemoryFoodEntryRepository):
    def upsert_entry(self, user_id: str, day: str, entry: dict[str, object]) -> None:
        time.sleep(0.2)
        super().upsert_entry(user_id, day, entry)


def test_flush_times_out_slow_remote() -> None:
    remote_sync = RemoteSync(
        store=InMemoryStore(),
        entry_repository=_SlowEntryRepository(),
        profile_repository=InMemoryProfileRepository(),
        timeout_seconds=0.01,
    )
    remote_sync.submit(_upsert("a"))

    remaining = asyncio.run(remote_sync.flush())

    assert remaining == 1


def test_submit_inside_loop_drains_in_background() -> None:
    entries = InMemoryFoodEntryRepository()
    remote_sync = build_remote_sync(entries=entries)

    async def scenario() -> None:
        remote_sync.submit(_upsert("a"))
        remote_sync.submit(_upsert("b"))
        await remote_sync.wait_idle()

    asyncio.run(scenario())

    assert entries.calls == ["upsert:a", "upsert:b"]
    assert remote_sync.pending() == []
