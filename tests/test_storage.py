"""Tests for local storage implementations."""

from datetime import date
from pathlib import Path

import pytest

from caltrax.adapters.json_file_store import JsonFileStore
from caltrax.domain.ledger import FoodEntryInput
from caltrax.domain.nutrition import MacroProfile
from caltrax.errors import StorageUnavailableError
from caltrax.services.ledger import MacroLedger
from caltrax.services.storage import InMemoryStore, day_key
from tests.conftest import build_remote_sync


def test_in_memory_store_returns_copies() -> None:
    store = InMemoryStore()
    value = {"entries": [1]}
    store.set("key", value)

    value["entries"].append(2)
    fetched = store.get("key")
    fetched["entries"].append(3)

    assert store.get("key") == {"entries": [1]}


def test_in_memory_store_remove() -> None:
    store = InMemoryStore()
    store.set("key", 1)
    store.remove("key")
    store.remove("missing")

    assert store.get("key") is None
    assert store.keys() == []


def test_json_file_store_round_trip(tmp_path: Path) -> None:
    store = JsonFileStore.create(str(tmp_path / "store"))
    key = day_key("user_1", "2024-03-13")

    store.set(key, {"date": "2024-03-13", "entries": []})

    assert store.get(key) == {"date": "2024-03-13", "entries": []}
    assert [path.suffix for path in (tmp_path / "store").iterdir()] == [".json"]

    store.remove(key)
    assert store.get(key) is None


def test_json_file_store_ignores_corrupt_file(tmp_path: Path) -> None:
    store = JsonFileStore.create(str(tmp_path))
    store.set("key", {"a": 1})
    next(tmp_path.glob("*.json")).write_text("{not json", encoding="utf-8")

    assert store.get("key") is None


def test_json_file_store_raises_when_directory_is_unusable(tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("file", encoding="utf-8")

    with pytest.raises(StorageUnavailableError):
        JsonFileStore.create(str(blocker / "store"))


def test_json_file_store_write_failure_is_storage_error(tmp_path: Path) -> None:
    store = JsonFileStore(directory=tmp_path / "missing")

    with pytest.raises(StorageUnavailableError):
        store.set("key", {"a": 1})


def test_json_file_store_keeps_similar_keys_apart(tmp_path: Path) -> None:
    store = JsonFileStore.create(str(tmp_path))
    colon_key = day_key("alice:x", "2024-03-13")
    underscore_key = day_key("alice_x", "2024-03-13")

    store.set(colon_key, {"owner": "alice:x"})

    assert store.get(underscore_key) is None
    store.set(underscore_key, {"owner": "alice_x"})
    assert store.get(colon_key) == {"owner": "alice:x"}
    assert len(list(tmp_path.glob("*.json"))) == 2


def test_json_file_store_isolates_users_in_ledger(tmp_path: Path) -> None:
    store = JsonFileStore.create(str(tmp_path))
    ledger = MacroLedger(store=store, remote_sync=build_remote_sync(InMemoryStore()))
    day = date(2024, 3, 13)

    ledger.add_entry("alice:x", day, FoodEntryInput("Toast", MacroProfile(300)))

    assert ledger.get_day("alice_x", day).entries == []
    assert ledger.get_day("alice:x", day).totals.calories == 300
