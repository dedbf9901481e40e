from __future__ import annotations

import json
import os
import stat

import pytest

from khata_client.exceptions import StorageError
from khata_client.storage import JsonFileStore, MemoryStore, SessionStore, StorageKey


class BrokenStore:
    def get(self, key: str) -> str | None:
        raise StorageError("disk unavailable")

    def set(self, key: str, value: str) -> None:
        raise StorageError("disk full")

    def remove(self, key: str) -> None:
        raise StorageError("disk unavailable")


def test_save_and_clear_session() -> None:
    store = SessionStore(MemoryStore())
    store.save_session("tok-1", {"business_name": "Sharma Stores"}, "42")

    assert store.token() == "tok-1"
    assert store.user_data() == {"business_name": "Sharma Stores"}
    assert store.get(StorageKey.BUSINESS_ID) == "42"

    store.clear_session()
    assert store.token() is None
    assert store.user_data() is None
    assert store.get(StorageKey.BUSINESS_ID) is None


def test_clear_session_keeps_product_cache_and_onboarding_flag() -> None:
    store = SessionStore(MemoryStore())
    store.save_session("tok-1", {"id": 1})
    store.set_json(StorageKey.PRODUCTS_CACHE, [{"id": "p1"}])
    store.mark_business_setup_completed()

    store.clear_session()

    assert store.get_json(StorageKey.PRODUCTS_CACHE) == [{"id": "p1"}]
    assert store.business_setup_completed() is True


def test_failed_reads_are_absent_and_failed_writes_do_not_raise() -> None:
    store = SessionStore(BrokenStore())
    assert store.get(StorageKey.AUTH_TOKEN) is None
    assert store.token() is None
    assert store.set(StorageKey.AUTH_TOKEN, "tok") is False
    assert store.remove(StorageKey.AUTH_TOKEN) is False
    store.save_session("tok", {"id": 1}, "b1")
    store.clear_session()


def test_invalid_json_value_reads_as_absent() -> None:
    backend = MemoryStore({StorageKey.USER_DATA: "{not json"})
    store = SessionStore(backend)
    assert store.user_data() is None


def test_json_file_store_persists_between_instances(tmp_path) -> None:
    first = JsonFileStore(directory=str(tmp_path))
    first.set(StorageKey.AUTH_TOKEN, "tok-file")

    second = JsonFileStore(directory=str(tmp_path))
    assert second.get(StorageKey.AUTH_TOKEN) == "tok-file"

    second.remove(StorageKey.AUTH_TOKEN)
    assert first.get(StorageKey.AUTH_TOKEN) is None


@pytest.mark.skipif(os.name == "nt", reason="POSIX permissions only")
def test_json_file_store_is_private(tmp_path) -> None:
    store = JsonFileStore(directory=str(tmp_path))
    store.set(StorageKey.AUTH_TOKEN, "tok")
    mode = stat.S_IMODE((tmp_path / "storage.json").stat().st_mode)
    assert mode == 0o600


def test_json_file_store_discards_corrupt_file(tmp_path) -> None:
    (tmp_path / "storage.json").write_text("{broken", encoding="utf-8")
    store = JsonFileStore(directory=str(tmp_path))
    assert store.get(StorageKey.AUTH_TOKEN) is None
    store.set(StorageKey.AUTH_TOKEN, "fresh")
    assert json.loads((tmp_path / "storage.json").read_text(encoding="utf-8")) == {"authToken": "fresh"}


def test_json_file_store_discards_undecodable_file(tmp_path) -> None:
    (tmp_path / "storage.json").write_bytes(b"\xff\xfe{bad")
    store = SessionStore(JsonFileStore(directory=str(tmp_path)))

    assert store.token() is None
    assert store.set(StorageKey.AUTH_TOKEN, "fresh") is True
    assert store.token() == "fresh"
