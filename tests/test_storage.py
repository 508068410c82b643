import pytest

from tab_tracker.storage import (
    SqliteSummaryStore,
    StorageError,
    database_connection,
    write_record,
)


def test_absent_record_loads_empty(tmp_path):
    store = SqliteSummaryStore(tmp_path / "activity.sqlite3")
    assert store.load() == {}


def test_save_of_load_is_idempotent(tmp_path):
    store = SqliteSummaryStore(tmp_path / "activity.sqlite3")
    store.save({"https://a.test/": 5000, "https://b.test/": 7000})
    first = store.load()
    store.save(first)
    assert store.load() == first == {"https://a.test/": 5000, "https://b.test/": 7000}


def test_keys_are_independent(tmp_path):
    path = tmp_path / "activity.sqlite3"
    SqliteSummaryStore(path, key="one").save({"a": 1})
    assert SqliteSummaryStore(path, key="two").load() == {}
    assert SqliteSummaryStore(path, key="one").load() == {"a": 1}


@pytest.mark.parametrize("raw", ["not json", '{"a": -1}', '["a"]', '{"a": 1.5}'])
def test_malformed_record_raises_storage_error(tmp_path, raw):
    path = tmp_path / "activity.sqlite3"
    with database_connection(path) as conn:
        write_record(conn, "tabActivity", raw)
    with pytest.raises(StorageError):
        SqliteSummaryStore(path).load()


def test_unwritable_location_raises_storage_error(tmp_path):
    store = SqliteSummaryStore(tmp_path / "missing" / "activity.sqlite3")
    with pytest.raises(StorageError):
        store.save({"a": 1})
