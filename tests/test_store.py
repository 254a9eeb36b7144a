from dealscout.core.store import (
    MemoryKVStore,
    SqliteKVStore,
    clear_user_location,
    get_user_location,
    set_user_location,
)


def test_sqlite_kv_lifecycle(temp_db_path):
    store = SqliteKVStore(temp_db_path)
    assert store.get("lastScrapedLocation") is None
    assert store.get("lastScrapedLocation", "none") == "none"

    store.set("lastScrapedLocation", "Austin, TX")
    store.set("lastScrapedLocation", "Denver, CO")  # upsert
    assert store.get("lastScrapedLocation") == "Denver, CO"

    # persiste entre instancias
    assert SqliteKVStore(temp_db_path).get("lastScrapedLocation") == "Denver, CO"

    store.delete("lastScrapedLocation")
    assert store.get("lastScrapedLocation") is None


def test_sqlite_accepts_directory_path(tmp_path):
    store = SqliteKVStore(tmp_path)
    store.set("k", "v")
    assert (tmp_path / "dealscout.db").exists()
    assert store.get("k") == "v"


def test_user_location_helpers():
    store = MemoryKVStore()
    assert get_user_location(store) is None
    set_user_location(store, "  Austin, TX ")
    assert get_user_location(store) == "Austin, TX"
    set_user_location(store, "   ")
    assert get_user_location(store) is None
    set_user_location(store, "Reno")
    clear_user_location(store)
    assert store.data == {}
