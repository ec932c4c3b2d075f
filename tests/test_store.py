from cachehelper.store import MemoryStore, make_default_store


def test_set_get_until_expiry(clock):
    store = MemoryStore(clock=clock)
    store.set("a", {"v": 1}, clock() + 5)
    assert store.get("a") == {"v": 1}
    clock.advance(4.5)
    assert store.get("a") == {"v": 1}
    clock.advance(0.5)
    # expires_at is exclusive
    assert store.get("a") is None
    assert "a" not in store


def test_set_overwrites_value_and_expiry(clock):
    store = MemoryStore(clock=clock)
    store.set("a", 1, clock() + 1)
    store.set("a", 2, clock() + 10)
    clock.advance(5)
    assert store.get("a") == 2


def test_remove_missing_is_noop():
    store = MemoryStore()
    store.remove("nope")
    assert len(store) == 0


def test_keys_is_snapshot_without_expired(clock):
    store = MemoryStore(clock=clock)
    store.set("short", 1, clock() + 1)
    store.set("long", 2, clock() + 100)
    clock.advance(2)
    keys = store.keys()
    assert keys == ["long"]
    # mutating the store does not affect an earlier snapshot
    store.set("new", 3, clock() + 100)
    assert keys == ["long"]
    assert sorted(store.keys()) == ["long", "new"]


def test_default_store_is_not_shared():
    a = make_default_store()
    b = make_default_store()
    a.set("k", 1, a.clock() + 60)
    assert b.get("k") is None


def test_default_store_takes_clock(clock):
    store = make_default_store(clock)
    store.set("k", 1, clock() + 5)
    assert store.get("k") == 1
    clock.advance(5)
    assert store.get("k") is None
