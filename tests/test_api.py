import threading

from fastapi.testclient import TestClient

from cachehelper.api import create_app
from cachehelper.manager import CacheManager


class FakeBackend:
    def __init__(self):
        self.lock = threading.Lock()
        self.calls = {}
        self.missing = set()
        self.broken = set()

    def __call__(self, key):
        with self.lock:
            self.calls[key] = self.calls.get(key, 0) + 1
        if key in self.broken:
            raise RuntimeError("backend down")
        if key in self.missing:
            return None
        return {"id": key}


def make_client(lock_timeout=5):
    backend = FakeBackend()
    mgr = CacheManager(lock_timeout=lock_timeout)
    return TestClient(create_app(mgr, backend)), mgr, backend


def test_healthz():
    client, _, _ = make_client()
    r = client.get("/healthz")
    assert r.status_code == 200
    assert r.json().get("status") == "ok"


def test_item_loads_once_then_serves_cached():
    client, mgr, backend = make_client()
    r1 = client.get("/item/a")
    r2 = client.get("/item/a")
    assert r1.status_code == r2.status_code == 200
    assert r1.json() == {"key": "a", "value": {"id": "a"}, "cached": True}
    assert r2.json()["value"] == {"id": "a"}
    assert backend.calls["a"] == 1
    assert mgr.get("a") == {"id": "a"}


def test_item_loader_failure_is_502():
    client, _, backend = make_client()
    backend.broken.add("x")
    r = client.get("/item/x")
    assert r.status_code == 502


def test_item_missing_is_404():
    client, _, backend = make_client()
    backend.missing.add("gone")
    r = client.get("/item/gone")
    assert r.status_code == 404


def test_item_lock_timeout_is_503():
    client, mgr, backend = make_client(lock_timeout=0.05)
    # simulate a request that is still loading
    handle = mgr.registry.get_or_create("busy", 60)
    assert handle.acquire(timeout=0)
    try:
        r = client.get("/item/busy")
    finally:
        handle.release()
    assert r.status_code == 503
    assert r.headers.get("Retry-After") is not None
    assert "busy" not in backend.calls
    # lock was dropped, next request loads normally
    assert client.get("/item/busy").status_code == 200


def test_put_delete_and_clear():
    client, mgr, backend = make_client()
    r = client.put("/item/p", json={"value": [1, 2], "ttl": 30})
    assert r.status_code == 204
    assert client.get("/item/p").json()["value"] == [1, 2]
    assert "p" not in backend.calls

    assert client.delete("/item/p").status_code == 204
    assert mgr.get("p") is None

    client.put("/item/q", json={"value": "Q"})
    client.put("/item/r", json={"value": "R"})
    assert client.delete("/cache").status_code == 204
    assert mgr.get("q") is None and mgr.get("r") is None


def test_put_rejects_non_positive_ttl():
    client, _, _ = make_client()
    r = client.put("/item/p", json={"value": 1, "ttl": 0})
    assert r.status_code == 422


def test_metrics_endpoint():
    client, _, _ = make_client()
    client.get("/item/m")
    r = client.get("/metrics")
    assert r.status_code == 200
    assert "cache_misses_total" in r.text
    assert "loader_latency_seconds" in r.text
