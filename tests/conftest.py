import threading

import pytest


class FakeClock:
    """Manually advanced wall clock shared by a store and a manager."""

    def __init__(self, start=1_000.0):
        self._lock = threading.Lock()
        self.now = start

    def __call__(self):
        with self._lock:
            return self.now

    def advance(self, seconds):
        with self._lock:
            self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def sample():
    """Read a counter from the cache registry; 0.0 if it was never touched."""
    from cachehelper.metrics import registry

    def read(name):
        return registry.get_sample_value(name) or 0.0

    return read
