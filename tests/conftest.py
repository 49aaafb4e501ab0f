"""Root conftest — shared fixtures: isolated settings, store, and dispatcher.

Invariants:
    - Every test gets its own data directory under tmp_path
    - Lock timing runs on a FakeClock; no test sleeps for real
"""

import os

import pytest

# Ensure tests never pick up a developer's data directory
os.environ.setdefault("JSDB_DATA_DIR", "/nonexistent/jsdb-tests")

from jsdb.config import Settings
from jsdb.infrastructure.document_store import DocumentStore
from jsdb.services.dispatch_command import RequestDispatcher


class FakeClock:
    """Monotonic fake time; sleep() advances it and records the call."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def settings(tmp_path):
    return Settings(data_dir=tmp_path / "data", _env_file=None)


@pytest.fixture
def store(settings, clock):
    return DocumentStore.from_settings(settings, clock=clock, sleep=clock.sleep)


@pytest.fixture
def dispatcher(store, settings):
    store.ensure_initialized()
    return RequestDispatcher(store, settings)
