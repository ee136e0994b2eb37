import random
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from app.services.metrics.store import MetricsStore

PINNED_NOW = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self, now: datetime = PINNED_NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    return MetricsStore(rng=random.Random(1234), clock=clock)


@pytest.fixture
def seeded_store(store):
    store.seed()
    return store


@pytest.fixture
def client(seeded_store, tmp_path):
    from app.app import create_app

    # Long interval keeps the scheduler from mutating during a test
    app = create_app(store=seeded_store, update_interval=3600, static_dir=str(tmp_path / "missing"))
    with TestClient(app) as test_client:
        yield test_client
