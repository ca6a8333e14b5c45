import pytest

from otakutrack.storage.kv_store import JSONFileStorage
from otakutrack.storage.progress import ProgressStore


class FakeClock:
    """A controllable clock; each call advances by `step`."""

    def __init__(self, start=1_000_000, step=0):
        self.now = start
        self.step = step

    def __call__(self):
        value = self.now
        self.now += self.step
        return value

    def advance(self, amount):
        self.now += amount


@pytest.fixture
def storage(tmp_path):
    return JSONFileStorage(tmp_path / "data")


@pytest.fixture
def clock():
    return FakeClock(start=1_700_000_000_000, step=1)


@pytest.fixture
def store(storage, clock):
    s = ProgressStore(storage, clock=clock)
    s.load()
    return s
