from datetime import datetime, timedelta

import pytest

from familypoints.cache import MemoryCache
from familypoints.service import FamilyPoints
from familypoints.store import SQLStore


class FakeClock:
    """Callable clock that tests can move forward explicitly."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


# Wednesday; the week starts on Monday 2026-10-12.
WEDNESDAY_NOON = datetime(2026, 10, 14, 12, 0)


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock(WEDNESDAY_NOON)


@pytest.fixture()
def store(tmp_path, clock) -> SQLStore:
    return SQLStore(f"sqlite:///{tmp_path / 'points.db'}", clock=clock)


@pytest.fixture()
def cache() -> MemoryCache:
    return MemoryCache()


@pytest.fixture()
def app(store, cache, clock) -> FamilyPoints:
    store.add_member("Ben", member_id="ben")
    store.add_member("Ava", member_id="ava")
    family = FamilyPoints(store, cache, clock=clock)
    family.load_members()
    family.select_member("ava")
    return family
