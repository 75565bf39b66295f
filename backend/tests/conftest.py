"""
Shared fixtures for queue engine and API tests.
"""

from datetime import datetime, timedelta

import pytest

from hospital_queue.database import MemorySnapshotStore
from hospital_queue.services.queue_service import QueueEngine


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, minutes: float = 1) -> datetime:
        self.now += timedelta(minutes=minutes)
        return self.now


@pytest.fixture
def clock():
    return FakeClock(datetime(2026, 3, 2, 9, 0, 0))


@pytest.fixture
def store():
    return MemorySnapshotStore()


@pytest.fixture
def engine(store, clock):
    return QueueEngine(store, clock=clock, average_service_minutes=15)


def registration(name="Patient", age=30, department="General", visit_type="New", gender="Male"):
    return {
        "name": name,
        "age": age,
        "gender": gender,
        "department": department,
        "visit_type": visit_type
    }
