# gym_core/door_access/tests/conftest.py
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone as dt_timezone

import pytest

from gym_core.door_access.engine import AccessDecisionEngine, AccessPolicy
from gym_core.door_access.geofence import GeofenceCatalog, GeofenceLocation

MONT_ROYAL = GeofenceLocation(
    location_id="1",
    display_address="2308 av mont-royal E, Montreal",
    center_latitude=45.5240,
    center_longitude=-73.5897,
    radius_meters=50,
    name="PIERRE MONT-ROYAL",
)

MILE_END = GeofenceLocation(
    location_id="6",
    display_address="Mile End, Montreal",
    center_latitude=45.5250,
    center_longitude=-73.6050,
    radius_meters=50,
    name="PIERRE MILE END",
)


@dataclass
class FakeEvent:
    user_id: int
    location_id: str
    status: str
    access_time: datetime


class FakeAccessEventStore:
    """
    In-memory AccessEventStore that records every query it receives.
    """

    def __init__(self):
        self.events: list[FakeEvent] = []
        self.calls: list[str] = []

    def add(self, *, user_id=1, location_id="1", status="success", at: datetime):
        self.events.append(FakeEvent(user_id=user_id, location_id=location_id, status=status, access_time=at))

    def count_attempts_since(self, *, user_id, location_id, since):
        self.calls.append("count_attempts_since")
        return sum(
            1
            for e in self.events
            if e.user_id == user_id and e.location_id == location_id and e.access_time >= since
        )

    def latest_success_since(self, *, user_id, location_id, since):
        self.calls.append("latest_success_since")
        matches = [
            e
            for e in self.events
            if e.user_id == user_id
            and e.location_id == location_id
            and e.status == "success"
            and e.access_time >= since
        ]
        return max(matches, key=lambda e: e.access_time) if matches else None


@pytest.fixture
def now():
    return datetime(2026, 3, 10, 18, 0, 0, tzinfo=dt_timezone.utc)


@pytest.fixture
def store():
    return FakeAccessEventStore()


@pytest.fixture
def catalog():
    return GeofenceCatalog([MONT_ROYAL, MILE_END])


@pytest.fixture
def engine(store, catalog):
    return AccessDecisionEngine(store=store, catalog=catalog, policy=AccessPolicy())


@pytest.fixture
def at_center():
    return {"latitude": MONT_ROYAL.center_latitude, "longitude": MONT_ROYAL.center_longitude, "accuracy": 5}


@pytest.fixture
def ago(now):
    def _ago(**kwargs):
        return now - timedelta(**kwargs)

    return _ago
