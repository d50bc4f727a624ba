import math
from datetime import timedelta

import pytest

from gym_core.door_access.constants import AccessCode
from gym_core.door_access.engine import AccessDecisionEngine, AccessPolicy, UserLocation
from gym_core.door_access.geo import EARTH_RADIUS_METERS

USER = 1


def _north_of_center(meters: float) -> dict:
    dlat = math.degrees(meters / EARTH_RADIUS_METERS)
    return {"latitude": 45.5240 + dlat, "longitude": -73.5897}


# -------------------------
# Happy path
# -------------------------
def test_user_at_center_is_authorized(engine, store, at_center, now):
    decision = engine.check_access(user_id=USER, location_id="1", user_location=at_center, now=now)

    assert decision.authorized is True
    assert decision.code is None
    assert decision.distance == 0
    assert decision.location.location_id == "1"
    assert decision.http_status == 200
    assert store.calls == ["count_attempts_since", "latest_success_since"]


def test_success_payload_shape(engine, at_center, now):
    payload = engine.check_access(user_id=USER, location_id="1", user_location=at_center, now=now).as_payload()

    assert payload["success"] is True
    assert payload["message"] == "Access authorized"
    assert payload["distance"] == 0
    assert payload["location"]["address"] == "2308 av mont-royal E, Montreal"
    assert payload["location"]["radius"] == 50


def test_inside_radius_but_off_center_is_authorized(engine, now):
    decision = engine.check_access(user_id=USER, location_id="1", user_location=_north_of_center(30), now=now)
    assert decision.authorized is True
    assert decision.distance == 30


def test_accepts_user_location_dataclass(engine, now):
    decision = engine.check_access(
        user_id=USER,
        location_id="1",
        user_location=UserLocation(latitude=45.5240, longitude=-73.5897),
        now=now,
    )
    assert decision.authorized is True


# -------------------------
# 1-2. Missing input: no store query at all
# -------------------------
@pytest.mark.parametrize("location_id", [None, "", "   "])
def test_missing_location_id(engine, store, at_center, now, location_id):
    decision = engine.check_access(user_id=USER, location_id=location_id, user_location=at_center, now=now)

    assert decision.authorized is False
    assert decision.code == AccessCode.LOCATION_REQUIRED
    assert decision.http_status == 400
    assert store.calls == []


@pytest.mark.parametrize(
    "user_location",
    [
        None,
        {},
        {"longitude": -73.5897},
        {"latitude": 45.5240},
        {"latitude": None, "longitude": -73.5897},
        {"latitude": "abc", "longitude": -73.5897},
        {"latitude": float("nan"), "longitude": -73.5897},
        "45.5240,-73.5897",
    ],
)
def test_missing_coordinates(engine, store, now, user_location):
    decision = engine.check_access(user_id=USER, location_id="1", user_location=user_location, now=now)

    assert decision.code == AccessCode.LOCATION_REQUIRED
    assert decision.as_payload() == {
        "message": "User location is required for security verification",
        "code": "LOCATION_REQUIRED",
    }
    assert store.calls == []


def test_zero_latitude_is_a_real_coordinate(engine, now):
    decision = engine.check_access(
        user_id=USER, location_id="1", user_location={"latitude": 0, "longitude": -73.5897}, now=now
    )
    assert decision.code == AccessCode.TOO_FAR


# -------------------------
# 3. Rate limit
# -------------------------
@pytest.mark.parametrize("status", ["success", "failed", "denied", "timeout"])
def test_three_attempts_in_five_minutes_rate_limits_any_status(engine, store, ago, now, status):
    for seconds in (200, 120, 90):
        store.add(user_id=USER, location_id="1", status=status, at=ago(seconds=seconds))

    # far away coordinates: rate limiting wins regardless of geolocation
    decision = engine.check_access(user_id=USER, location_id="1", user_location=_north_of_center(5000), now=now)

    assert decision.code == AccessCode.RATE_LIMITED
    assert decision.http_status == 429
    assert decision.extra == {"waitTime": 300}
    assert store.calls == ["count_attempts_since"]


def test_rate_limit_precedes_unknown_location(engine, store, ago, now, at_center):
    for seconds in (10, 20, 30):
        store.add(user_id=USER, location_id="99", status="failed", at=ago(seconds=seconds))

    decision = engine.check_access(user_id=USER, location_id="99", user_location=at_center, now=now)
    assert decision.code == AccessCode.RATE_LIMITED


def test_attempts_outside_window_or_elsewhere_do_not_count(engine, store, ago, now, at_center):
    store.add(user_id=USER, location_id="1", status="failed", at=ago(minutes=6))
    store.add(user_id=USER, location_id="1", status="failed", at=ago(minutes=7))
    store.add(user_id=USER, location_id="6", status="failed", at=ago(seconds=30))
    store.add(user_id=2, location_id="1", status="failed", at=ago(seconds=30))
    store.add(user_id=USER, location_id="1", status="failed", at=ago(minutes=4))

    decision = engine.check_access(user_id=USER, location_id="1", user_location=at_center, now=now)
    assert decision.authorized is True


def test_two_attempts_are_still_allowed(engine, store, ago, now, at_center):
    store.add(user_id=USER, location_id="1", status="denied", at=ago(seconds=100))
    store.add(user_id=USER, location_id="1", status="denied", at=ago(seconds=50))

    decision = engine.check_access(user_id=USER, location_id="1", user_location=at_center, now=now)
    assert decision.authorized is True


def test_rate_limit_follows_policy(store, catalog, ago, now, at_center):
    engine = AccessDecisionEngine(
        store=store,
        catalog=catalog,
        policy=AccessPolicy(rate_limit_window=timedelta(minutes=10), rate_limit_max_attempts=5),
    )
    for minutes in (1, 2, 3, 8):
        store.add(user_id=USER, location_id="1", status="failed", at=ago(minutes=minutes))
    assert engine.check_access(user_id=USER, location_id="1", user_location=at_center, now=now).authorized

    store.add(user_id=USER, location_id="1", status="failed", at=ago(minutes=9))
    decision = engine.check_access(user_id=USER, location_id="1", user_location=at_center, now=now)
    assert decision.code == AccessCode.RATE_LIMITED
    assert decision.extra["waitTime"] == 600


# -------------------------
# 4. Unknown location
# -------------------------
def test_unknown_location_is_denied(engine, store, at_center, now):
    decision = engine.check_access(user_id=USER, location_id="99", user_location=at_center, now=now)

    assert decision.authorized is False
    assert decision.code == AccessCode.INVALID_LOCATION
    assert decision.http_status == 400
    assert decision.as_payload() == {"message": "Invalid location ID", "code": "INVALID_LOCATION"}
    assert store.calls == ["count_attempts_since"]


# -------------------------
# 5. Geofence
# -------------------------
def test_667m_north_is_too_far(engine, store, now):
    decision = engine.check_access(
        user_id=USER, location_id="1", user_location={"latitude": 45.5300, "longitude": -73.5897}, now=now
    )

    assert decision.code == AccessCode.TOO_FAR
    assert decision.http_status == 403
    assert decision.extra["distance"] == pytest.approx(667, abs=10)
    assert store.calls == ["count_attempts_since"]


def test_one_kilometre_away_reports_distance_and_limit(engine, now):
    decision = engine.check_access(user_id=USER, location_id="1", user_location=_north_of_center(1000), now=now)
    payload = decision.as_payload()

    assert payload["code"] == "TOO_FAR"
    assert payload["distance"] == pytest.approx(1000, rel=0.01)
    assert payload["maxDistance"] == 50
    assert payload["locationAddress"] == "2308 av mont-royal E, Montreal"
    assert payload["message"] == (
        "You are too far from 2308 av mont-royal E, Montreal. "
        "You need to be within 50 meters of the location."
    )


def test_right_at_the_edge_is_allowed(engine, now):
    assert engine.check_access(
        user_id=USER, location_id="1", user_location=_north_of_center(49.9), now=now
    ).authorized
    assert engine.check_access(
        user_id=USER, location_id="1", user_location=_north_of_center(50.2), now=now
    ).code == AccessCode.TOO_FAR


def test_geofence_uses_the_requested_door(engine, at_center, now):
    # standing at Mont-Royal, asking for Mile End (~1.2 km west)
    decision = engine.check_access(user_id=USER, location_id="6", user_location=at_center, now=now)
    assert decision.code == AccessCode.TOO_FAR
    assert decision.extra["locationAddress"] == "Mile End, Montreal"


# -------------------------
# 6. Duplicate suppression
# -------------------------
def test_success_30_seconds_ago_is_recent_access(engine, store, ago, now, at_center):
    store.add(user_id=USER, location_id="1", status="success", at=ago(seconds=30))

    decision = engine.check_access(user_id=USER, location_id="1", user_location=at_center, now=now)

    assert decision.code == AccessCode.RECENT_ACCESS
    assert decision.http_status == 429
    assert decision.as_payload() == {
        "message": "You recently opened this door. Please wait before trying again.",
        "code": "RECENT_ACCESS",
        "waitTime": 60,
    }


def test_success_61_seconds_ago_is_not_recent(engine, store, ago, now, at_center):
    store.add(user_id=USER, location_id="1", status="success", at=ago(seconds=61))

    decision = engine.check_access(user_id=USER, location_id="1", user_location=at_center, now=now)
    assert decision.authorized is True


def test_recent_failure_is_not_a_duplicate(engine, store, ago, now, at_center):
    store.add(user_id=USER, location_id="1", status="failed", at=ago(seconds=10))

    decision = engine.check_access(user_id=USER, location_id="1", user_location=at_center, now=now)
    assert decision.authorized is True


def test_recent_success_by_someone_else_is_not_a_duplicate(engine, store, ago, now, at_center):
    store.add(user_id=2, location_id="1", status="success", at=ago(seconds=10))

    decision = engine.check_access(user_id=USER, location_id="1", user_location=at_center, now=now)
    assert decision.authorized is True


def test_too_far_wins_over_recent_access(engine, store, ago, now):
    store.add(user_id=USER, location_id="1", status="success", at=ago(seconds=10))

    decision = engine.check_access(user_id=USER, location_id="1", user_location=_north_of_center(500), now=now)
    assert decision.code == AccessCode.TOO_FAR
    assert "latest_success_since" not in store.calls


def test_engine_never_writes(engine, store, at_center, now):
    for _ in range(5):
        engine.check_access(user_id=USER, location_id="1", user_location=at_center, now=now)
    assert store.events == []
