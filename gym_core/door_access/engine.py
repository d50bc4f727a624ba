# gym_core/door_access/engine.py
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Mapping, Optional

from django.conf import settings
from django.utils import timezone

from gym_core.door_access.constants import (
    DEFAULT_RATE_LIMIT_MAX_ATTEMPTS,
    DEFAULT_RATE_LIMIT_WINDOW_SECONDS,
    DEFAULT_RECENT_ACCESS_WINDOW_SECONDS,
    HTTP_STATUS_BY_CODE,
    AccessCode,
)
from gym_core.door_access.geo import haversine_distance, round_meters
from gym_core.door_access.geofence import GeofenceCatalog, GeofenceLocation, get_catalog
from gym_core.door_access.store import AccessEventStore, DjangoAccessEventStore

logger = logging.getLogger("gym.door_access")


@dataclass(frozen=True)
class UserLocation:
    latitude: float
    longitude: float
    accuracy: Optional[float] = None

    def as_dict(self) -> dict[str, Any]:
        return {"latitude": self.latitude, "longitude": self.longitude, "accuracy": self.accuracy}


def _as_finite(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        f = float(value)
    except (TypeError, ValueError):
        return None
    return f if math.isfinite(f) else None


def coerce_user_location(raw: Any) -> Optional[UserLocation]:
    """
    Accepts a UserLocation or a {"latitude", "longitude", "accuracy"?} mapping.
    Returns None unless both coordinates are finite numbers.
    """
    if raw is None:
        return None
    if isinstance(raw, UserLocation):
        return raw
    if not isinstance(raw, Mapping):
        return None

    lat = _as_finite(raw.get("latitude"))
    lon = _as_finite(raw.get("longitude"))
    if lat is None or lon is None:
        return None
    return UserLocation(latitude=lat, longitude=lon, accuracy=_as_finite(raw.get("accuracy")))


@dataclass(frozen=True)
class AccessPolicy:
    rate_limit_window: timedelta = timedelta(seconds=DEFAULT_RATE_LIMIT_WINDOW_SECONDS)
    rate_limit_max_attempts: int = DEFAULT_RATE_LIMIT_MAX_ATTEMPTS
    recent_access_window: timedelta = timedelta(seconds=DEFAULT_RECENT_ACCESS_WINDOW_SECONDS)

    @classmethod
    def from_settings(cls) -> "AccessPolicy":
        config = getattr(settings, "DOOR_ACCESS", {}) or {}
        return cls(
            rate_limit_window=timedelta(
                seconds=int(config.get("RATE_LIMIT_WINDOW_SECONDS", DEFAULT_RATE_LIMIT_WINDOW_SECONDS))
            ),
            rate_limit_max_attempts=int(config.get("RATE_LIMIT_MAX_ATTEMPTS", DEFAULT_RATE_LIMIT_MAX_ATTEMPTS)),
            recent_access_window=timedelta(
                seconds=int(config.get("RECENT_ACCESS_WINDOW_SECONDS", DEFAULT_RECENT_ACCESS_WINDOW_SECONDS))
            ),
        )


@dataclass(frozen=True)
class AccessDecision:
    authorized: bool
    code: Optional[str]
    message: str
    distance_meters: Optional[float] = None
    location: Optional[GeofenceLocation] = None
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def http_status(self) -> int:
        if self.authorized:
            return 200
        return HTTP_STATUS_BY_CODE.get(self.code, 403)

    @property
    def distance(self) -> Optional[int]:
        if self.distance_meters is None:
            return None
        return round_meters(self.distance_meters)

    def as_payload(self) -> dict[str, Any]:
        """
        Wire shape: {success, message, location, distance} or {message, code, ...extra}.
        """
        if self.authorized:
            return {
                "success": True,
                "message": self.message,
                "location": self.location.as_dict() if self.location else None,
                "distance": self.distance,
            }
        payload: dict[str, Any] = {"message": self.message, "code": self.code}
        payload.update(self.extra)
        return payload


def _deny(code: str, message: str, **kwargs) -> AccessDecision:
    return AccessDecision(authorized=False, code=code, message=message, **kwargs)


class AccessDecisionEngine:
    """
    Decides whether a user may open a door right now. Side-effect free:
    it reads the access log but never writes it (see AccessLogger).

    Checks run in a fixed order so the reason code is deterministic:
      1. location id present            -> LOCATION_REQUIRED
      2. device coordinates present     -> LOCATION_REQUIRED
      3. attempts in rate-limit window  -> RATE_LIMITED
      4. location id known              -> INVALID_LOCATION
      5. inside the geofence            -> TOO_FAR
      6. no success in recent window    -> RECENT_ACCESS

    Rate limiting runs before the geofence so precise coordinates cannot be
    used to probe a radius indefinitely.
    """

    def __init__(
        self,
        *,
        store: AccessEventStore | None = None,
        catalog: GeofenceCatalog | None = None,
        policy: AccessPolicy | None = None,
    ):
        self.store = store if store is not None else DjangoAccessEventStore()
        self._catalog = catalog
        self.policy = policy if policy is not None else AccessPolicy.from_settings()

    @property
    def catalog(self) -> GeofenceCatalog:
        return self._catalog if self._catalog is not None else get_catalog()

    def check_access(
        self,
        *,
        user_id: int,
        location_id: Optional[str],
        user_location: UserLocation | Mapping[str, Any] | None,
        now: datetime | None = None,
    ) -> AccessDecision:
        decision = self._decide(
            user_id=user_id,
            location_id=location_id,
            user_location=user_location,
            now=now or timezone.now(),
        )
        logger.info(
            "door check user=%s location=%s authorized=%s code=%s distance=%s",
            user_id,
            location_id,
            decision.authorized,
            decision.code,
            decision.distance,
        )
        return decision

    def _decide(
        self,
        *,
        user_id: int,
        location_id: Optional[str],
        user_location: UserLocation | Mapping[str, Any] | None,
        now: datetime,
    ) -> AccessDecision:
        location_id = str(location_id).strip() if location_id is not None else ""
        if not location_id:
            return _deny(AccessCode.LOCATION_REQUIRED, "Location ID is required")

        position = coerce_user_location(user_location)
        if position is None:
            return _deny(AccessCode.LOCATION_REQUIRED, "User location is required for security verification")

        attempts = self.store.count_attempts_since(
            user_id=user_id,
            location_id=location_id,
            since=now - self.policy.rate_limit_window,
        )
        if attempts >= self.policy.rate_limit_max_attempts:
            return _deny(
                AccessCode.RATE_LIMITED,
                "Too many access attempts. Please wait before trying again.",
                extra={"waitTime": int(self.policy.rate_limit_window.total_seconds())},
            )

        target = self.catalog.lookup(location_id)
        if target is None:
            return _deny(AccessCode.INVALID_LOCATION, "Invalid location ID")

        distance = haversine_distance(
            position.latitude,
            position.longitude,
            target.center_latitude,
            target.center_longitude,
        )
        if distance > target.radius_meters:
            radius = target.radius_meters
            radius_display = int(radius) if float(radius).is_integer() else radius
            return _deny(
                AccessCode.TOO_FAR,
                f"You are too far from {target.display_address}. "
                f"You need to be within {radius_display} meters of the location.",
                distance_meters=distance,
                location=target,
                extra={
                    "distance": round_meters(distance),
                    "maxDistance": radius_display,
                    "locationAddress": target.display_address,
                },
            )

        recent = self.store.latest_success_since(
            user_id=user_id,
            location_id=location_id,
            since=now - self.policy.recent_access_window,
        )
        if recent is not None:
            return _deny(
                AccessCode.RECENT_ACCESS,
                "You recently opened this door. Please wait before trying again.",
                distance_meters=distance,
                location=target,
                extra={"waitTime": int(self.policy.recent_access_window.total_seconds())},
            )

        return AccessDecision(
            authorized=True,
            code=None,
            message="Access authorized",
            distance_meters=distance,
            location=target,
        )


def check_access(
    *,
    user_id: int,
    location_id: Optional[str],
    user_location: UserLocation | Mapping[str, Any] | None,
    now: datetime | None = None,
) -> AccessDecision:
    """
    Module-level convenience using the default (database-backed) engine.
    """
    return AccessDecisionEngine().check_access(
        user_id=user_id,
        location_id=location_id,
        user_location=user_location,
        now=now,
    )
