# gym_core/door_access/geo.py
from __future__ import annotations

import math

EARTH_RADIUS_METERS = 6_371_000.0


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Great-circle distance in meters between two WGS84 points (degrees).

    Geofence radii are as small as 50 m, so no flat-earth shortcut here.
    Non-finite inputs are a caller error.
    """
    for value in (lat1, lon1, lat2, lon2):
        if value is None or not math.isfinite(value):
            raise ValueError(f"Coordinates must be finite numbers, got {value!r}")

    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = (
        math.sin(d_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_METERS * c


def round_meters(distance: float) -> int:
    # half-up, so 49.5 m reports as 50 m
    return int(math.floor(distance + 0.5))
