# gym_core/door_access/geofence.py
from __future__ import annotations

import math
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Iterable, Iterator, Mapping, Optional

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from django.core.signals import setting_changed
from django.dispatch import receiver


class UnknownLocation(KeyError):
    """Raised by GeofenceCatalog.require() for an unregistered location id."""

    def __init__(self, location_id: str):
        super().__init__(location_id)
        self.location_id = location_id

    def __str__(self) -> str:
        return f"Unknown door location: {self.location_id!r}"


@dataclass(frozen=True)
class GeofenceLocation:
    location_id: str
    display_address: str
    center_latitude: float
    center_longitude: float
    radius_meters: float
    name: str = ""

    def as_dict(self) -> dict[str, Any]:
        return {
            "id": self.location_id,
            "name": self.name,
            "address": self.display_address,
            "latitude": self.center_latitude,
            "longitude": self.center_longitude,
            "radius": self.radius_meters,
        }


class GeofenceCatalog:
    """
    Read-only registry: location id -> geofence circle.
    """

    def __init__(self, locations: Iterable[GeofenceLocation] = ()):
        by_id: dict[str, GeofenceLocation] = {}
        for loc in locations:
            if loc.location_id in by_id:
                raise ImproperlyConfigured(f"Duplicate door location id {loc.location_id!r}")
            if loc.radius_meters is None or not math.isfinite(loc.radius_meters) or loc.radius_meters <= 0:
                raise ImproperlyConfigured(
                    f"Door location {loc.location_id!r} must have a positive radius (got {loc.radius_meters!r})"
                )
            by_id[loc.location_id] = loc
        self._by_id = by_id

    @classmethod
    def from_config(cls, entries: Iterable[Mapping[str, Any]]) -> "GeofenceCatalog":
        return cls(_parse_entry(entry) for entry in entries)

    def lookup(self, location_id) -> Optional[GeofenceLocation]:
        if location_id is None:
            return None
        return self._by_id.get(str(location_id))

    def require(self, location_id) -> GeofenceLocation:
        loc = self.lookup(location_id)
        if loc is None:
            raise UnknownLocation(str(location_id))
        return loc

    def __contains__(self, location_id) -> bool:
        return self.lookup(location_id) is not None

    def __iter__(self) -> Iterator[GeofenceLocation]:
        return iter(self._by_id.values())

    def __len__(self) -> int:
        return len(self._by_id)


def _parse_entry(entry: Mapping[str, Any]) -> GeofenceLocation:
    missing = [k for k in ("id", "latitude", "longitude", "radius") if entry.get(k) is None]
    if missing:
        raise ImproperlyConfigured(f"Door location entry {entry!r} is missing {', '.join(missing)}")

    try:
        latitude = float(entry["latitude"])
        longitude = float(entry["longitude"])
        radius = float(entry["radius"])
    except (TypeError, ValueError):
        raise ImproperlyConfigured(f"Door location {entry.get('id')!r} has non-numeric coordinates or radius")

    if not (math.isfinite(latitude) and math.isfinite(longitude)):
        raise ImproperlyConfigured(f"Door location {entry.get('id')!r} has non-finite coordinates")
    if not -90 <= latitude <= 90 or not -180 <= longitude <= 180:
        raise ImproperlyConfigured(f"Door location {entry.get('id')!r} has out-of-range coordinates")

    return GeofenceLocation(
        location_id=str(entry["id"]),
        display_address=str(entry.get("address") or entry.get("name") or entry["id"]),
        center_latitude=latitude,
        center_longitude=longitude,
        radius_meters=radius,
        name=str(entry.get("name") or ""),
    )


@lru_cache(maxsize=1)
def get_catalog() -> GeofenceCatalog:
    """
    Process-wide catalog built from settings.DOOR_ACCESS["LOCATIONS"].
    """
    config = getattr(settings, "DOOR_ACCESS", {}) or {}
    return GeofenceCatalog.from_config(config.get("LOCATIONS") or [])


def reload_catalog() -> GeofenceCatalog:
    get_catalog.cache_clear()
    return get_catalog()


@receiver(setting_changed)
def _reload_on_setting_change(sender, setting, **kwargs):
    if setting == "DOOR_ACCESS":
        get_catalog.cache_clear()
