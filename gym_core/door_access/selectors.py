# gym_core/door_access/selectors.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from django.conf import settings
from django.db.models import Count, QuerySet
from django.db.models.functions import TruncDate

from gym_core.door_access.constants import DEFAULT_STATS_RECENT_LIMIT
from gym_core.door_access.models import AccessEvent, AccessStatus


@dataclass(frozen=True)
class AccessStats:
    window_start: datetime
    total_accesses: int
    unique_users: int
    recent_accesses: list[AccessEvent]


@dataclass(frozen=True)
class DailyAccessCount:
    date: date
    total_accesses: int
    unique_users: int


def _recent_limit() -> int:
    config = getattr(settings, "DOOR_ACCESS", {}) or {}
    return int(config.get("STATS_RECENT_LIMIT", DEFAULT_STATS_RECENT_LIMIT))


def successful_accesses_since(
    *,
    window_start: datetime,
    exclude_user_id=None,
    location_id: str | None = None,
) -> QuerySet[AccessEvent]:
    qs = AccessEvent.objects.filter(status=AccessStatus.SUCCESS, access_time__gte=window_start)

    if exclude_user_id is not None:
        qs = qs.exclude(user_id=exclude_user_id)
    if location_id:
        qs = qs.filter(location_id=location_id)

    return qs


def stats_since(
    *,
    window_start: datetime,
    exclude_user_id,
    location_id: str | None = None,
    recent_limit: Optional[int] = None,
) -> AccessStats:
    """
    Successful entries since window_start, excluding the caller.
    total_accesses counts events; unique_users counts each person once.
    """
    qs = successful_accesses_since(
        window_start=window_start,
        exclude_user_id=exclude_user_id,
        location_id=location_id,
    )

    totals = qs.aggregate(
        total_accesses=Count("id"),
        unique_users=Count("user", distinct=True),
    )

    limit = recent_limit if recent_limit is not None else _recent_limit()
    recent = list(qs.select_related("user").order_by("-access_time")[: max(0, limit)])

    return AccessStats(
        window_start=window_start,
        total_accesses=totals["total_accesses"] or 0,
        unique_users=totals["unique_users"] or 0,
        recent_accesses=recent,
    )


def daily_breakdown(*, location_id: str, since: datetime) -> list[DailyAccessCount]:
    """
    Per-day successful entries for one door, bucketed by the gym's local
    calendar date (settings.TIME_ZONE), oldest first.
    """
    rows = (
        AccessEvent.objects.filter(
            location_id=location_id,
            status=AccessStatus.SUCCESS,
            access_time__gte=since,
        )
        .annotate(day=TruncDate("access_time"))
        .values("day")
        .annotate(
            total_accesses=Count("id"),
            unique_users=Count("user", distinct=True),
        )
        .order_by("day")
    )

    return [
        DailyAccessCount(
            date=row["day"],
            total_accesses=row["total_accesses"],
            unique_users=row["unique_users"],
        )
        for row in rows
    ]


def list_user_history(*, user_id) -> QuerySet[AccessEvent]:
    return AccessEvent.objects.filter(user_id=user_id).order_by("-access_time")
