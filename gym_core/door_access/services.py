# gym_core/door_access/services.py
from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from django.core.exceptions import ValidationError
from django.db import DatabaseError, transaction

from gym_core.common.events import publish
from gym_core.door_access.engine import UserLocation, coerce_user_location
from gym_core.door_access.exceptions import StoreUnavailable
from gym_core.door_access.models import AccessEvent, AccessStatus

logger = logging.getLogger("gym.door_access")

ACCESS_LOGGED_EVENT = "door_access.logged"


class AccessLogger:
    """
    Access log write-model.

    Notes:
    - Only writer of AccessEvent; one row per attempt, never updated.
    - Independent of AccessDecisionEngine: callers check, act, then record the outcome.
    - accessTime is always the server clock (auto_now_add).
    - Events are published immediately (not on_commit) due to pytest transaction semantics.
    """

    REQUIRED_LOCATION_KEYS = ("id", "name", "ip")

    @staticmethod
    def _clean_location(location: Mapping[str, Any] | None) -> dict[str, str]:
        if not location or not isinstance(location, Mapping):
            raise ValidationError("Location information required (id, name, ip)")

        cleaned = {k: str(location.get(k) or "").strip() for k in AccessLogger.REQUIRED_LOCATION_KEYS}
        if not all(cleaned.values()):
            raise ValidationError("Location information required (id, name, ip)")
        return cleaned

    @staticmethod
    def record(
        *,
        user_id,
        location: Mapping[str, Any],
        user_location: UserLocation | Mapping[str, Any] | None = None,
        status: str = AccessStatus.SUCCESS,
        session_id: Optional[str] = None,
    ) -> AccessEvent:
        if user_id is None:
            raise ValidationError("user_id is required.")

        loc = AccessLogger._clean_location(location)

        status = status or AccessStatus.SUCCESS
        if status not in AccessStatus.values:
            raise ValidationError(f"Invalid status {status!r}. Allowed: {sorted(AccessStatus.values)}")

        position = coerce_user_location(user_location)

        try:
            with transaction.atomic():
                event = AccessEvent.objects.create(
                    user_id=user_id,
                    location_id=loc["id"],
                    location_name=loc["name"],
                    location_ip=loc["ip"],
                    latitude=position.latitude if position else None,
                    longitude=position.longitude if position else None,
                    accuracy=position.accuracy if position else None,
                    status=status,
                    session_id=session_id or None,
                )
        except DatabaseError:
            logger.exception("Access log write failed user=%s location=%s", user_id, loc["id"])
            raise StoreUnavailable()

        logger.info(
            "door access logged id=%s user=%s location=%s status=%s",
            event.id,
            user_id,
            event.location_id,
            event.status,
        )

        publish(
            ACCESS_LOGGED_EVENT,
            {
                "access_id": str(event.id),
                "user_id": user_id,
                "location_id": event.location_id,
                "status": event.status,
                "session_id": event.session_id,
                "access_time": event.access_time.isoformat(),
            },
        )
        return event
