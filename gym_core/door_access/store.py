# gym_core/door_access/store.py
from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, Protocol

from django.db import DatabaseError

from gym_core.door_access.exceptions import StoreUnavailable
from gym_core.door_access.models import AccessEvent, AccessStatus

logger = logging.getLogger("gym.door_access")


class AccessEventStore(Protocol):
    """
    Read port the decision engine needs from the access log.
    """

    def count_attempts_since(self, *, user_id: int, location_id: str, since: datetime) -> int:
        ...

    def latest_success_since(self, *, user_id: int, location_id: str, since: datetime) -> Optional[AccessEvent]:
        ...


class DjangoAccessEventStore:
    """
    AccessEventStore backed by the AccessEvent table.
    Database failures surface as StoreUnavailable.
    """

    def count_attempts_since(self, *, user_id: int, location_id: str, since: datetime) -> int:
        try:
            return AccessEvent.objects.filter(
                user_id=user_id,
                location_id=location_id,
                access_time__gte=since,
            ).count()
        except DatabaseError:
            logger.exception("Access log read failed (attempt count) user=%s location=%s", user_id, location_id)
            raise StoreUnavailable()

    def latest_success_since(self, *, user_id: int, location_id: str, since: datetime) -> Optional[AccessEvent]:
        try:
            return (
                AccessEvent.objects.filter(
                    user_id=user_id,
                    location_id=location_id,
                    status=AccessStatus.SUCCESS,
                    access_time__gte=since,
                )
                .order_by("-access_time")
                .first()
            )
        except DatabaseError:
            logger.exception("Access log read failed (recent success) user=%s location=%s", user_id, location_id)
            raise StoreUnavailable()
