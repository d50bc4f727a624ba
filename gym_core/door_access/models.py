# gym_core/door_access/models.py
import uuid

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models


class AccessStatus(models.TextChoices):
    SUCCESS = "success", "Success"
    FAILED = "failed", "Failed"
    TIMEOUT = "timeout", "Timeout"
    DENIED = "denied", "Denied"


class AccessEvent(models.Model):
    """
    One door-access attempt. Append-only: written once by AccessLogger,
    never updated or deleted (audit + statistics source of truth).
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="door_access_events",
    )

    # Door identity as reported by the client (id matches the geofence catalog)
    location_id = models.CharField(max_length=64, db_index=True)
    location_name = models.CharField(max_length=255)
    location_ip = models.CharField(max_length=64)

    # Reported device position (optional on the log, mandatory on the check)
    latitude = models.FloatField(null=True, blank=True)
    longitude = models.FloatField(null=True, blank=True)
    accuracy = models.FloatField(null=True, blank=True)

    access_time = models.DateTimeField(auto_now_add=True, db_index=True)
    status = models.CharField(
        max_length=16,
        choices=AccessStatus.choices,
        default=AccessStatus.SUCCESS,
        db_index=True,
    )
    # groups people entering together on a single unlock
    session_id = models.CharField(max_length=128, null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "door_access_event"
        indexes = [
            models.Index(fields=["user", "access_time"], name="door_evt_user_time_idx"),
            models.Index(fields=["location_id", "access_time"], name="door_evt_loc_time_idx"),
            models.Index(fields=["user", "location_id", "access_time"], name="door_evt_user_loc_time_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=~models.Q(location_id=""),
                name="ck_door_access_location_id_not_empty",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.user_id} @ {self.location_id} [{self.status}]"

    @property
    def location(self) -> dict:
        return {"id": self.location_id, "name": self.location_name, "ip": self.location_ip}

    @property
    def user_location(self) -> dict | None:
        if self.latitude is None or self.longitude is None:
            return None
        return {"latitude": self.latitude, "longitude": self.longitude, "accuracy": self.accuracy}

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("AccessEvent is append-only and cannot be modified.")
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("AccessEvent is append-only and cannot be deleted.")
