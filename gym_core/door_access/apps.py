# gym_core/door_access/apps.py
from django.apps import AppConfig


class DoorAccessConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "gym_core.door_access"
    label = "door_access"

    def ready(self):
        # Fail fast on a bad geofence table instead of at the first door check.
        from gym_core.door_access.geofence import get_catalog

        get_catalog()
