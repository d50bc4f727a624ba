# gym_core/door_access/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from gym_core.door_access.models import AccessEvent, AccessStatus


class UserLocationSerializer(serializers.Serializer):
    latitude = serializers.FloatField(min_value=-90, max_value=90)
    longitude = serializers.FloatField(min_value=-180, max_value=180)
    accuracy = serializers.FloatField(required=False, allow_null=True, min_value=0)


class DoorLocationSerializer(serializers.Serializer):
    id = serializers.CharField(max_length=64)
    name = serializers.CharField(max_length=255)
    ip = serializers.CharField(max_length=64)


class CheckAccessRequestSerializer(serializers.Serializer):
    """
    Schema only: the check endpoint reports missing input as LOCATION_REQUIRED
    instead of a serializer validation error.
    """
    locationId = serializers.CharField()
    userLocation = UserLocationSerializer()


class LogAccessRequestSerializer(serializers.Serializer):
    location = DoorLocationSerializer()
    status = serializers.ChoiceField(choices=AccessStatus.choices, default=AccessStatus.SUCCESS)
    sessionId = serializers.CharField(max_length=128, required=False, allow_null=True, allow_blank=True)
    userLocation = UserLocationSerializer(required=False, allow_null=True)


class LogAccessResponseSerializer(serializers.Serializer):
    message = serializers.CharField()
    accessId = serializers.UUIDField()
    accessTime = serializers.DateTimeField()


class AccessEventSerializer(serializers.ModelSerializer):
    location = serializers.SerializerMethodField()
    userLocation = serializers.SerializerMethodField()
    accessTime = serializers.DateTimeField(source="access_time", read_only=True)
    sessionId = serializers.CharField(source="session_id", read_only=True, allow_null=True)

    class Meta:
        model = AccessEvent
        fields = ["id", "location", "userLocation", "accessTime", "status", "sessionId"]
        read_only_fields = fields

    def get_location(self, obj: AccessEvent) -> dict:
        return obj.location

    def get_userLocation(self, obj: AccessEvent) -> dict | None:
        return obj.user_location


class RecentAccessSerializer(serializers.ModelSerializer):
    user = serializers.SerializerMethodField()
    location = serializers.SerializerMethodField()
    accessTime = serializers.DateTimeField(source="access_time", read_only=True)

    class Meta:
        model = AccessEvent
        fields = ["id", "user", "location", "accessTime", "status"]
        read_only_fields = fields

    def get_user(self, obj: AccessEvent) -> dict:
        u = obj.user
        if u is None:
            return {"name": "Unknown", "username": None}
        full_name = f"{getattr(u, 'first_name', '') or ''} {getattr(u, 'last_name', '') or ''}".strip()
        username = getattr(u, "username", None)
        return {"name": full_name or username or "Unknown", "username": username}

    def get_location(self, obj: AccessEvent) -> dict:
        return obj.location


class GeofenceLocationSerializer(serializers.Serializer):
    id = serializers.CharField(source="location_id")
    name = serializers.CharField()
    address = serializers.CharField(source="display_address")
    latitude = serializers.FloatField(source="center_latitude")
    longitude = serializers.FloatField(source="center_longitude")
    radius = serializers.FloatField(source="radius_meters")


class DailyAccessCountSerializer(serializers.Serializer):
    date = serializers.DateField()
    totalAccesses = serializers.IntegerField(source="total_accesses")
    uniqueUsers = serializers.IntegerField(source="unique_users")
