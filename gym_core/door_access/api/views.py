# gym_core/door_access/api/views.py
from __future__ import annotations

from datetime import timedelta
from typing import Mapping

from django.core.exceptions import ValidationError as DjangoValidationError
from django.utils import timezone
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import ValidationError as DRFValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from gym_core.common.api.pagination import HistoryPagination, paginate
from gym_core.door_access.api.serializers import (
    AccessEventSerializer,
    CheckAccessRequestSerializer,
    DailyAccessCountSerializer,
    GeofenceLocationSerializer,
    LogAccessRequestSerializer,
    LogAccessResponseSerializer,
    RecentAccessSerializer,
)
from gym_core.door_access.engine import AccessDecisionEngine
from gym_core.door_access.filters import AccessEventFilter
from gym_core.door_access.geofence import get_catalog
from gym_core.door_access.models import AccessEvent
from gym_core.door_access.selectors import daily_breakdown, list_user_history, stats_since
from gym_core.door_access.services import AccessLogger

MAX_STATS_HOURS = 24 * 31
MAX_BREAKDOWN_DAYS = 366


def _positive_int_param(request, name: str, *, default: int, maximum: int) -> int:
    raw = request.query_params.get(name)
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except (TypeError, ValueError):
        raise DRFValidationError({name: "Must be a positive integer."})
    if value < 1 or value > maximum:
        raise DRFValidationError({name: f"Must be between 1 and {maximum}."})
    return value


class DoorAccessViewSet(viewsets.GenericViewSet):
    """
    Thin API layer:
    - check-access -> AccessDecisionEngine (no writes)
    - log-access   -> AccessLogger (the only write)
    - stats / my-history / location-stats -> selectors
    """

    permission_classes = [IsAuthenticated]

    serializer_class = AccessEventSerializer
    queryset = AccessEvent.objects.none()
    filterset_class = AccessEventFilter
    ordering_fields = ["access_time"]

    def get_engine(self) -> AccessDecisionEngine:
        return AccessDecisionEngine()

    # ----------------------------
    # Decision
    # ----------------------------
    @extend_schema(
        tags=["Door Access"],
        request=CheckAccessRequestSerializer,
        responses={
            200: OpenApiResponse(description="Access authorized: {success, message, location, distance}"),
            400: OpenApiResponse(description="LOCATION_REQUIRED or INVALID_LOCATION"),
            403: OpenApiResponse(description="TOO_FAR (distance, maxDistance, locationAddress)"),
            429: OpenApiResponse(description="RATE_LIMITED or RECENT_ACCESS (waitTime)"),
        },
    )
    @action(detail=False, methods=["post"], url_path="check-access")
    def check_access(self, request):
        # a non-object body carries no location, same as an empty one
        data = request.data if isinstance(request.data, Mapping) else {}
        decision = self.get_engine().check_access(
            user_id=request.user.id,
            location_id=data.get("locationId"),
            user_location=data.get("userLocation"),
        )
        return Response(decision.as_payload(), status=decision.http_status)

    # ----------------------------
    # Audit log write
    # ----------------------------
    @extend_schema(
        tags=["Door Access"],
        request=LogAccessRequestSerializer,
        responses={201: LogAccessResponseSerializer},
    )
    @action(detail=False, methods=["post"], url_path="log-access")
    def log_access(self, request):
        ser = LogAccessRequestSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data

        try:
            event = AccessLogger.record(
                user_id=request.user.id,
                location=data["location"],
                user_location=data.get("userLocation"),
                status=data.get("status"),
                session_id=data.get("sessionId"),
            )
        except DjangoValidationError as e:
            raise DRFValidationError({"detail": e.messages[0] if e.messages else str(e)})

        return Response(
            {
                "message": "Door access logged successfully",
                "accessId": str(event.id),
                "accessTime": event.access_time,
            },
            status=status.HTTP_201_CREATED,
        )

    # ----------------------------
    # Reads
    # ----------------------------
    @extend_schema(
        tags=["Door Access"],
        parameters=[
            OpenApiParameter(
                name="locationId",
                type=OpenApiTypes.STR,
                location=OpenApiParameter.QUERY,
                required=False,
                description="Restrict to one door.",
            ),
            OpenApiParameter(
                name="hours",
                type=OpenApiTypes.INT,
                location=OpenApiParameter.QUERY,
                required=False,
                description="Window size in hours (default 1).",
            ),
        ],
        responses={200: OpenApiResponse(description="{timeRange, stats, recentAccesses}")},
    )
    @action(detail=False, methods=["get"], url_path="stats")
    def stats(self, request):
        hours = _positive_int_param(request, "hours", default=1, maximum=MAX_STATS_HOURS)
        location_id = request.query_params.get("locationId") or None
        since = timezone.now() - timedelta(hours=hours)

        result = stats_since(
            window_start=since,
            exclude_user_id=request.user.id,
            location_id=location_id,
        )

        return Response(
            {
                "timeRange": {"hours": hours, "since": since},
                "stats": {
                    "totalAccesses": result.total_accesses,
                    "uniqueUsers": result.unique_users,
                },
                "recentAccesses": RecentAccessSerializer(result.recent_accesses, many=True).data,
            },
            status=status.HTTP_200_OK,
        )

    @extend_schema(
        tags=["Door Access"],
        parameters=[
            OpenApiParameter(
                name="limit",
                type=OpenApiTypes.INT,
                location=OpenApiParameter.QUERY,
                required=False,
                description="Page size (default 20, max 100).",
            ),
        ],
        responses={200: AccessEventSerializer(many=True)},
    )
    @action(detail=False, methods=["get"], url_path="my-history")
    def my_history(self, request):
        qs = self.filter_queryset(list_user_history(user_id=request.user.id))
        return paginate(request, qs, AccessEventSerializer, paginator=HistoryPagination())

    @extend_schema(
        tags=["Door Access"],
        parameters=[
            OpenApiParameter(
                name="days",
                type=OpenApiTypes.INT,
                location=OpenApiParameter.QUERY,
                required=False,
                description="Window size in days (default 7).",
            ),
        ],
        responses={200: OpenApiResponse(description="{locationId, timeRange, dailyBreakdown}")},
    )
    @action(detail=False, methods=["get"], url_path=r"location-stats/(?P<location_id>[^/]+)")
    def location_stats(self, request, location_id=None):
        # any logged location id, configured or not
        days = _positive_int_param(request, "days", default=7, maximum=MAX_BREAKDOWN_DAYS)
        since = timezone.now() - timedelta(days=days)

        rows = daily_breakdown(location_id=location_id, since=since)
        return Response(
            {
                "locationId": location_id,
                "timeRange": {"days": days, "since": since},
                "dailyBreakdown": DailyAccessCountSerializer(rows, many=True).data,
            },
            status=status.HTTP_200_OK,
        )

    @extend_schema(tags=["Door Access"], responses={200: GeofenceLocationSerializer(many=True)})
    @action(detail=False, methods=["get"], url_path="locations")
    def locations(self, request):
        return Response(GeofenceLocationSerializer(list(get_catalog()), many=True).data)
