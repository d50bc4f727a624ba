# gym_core/door_access/filters.py
from __future__ import annotations

import django_filters

from gym_core.door_access.models import AccessEvent, AccessStatus


class AccessEventFilter(django_filters.FilterSet):
    """
    Query params for the personal history list:
      - status=success|failed|timeout|denied
      - location_id=<door id>
      - since / until = ISO datetimes (inclusive)
    """

    status = django_filters.ChoiceFilter(choices=AccessStatus.choices)
    location_id = django_filters.CharFilter(field_name="location_id")
    since = django_filters.IsoDateTimeFilter(field_name="access_time", lookup_expr="gte")
    until = django_filters.IsoDateTimeFilter(field_name="access_time", lookup_expr="lte")

    class Meta:
        model = AccessEvent
        fields = ["status", "location_id", "since", "until"]
