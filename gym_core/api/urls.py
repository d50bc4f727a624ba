# gym_core/api/urls.py
from __future__ import annotations

from rest_framework.routers import DefaultRouter

from gym_core.door_access.api.views import DoorAccessViewSet

router = DefaultRouter()

router.register(r"door-access", DoorAccessViewSet, basename="door-access")

urlpatterns = [
    *router.urls,
]
