# gym_core/conftest.py
import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from gym_core.door_access.models import AccessEvent


@pytest.fixture
def user(db):
    User = get_user_model()
    return User.objects.create_user(
        username="climber",
        password="testpass",
        first_name="Alex",
        last_name="Honnold",
        is_active=True,
    )


@pytest.fixture
def other_user(db):
    User = get_user_model()
    return User.objects.create_user(username="belayer", password="testpass", is_active=True)


@pytest.fixture
def make_user(db):
    User = get_user_model()
    counter = {"n": 0}

    def _make(**kwargs):
        counter["n"] += 1
        kwargs.setdefault("username", f"member{counter['n']}")
        kwargs.setdefault("password", "testpass")
        return User.objects.create_user(**kwargs)

    return _make


@pytest.fixture
def api_client(user):
    c = APIClient()
    c.force_authenticate(user=user)
    return c


@pytest.fixture
def door():
    """Location payload as sent by the mobile app for door "1"."""
    return {"id": "1", "name": "PIERRE MONT-ROYAL", "ip": "10.0.0.21"}


@pytest.fixture
def make_event(db, door):
    """
    Create an AccessEvent and (optionally) backdate it.
    access_time is auto_now_add, so backdating goes through a queryset update.
    """

    def _make(user, *, at=None, status="success", location=None, session_id=None):
        loc = location or door
        event = AccessEvent.objects.create(
            user=user,
            location_id=loc["id"],
            location_name=loc["name"],
            location_ip=loc["ip"],
            status=status,
            session_id=session_id,
        )
        if at is not None:
            AccessEvent.objects.filter(pk=event.pk).update(access_time=at)
            event = AccessEvent.objects.get(pk=event.pk)
        return event

    return _make
