import pytest

# Reference geofence: door "1" (Mont-Royal), radius 50 m
MONT_ROYAL = (45.5240, -73.5897)


@pytest.fixture
def mont_royal_position():
    return {"latitude": MONT_ROYAL[0], "longitude": MONT_ROYAL[1], "accuracy": 8}
