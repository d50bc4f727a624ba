# gym_core/door_access/constants.py


class AccessCode:
    """
    Machine-readable reasons returned by the door-access check.
    Mobile clients switch on these strings; never rename them.
    """
    LOCATION_REQUIRED = "LOCATION_REQUIRED"
    RATE_LIMITED = "RATE_LIMITED"
    INVALID_LOCATION = "INVALID_LOCATION"
    TOO_FAR = "TOO_FAR"
    RECENT_ACCESS = "RECENT_ACCESS"


# HTTP status per rejection code (400 missing input, 429 throttled, 403 geofence)
HTTP_STATUS_BY_CODE = {
    AccessCode.LOCATION_REQUIRED: 400,
    AccessCode.RATE_LIMITED: 429,
    AccessCode.INVALID_LOCATION: 400,
    AccessCode.TOO_FAR: 403,
    AccessCode.RECENT_ACCESS: 429,
}

DEFAULT_RATE_LIMIT_WINDOW_SECONDS = 5 * 60
DEFAULT_RATE_LIMIT_MAX_ATTEMPTS = 3
DEFAULT_RECENT_ACCESS_WINDOW_SECONDS = 60
DEFAULT_STATS_RECENT_LIMIT = 10
