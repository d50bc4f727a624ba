# config/settings/base.py
from pathlib import Path
import os
from dotenv import load_dotenv
from datetime import timedelta


BASE_DIR = Path(__file__).resolve().parent.parent.parent
load_dotenv(BASE_DIR / ".env")

SECRET_KEY = os.getenv("DJANGO_SECRET_KEY", "unsafe-dev-key")
DEBUG = os.getenv("DJANGO_DEBUG", "0") == "1"
ALLOWED_HOSTS = ["*"]

INSTALLED_APPS = [
    # Django
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",

    # Third-party
    "corsheaders",
    "rest_framework",
    "rest_framework_simplejwt",
    "drf_spectacular",
    "django_filters",

    # Domain apps
    "gym_core.common.apps.CommonConfig",
    "gym_core.iam.apps.IamConfig",
    "gym_core.door_access.apps.DoorAccessConfig",
]

MIDDLEWARE = [
    "gym_core.common.middleware.RequestIdMiddleware",
    "corsheaders.middleware.CorsMiddleware",
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]


ROOT_URLCONF = "config.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    }
]

WSGI_APPLICATION = "config.wsgi.application"

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.postgresql",
        "NAME": os.getenv("DB_NAME", "gym"),
        "USER": os.getenv("DB_USER", "gym"),
        "PASSWORD": os.getenv("DB_PASSWORD", "gym"),
        "HOST": os.getenv("DB_HOST", "127.0.0.1"),
        "PORT": os.getenv("DB_PORT", "5432"),
    }
}

AUTH_PASSWORD_VALIDATORS = [
    {"NAME": "django.contrib.auth.password_validation.UserAttributeSimilarityValidator"},
    {"NAME": "django.contrib.auth.password_validation.MinimumLengthValidator"},
    {"NAME": "django.contrib.auth.password_validation.CommonPasswordValidator"},
    {"NAME": "django.contrib.auth.password_validation.NumericPasswordValidator"},
]

LANGUAGE_CODE = "en-us"
# Daily statistics are bucketed in the gym's local calendar.
TIME_ZONE = "America/Toronto"
USE_I18N = True
USE_TZ = True

STATIC_URL = "static/"
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": (
        "gym_core.iam.auth.CookieOrHeaderJWTAuthentication",
    ),
    "DEFAULT_PERMISSION_CLASSES": (
        "rest_framework.permissions.IsAuthenticated",
    ),
    "DEFAULT_SCHEMA_CLASS": "drf_spectacular.openapi.AutoSchema",
    "EXCEPTION_HANDLER": "gym_core.common.api.exceptions.api_exception_handler",
    "DEFAULT_FILTER_BACKENDS": [
        "django_filters.rest_framework.DjangoFilterBackend",
        "rest_framework.filters.OrderingFilter",
    ],
    "DEFAULT_PAGINATION_CLASS": "gym_core.common.api.pagination.DefaultPagination",
}

SPECTACULAR_SETTINGS = {
    "TITLE": "Gym Backend API",
    "DESCRIPTION": "Door access, geofencing and usage statistics",
    "VERSION": "0.1.0",
    "COMPONENT_SPLIT_REQUEST": True,
    "SORT_OPERATIONS": True,
    "SECURITY": [
        {"BearerOrCookieJWT": []}
    ],
}

SIMPLE_JWT = {
    "ACCESS_TOKEN_LIFETIME": timedelta(minutes=30),
    "REFRESH_TOKEN_LIFETIME": timedelta(days=14),
    "AUTH_COOKIE": "gym_access",
    "AUTH_COOKIE_SECURE": False,   # set True in production (HTTPS)
}

# CORS (development)
CORS_ALLOW_ALL_ORIGINS = True
CORS_ALLOW_CREDENTIALS = True

# Door access: geofences + anti-spam windows
DOOR_ACCESS = {
    "RATE_LIMIT_WINDOW_SECONDS": 5 * 60,
    "RATE_LIMIT_MAX_ATTEMPTS": 3,
    "RECENT_ACCESS_WINDOW_SECONDS": 60,
    "STATS_RECENT_LIMIT": 10,
    "LOCATIONS": [
        {
            "id": "1",
            "name": "PIERRE MONT-ROYAL",
            "address": "2308 av mont-royal E, Montreal",
            "latitude": 45.5240,
            "longitude": -73.5897,
            "radius": 50,
        },
        {
            "id": "2",
            "name": "PIERRE SAINTE-CATHERINE",
            "address": "Sainte-Catherine Street, Montreal",
            "latitude": 45.5017,
            "longitude": -73.5673,
            "radius": 50,
        },
        {
            "id": "3",
            "name": "PIERRE SAINT-LAURENT",
            "address": "Saint-Laurent Boulevard, Montreal",
            "latitude": 45.5600,
            "longitude": -73.5400,
            "radius": 50,
        },
        {
            "id": "4",
            "name": "PIERRE CHINA TOWN",
            "address": "China Town, Montreal",
            "latitude": 45.5080,
            "longitude": -73.5600,
            "radius": 50,
        },
        {
            "id": "5",
            "name": "PIERRE MANSFIELD",
            "address": "Mansfield Street, Montreal",
            "latitude": 45.5030,
            "longitude": -73.5780,
            "radius": 50,
        },
        {
            "id": "6",
            "name": "PIERRE MILE END",
            "address": "Mile End, Montreal",
            "latitude": 45.5250,
            "longitude": -73.6050,
            "radius": 50,
        },
    ],
}

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "verbose": {
            "format": "%(asctime)s %(levelname)s [%(name)s] %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "verbose",
        },
    },
    "root": {
        "handlers": ["console"],
        "level": "WARNING",
    },
    "loggers": {
        "gym": {
            "handlers": ["console"],
            "level": os.getenv("DJANGO_LOG_LEVEL", "INFO"),
            "propagate": False,
        },
    },
}
