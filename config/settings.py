"""Django settings for the ticketing project.

Values come from the environment so the same module serves development,
tests and deployment.
"""

import os
from datetime import timedelta
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = os.environ.get("DJANGO_SECRET_KEY", "insecure-development-key")
DEBUG = os.environ.get("DJANGO_DEBUG", "false").lower() == "true"
ALLOWED_HOSTS = [host for host in os.environ.get("DJANGO_ALLOWED_HOSTS", "").split(",") if host]

INSTALLED_APPS = [
    "ticketing.apps.TicketingConfig",
]

DATABASES = {
    "default": {
        "ENGINE": os.environ.get("DATABASE_ENGINE", "django.db.backends.sqlite3"),
        "NAME": os.environ.get("DATABASE_NAME", str(BASE_DIR / "db.sqlite3")),
        "USER": os.environ.get("DATABASE_USER", ""),
        "PASSWORD": os.environ.get("DATABASE_PASSWORD", ""),
        "HOST": os.environ.get("DATABASE_HOST", ""),
        "PORT": os.environ.get("DATABASE_PORT", ""),
    }
}

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

USE_TZ = True
TIME_ZONE = "UTC"

TICKETING = {
    "MIN_EVENT_LEAD_TIME": timedelta(
        seconds=int(os.environ.get("TICKETING_MIN_EVENT_LEAD_SECONDS", 24 * 60 * 60))
    ),
    "MAX_TIER_CAPACITY": int(os.environ.get("TICKETING_MAX_TIER_CAPACITY", 100_000)),
    "ESCROW_ACCOUNT": os.environ.get("TICKETING_ESCROW_ACCOUNT", "ticketing-escrow"),
    "STORE": os.environ.get("TICKETING_STORE", "ticketing.stores.django_store.DjangoStore"),
}

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "default": {
            "format": "%(asctime)s %(levelname)s %(name)s %(message)s",
        }
    },
    "handlers": {
        "default": {
            "class": "logging.StreamHandler",
            "formatter": "default",
        }
    },
    "root": {
        "handlers": ["default"],
        "level": "WARNING",
    },
    "loggers": {
        "ticketing": {
            "level": LOG_LEVEL,
        },
    },
}
