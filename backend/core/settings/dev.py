# flake8: noqa
"""
Development settings for the personal finance ledger.

Local PostgreSQL, permissive CORS for the frontend dev server and DEBUG-level
logging to a rotating file. Ledger knobs can be overridden from ``.env.dev``.
"""

import logging

from .base import *
from .utils import load_environment_config

config = load_environment_config("development")

ENVIRONMENT = "development"

# =============================================================================
# SECURITY
# =============================================================================

DEBUG = True
SECRET_KEY = config("SECRET_KEY", default="django-insecure-ledger-dev-key")
ALLOWED_HOSTS = ["localhost", "127.0.0.1", "0.0.0.0"]

CORS_ALLOW_ALL_ORIGINS = True

# =============================================================================
# DATABASE
# =============================================================================

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.postgresql",
        "NAME": config("POSTGRES_DB", default="finance_ledger"),
        "USER": config("POSTGRES_USER", default="postgres"),
        "PASSWORD": config("POSTGRES_PASSWORD", default="postgres"),
        "HOST": config("DB_HOST", default="localhost"),
        "PORT": config("DB_PORT", default="5432"),
    }
}

# =============================================================================
# LEDGER OVERRIDES
# =============================================================================

LEDGER_CUTOFF_HOUR_UTC = config("LEDGER_CUTOFF_HOUR_UTC", default=3, cast=int)
CURRENT_USER_CACHE_TTL = config("CURRENT_USER_CACHE_TTL", default=60, cast=int)
SLOW_REQUEST_THRESHOLD_MS = config("SLOW_REQUEST_THRESHOLD_MS", default=500, cast=int)

# =============================================================================
# LOGGING
# =============================================================================

# "DEBUG" prints every SQL statement
DB_QUERY_LOGGING_LEVEL = config("DB_QUERY_LOGGING_LEVEL", default="INFO")

LOGGING["handlers"]["ledger_dev_file"] = {
    "level": "DEBUG",
    "class": "logging.handlers.RotatingFileHandler",
    "filename": BASE_DIR / "logs" / "ledger_dev.log",
    "maxBytes": 10 * 1024 * 1024,
    "backupCount": 3,
    "formatter": "structured",
    "encoding": "utf-8",
}

for logger_name in ("users", "finance", "core"):
    LOGGING["loggers"][logger_name].update(
        {"handlers": ["console", "ledger_dev_file"], "level": "DEBUG"}
    )
LOGGING["loggers"]["django.db.backends"]["level"] = DB_QUERY_LOGGING_LEVEL

logging.getLogger(__name__).info(
    "Development settings loaded",
    extra={
        "environment": ENVIRONMENT,
        "cutoff_hour_utc": LEDGER_CUTOFF_HOUR_UTC,
        "db_query_logging_level": DB_QUERY_LOGGING_LEVEL,
        "action": "environment_startup",
        "component": "settings",
    },
)
