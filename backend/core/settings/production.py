# flake8: noqa
"""
Production settings for the personal finance ledger.

PostgreSQL with persistent connections, strict CORS and HTTPS, static files
served by whitenoise and JSON logs for aggregation. Every secret comes from
``.env.production`` or the process environment.
"""

import logging

from .base import *
from .utils import load_environment_config

config = load_environment_config("production")

ENVIRONMENT = "production"


def _csv(value):
    return [item.strip() for item in value.split(",") if item.strip()]


# =============================================================================
# SECURITY
# =============================================================================

DEBUG = False
SECRET_KEY = config("SECRET_KEY")
ALLOWED_HOSTS = config("ALLOWED_HOSTS", cast=_csv)

CORS_ALLOWED_ORIGINS = config("CORS_ALLOWED_ORIGINS", cast=_csv)
CORS_ALLOW_ALL_ORIGINS = False

SECURE_SSL_REDIRECT = config("SECURE_SSL_REDIRECT", default=True, cast=bool)
SECURE_PROXY_SSL_HEADER = ("HTTP_X_FORWARDED_PROTO", "https")
SESSION_COOKIE_SECURE = True
CSRF_COOKIE_SECURE = True
SECURE_CONTENT_TYPE_NOSNIFF = True

REST_FRAMEWORK["DEFAULT_THROTTLE_RATES"]["auth"] = config(
    "AUTH_THROTTLE_RATE", default="5/min"
)

# =============================================================================
# DATABASE
# =============================================================================

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.postgresql",
        "NAME": config("POSTGRES_DB"),
        "USER": config("POSTGRES_USER"),
        "PASSWORD": config("POSTGRES_PASSWORD"),
        "HOST": config("DB_HOST"),
        "PORT": config("DB_PORT", default="5432"),
        "CONN_MAX_AGE": 60,
        "OPTIONS": {"connect_timeout": 5},
    }
}

LEDGER_CUTOFF_HOUR_UTC = config("LEDGER_CUTOFF_HOUR_UTC", default=3, cast=int)

# =============================================================================
# STATIC FILES
# =============================================================================

MIDDLEWARE.insert(1, "whitenoise.middleware.WhiteNoiseMiddleware")
STORAGES = {
    "default": {"BACKEND": "django.core.files.storage.FileSystemStorage"},
    "staticfiles": {
        "BACKEND": "whitenoise.storage.CompressedManifestStaticFilesStorage"
    },
}

# =============================================================================
# LOGGING
# =============================================================================

LOG_DIR = config("LOG_DIR", default="/var/log/finance-ledger")
os.makedirs(LOG_DIR, exist_ok=True)


def _json_file(filename, level, size_mb):
    return {
        "level": level,
        "class": "logging.handlers.RotatingFileHandler",
        "filename": os.path.join(LOG_DIR, filename),
        "maxBytes": size_mb * 1024 * 1024,
        "backupCount": 10,
        "formatter": "json",
        "encoding": "utf-8",
    }


LOGGING["handlers"].update(
    {
        "ledger_file": _json_file("ledger.log", "INFO", 100),
        "ledger_errors": _json_file("ledger_errors.log", "ERROR", 50),
        "security_file": _json_file("security.log", "WARNING", 50),
    }
)

for logger_name in ("django", "users", "finance", "core"):
    LOGGING["loggers"][logger_name]["handlers"] = [
        "console",
        "ledger_file",
        "ledger_errors",
    ]
LOGGING["loggers"]["django.security"]["handlers"] = ["security_file"]
LOGGING["loggers"]["django.db.backends"]["level"] = "ERROR"

logging.getLogger(__name__).info(
    "Production settings loaded",
    extra={
        "environment": ENVIRONMENT,
        "allowed_hosts": ALLOWED_HOSTS,
        "action": "environment_startup",
        "component": "settings",
    },
)
