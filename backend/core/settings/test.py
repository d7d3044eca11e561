# flake8: noqa
"""
Test environment settings for Personal Finance application.

In-memory SQLite, local-memory cache and a fast password hasher so the
pytest suite runs without external services.
"""

from .base import *

ENVIRONMENT = "test"

DEBUG = False
SECRET_KEY = "django-insecure-test-key"
ALLOWED_HOSTS = ["testserver", "localhost"]

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        "LOCATION": "personal-finance-tests",
    }
}

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

CORS_ALLOW_ALL_ORIGINS = True

# Keep test output quiet; tests patch module loggers where they assert on logs
for logger_name in ["django", "users", "finance", "core"]:
    LOGGING["loggers"][logger_name]["level"] = "WARNING"
