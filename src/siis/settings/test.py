"""Test settings."""

from .base import *  # noqa: F401,F403

DEBUG = False

SECRET_KEY = "test-secret-key-not-for-production"

ALLOWED_HOSTS = ["testserver"]

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

FIREBASE_API_KEY = "test-api-key"

SIIS = {
    **SIIS,  # noqa: F405
    "ADMIN_EMAILS": ["admin@siis.test"],
    "PERSIST_CHECKOUT_ORDERS": False,
}

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "handlers": {"null": {"class": "logging.NullHandler"}},
    "root": {"handlers": ["null"]},
}
