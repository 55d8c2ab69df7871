"""Core app configuration."""

from django.apps import AppConfig


class CoreConfig(AppConfig):
    """Configuration for the core application."""

    name = "siis.core"
    verbose_name = "SIIS Core"
    default_auto_field = "django.db.models.BigAutoField"
