"""Console app configuration."""

from django.apps import AppConfig


class ConsoleConfig(AppConfig):
    """Configuration for the admin console application."""

    name = "siis.console"
    verbose_name = "SIIS Admin Console"
    default_auto_field = "django.db.models.BigAutoField"
