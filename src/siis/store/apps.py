"""Store app configuration."""

from django.apps import AppConfig


class StoreConfig(AppConfig):
    """Configuration for the storefront application."""

    name = "siis.store"
    verbose_name = "SIIS Store"
    default_auto_field = "django.db.models.BigAutoField"
