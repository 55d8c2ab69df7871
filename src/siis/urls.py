"""URL configuration for SIIS project."""

from django.urls import include, path

from siis.core.views import health_check

urlpatterns = [
    # Health check
    path("health/", health_check, name="health_check"),

    # Admin console
    path("admin/", include("siis.console.urls")),

    # Sign-in
    path("", include("siis.core.urls")),

    # Storefront
    path("", include("siis.store.urls")),
]

handler404 = "siis.core.views.page_not_found"
