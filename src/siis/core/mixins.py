"""Core mixins for view access control."""

from urllib.parse import urlencode

from django.core.exceptions import PermissionDenied
from django.shortcuts import redirect, resolve_url


class ShopperRequiredMixin:
    """Mixin for views that need a signed-in shopper."""

    login_url = "core:login"
    redirect_field_name = "next"

    def get_login_url(self):
        return resolve_url(self.login_url)

    def handle_no_permission(self):
        query = urlencode({self.redirect_field_name: self.request.get_full_path()})
        return redirect(f"{self.get_login_url()}?{query}")

    def dispatch(self, request, *args, **kwargs):
        if getattr(request, "shopper", None) is None:
            return self.handle_no_permission()
        return super().dispatch(request, *args, **kwargs)


class AdminRequiredMixin(ShopperRequiredMixin):
    """Mixin for admin console views.

    Anonymous visitors are sent to the login page; signed-in shoppers
    without admin rights get a 403.
    """

    def dispatch(self, request, *args, **kwargs):
        shopper = getattr(request, "shopper", None)
        if shopper is None:
            return self.handle_no_permission()
        if not shopper.is_admin:
            raise PermissionDenied("Admin access required.")
        return super().dispatch(request, *args, **kwargs)

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context["is_console"] = True
        return context
