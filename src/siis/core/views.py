"""Core views for SIIS."""

import logging

from django.contrib import messages
from django.http import JsonResponse
from django.shortcuts import redirect, render
from django.utils.http import url_has_allowed_host_and_scheme
from django.views import View
from django.views.generic import FormView

from siis.gateway import GatewayError, get_gateway

from . import identity
from .forms import LoginForm, RegisterForm
from .session import log_in, log_out

logger = logging.getLogger(__name__)


def health_check(request):
    """Health check endpoint for container orchestration."""
    try:
        # A missing document still proves Firestore answered
        get_gateway().products.get("__health__")
        return JsonResponse({"status": "healthy", "firestore": "connected"})
    except GatewayError as e:
        return JsonResponse(
            {"status": "unhealthy", "error": str(e)},
            status=503,
        )


def page_not_found(request, exception=None):
    return render(request, "404.html", status=404)


class NextUrlMixin:
    """Redirect to a same-site ``next`` URL after success."""

    default_next = "store:home"

    def get_next_url(self):
        next_url = self.request.POST.get("next") or self.request.GET.get("next")
        if next_url and url_has_allowed_host_and_scheme(
            next_url,
            allowed_hosts={self.request.get_host()},
            require_https=self.request.is_secure(),
        ):
            return next_url
        return None

    def get_success_url(self):
        return self.get_next_url() or self.default_next

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context["next"] = self.get_next_url() or ""
        return context


class LoginView(NextUrlMixin, FormView):
    """Email and password sign-in."""

    template_name = "core/login.html"
    form_class = LoginForm

    def dispatch(self, request, *args, **kwargs):
        if getattr(request, "shopper", None) is not None:
            return redirect(self.get_success_url())
        return super().dispatch(request, *args, **kwargs)

    def form_valid(self, form):
        try:
            user = identity.sign_in(form.cleaned_data["email"], form.cleaned_data["password"])
        except identity.IdentityError as e:
            form.add_error(None, e.message)
            return self.form_invalid(form)

        log_in(self.request, user)
        messages.success(self.request, f"Welcome back, {user.display_name}.")
        return redirect(self.get_success_url())


class RegisterView(NextUrlMixin, FormView):
    """Create a member account and sign in."""

    template_name = "core/register.html"
    form_class = RegisterForm

    def form_valid(self, form):
        data = form.cleaned_data
        try:
            user = identity.register(
                email=data["email"],
                password=data["password"],
                display_name=data["display_name"],
                phone=data["phone"],
                address=data["address"],
            )
        except identity.IdentityError as e:
            if e.code == "email_exists":
                form.add_error("email", e.message)
            else:
                form.add_error(None, e.message)
            return self.form_invalid(form)

        log_in(self.request, user)
        messages.success(self.request, "Your account has been created.")
        return redirect(self.get_success_url())


class LogoutView(View):
    """Sign out and forget the cart."""

    def post(self, request):
        log_out(request)
        messages.info(request, "You have been signed out.")
        return redirect("store:home")
