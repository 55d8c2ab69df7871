"""Core middleware for SIIS."""

from .session import SHOPPER_SESSION_KEY, get_current_user


class SessionStateMiddleware:
    """Middleware to mirror the signed-in shopper onto the request.

    Sets request.shopper to a SessionUser, or None when signed out.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        shopper = get_current_user(request)

        if shopper is None and SHOPPER_SESSION_KEY in request.session:
            # Clear unreadable identity
            del request.session[SHOPPER_SESSION_KEY]

        request.shopper = shopper

        response = self.get_response(request)
        return response
