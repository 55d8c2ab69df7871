"""Tests for the shopper session and access mixins."""

import pytest
from django.contrib.sessions.backends.signed_cookies import SessionStore
from django.http import HttpResponse
from django.test import RequestFactory

from siis.core.middleware import SessionStateMiddleware
from siis.core.session import SHOPPER_SESSION_KEY, SessionUser, get_current_user, log_in, log_out
from siis.store.cart import CART_IMAGES_SESSION_KEY, Cart, CartLine
from siis.store.checkout import STAGED_ITEMS_KEY, STAGED_USER_KEY


@pytest.fixture
def request_with_session():
    request = RequestFactory().get("/")
    request.session = SessionStore()
    return request


class TestSessionUser:
    def test_round_trips_through_session_data(self, shopper):
        assert SessionUser.from_session(shopper.to_session()) == shopper

    @pytest.mark.parametrize("data", [None, "uid", {}, {"email": "mei@example.com"}])
    def test_unreadable_data_is_no_user(self, data):
        assert SessionUser.from_session(data) is None


class TestLogInOut:
    def test_log_in_stores_identity(self, request_with_session, shopper):
        log_in(request_with_session, shopper)

        assert request_with_session.shopper == shopper
        assert get_current_user(request_with_session) == shopper

    def test_log_out_clears_cart_and_staging(self, request_with_session, shopper):
        session = request_with_session.session
        log_in(request_with_session, shopper)
        Cart(session).add(CartLine(id="p1", name="Ring", price=100, quantity=2))
        session[CART_IMAGES_SESSION_KEY] = {"ids": ["p1"], "images": {}}
        session[STAGED_USER_KEY] = shopper.to_session()
        session[STAGED_ITEMS_KEY] = []

        log_out(request_with_session)

        assert request_with_session.shopper is None
        assert Cart(session).is_empty
        for key in (SHOPPER_SESSION_KEY, CART_IMAGES_SESSION_KEY, STAGED_USER_KEY, STAGED_ITEMS_KEY):
            assert key not in session


class TestSessionStateMiddleware:
    def test_sets_shopper_on_request(self, request_with_session, shopper):
        request_with_session.session[SHOPPER_SESSION_KEY] = shopper.to_session()
        middleware = SessionStateMiddleware(lambda request: HttpResponse())

        middleware(request_with_session)

        assert request_with_session.shopper == shopper

    def test_anonymous_request(self, request_with_session):
        SessionStateMiddleware(lambda request: HttpResponse())(request_with_session)
        assert request_with_session.shopper is None

    def test_drops_unreadable_identity(self, request_with_session):
        request_with_session.session[SHOPPER_SESSION_KEY] = {"email": "no-uid@example.com"}

        SessionStateMiddleware(lambda request: HttpResponse())(request_with_session)

        assert request_with_session.shopper is None
        assert SHOPPER_SESSION_KEY not in request_with_session.session


@pytest.mark.django_db
class TestAccessMixins:
    def test_checkout_redirects_anonymous_to_cart(self, client, gateway):
        response = client.get("/checkout/")
        assert response.status_code == 302
        assert response.url == "/cart/"

    def test_console_redirects_anonymous_to_login(self, client, gateway):
        response = client.get("/admin/products/")
        assert response.status_code == 302
        assert response.url == "/login/?next=%2Fadmin%2Fproducts%2F"

    def test_console_forbids_non_admin(self, shopper_client, gateway):
        response = shopper_client.get("/admin/")
        assert response.status_code == 403

    def test_console_allows_admin(self, admin_client, gateway):
        response = admin_client.get("/admin/")
        assert response.status_code == 200
