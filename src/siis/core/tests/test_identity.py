"""Tests for Firebase sign-in and registration."""

import json

import httpx
import pytest
from firebase_admin import auth

from siis.core import identity
from siis.core.identity import IdentityError


def mock_identity_toolkit(monkeypatch, handler):
    """Route Identity Toolkit calls to ``handler``."""
    requests = []

    def record(request):
        requests.append(request)
        return handler(request)

    def client():
        return httpx.Client(
            base_url=identity.IDENTITY_TOOLKIT_URL,
            transport=httpx.MockTransport(record),
        )

    monkeypatch.setattr(identity, "_get_client", client)
    return requests


class TestSignIn:
    def test_success_verifies_token(self, monkeypatch, gateway, backend):
        backend.tokens["id-token-1"] = {"uid": "u1", "email": "mei@example.com"}
        requests = mock_identity_toolkit(
            monkeypatch,
            lambda request: httpx.Response(200, json={"idToken": "id-token-1", "displayName": "Mei"}),
        )

        user = identity.sign_in("mei@example.com", "secret1")

        assert user.uid == "u1"
        assert user.display_name == "Mei"
        assert user.is_admin is False
        assert requests[0].url.params["key"] == "test-api-key"
        assert json.loads(requests[0].content)["returnSecureToken"] is True

    def test_member_profile_name_wins(self, monkeypatch, gateway, backend, fake_db):
        fake_db.seed("members", {"uid": "u1", "displayName": "Mei Lin"})
        backend.tokens["id-token-1"] = {"uid": "u1", "email": "mei@example.com"}
        mock_identity_toolkit(
            monkeypatch,
            lambda request: httpx.Response(200, json={"idToken": "id-token-1", "displayName": "Mei"}),
        )

        assert identity.sign_in("mei@example.com", "secret1").display_name == "Mei Lin"

    def test_profile_lookup_failure_keeps_token_name(self, monkeypatch, gateway, backend, fake_db):
        fake_db.fail_on.add("list")
        backend.tokens["id-token-1"] = {"uid": "u1", "email": "mei@example.com"}
        mock_identity_toolkit(
            monkeypatch,
            lambda request: httpx.Response(200, json={"idToken": "id-token-1", "displayName": "Mei"}),
        )

        assert identity.sign_in("mei@example.com", "secret1").display_name == "Mei"

    def test_admin_email_gets_admin_rights(self, monkeypatch, gateway, backend):
        backend.tokens["tok"] = {"uid": "a1", "email": "Admin@siis.test"}
        mock_identity_toolkit(monkeypatch, lambda request: httpx.Response(200, json={"idToken": "tok"}))

        user = identity.sign_in("admin@siis.test", "secret1")

        assert user.is_admin is True
        assert user.display_name == "Admin"

    def test_admin_claim_gets_admin_rights(self):
        user = identity.build_session_user({"uid": "a2", "email": "owner@example.com", "admin": True})
        assert user.is_admin is True

    def test_rejected_credentials(self, monkeypatch, gateway):
        mock_identity_toolkit(
            monkeypatch,
            lambda request: httpx.Response(400, json={"error": {"message": "INVALID_LOGIN_CREDENTIALS"}}),
        )

        with pytest.raises(IdentityError) as exc_info:
            identity.sign_in("mei@example.com", "wrong")

        assert exc_info.value.code == "INVALID_LOGIN_CREDENTIALS"
        assert exc_info.value.message == "Incorrect email or password."

    def test_error_code_suffix_is_ignored(self, monkeypatch, gateway):
        mock_identity_toolkit(
            monkeypatch,
            lambda request: httpx.Response(
                400, json={"error": {"message": "TOO_MANY_ATTEMPTS_TRY_LATER : Access disabled"}}
            ),
        )

        with pytest.raises(IdentityError) as exc_info:
            identity.sign_in("mei@example.com", "wrong")

        assert exc_info.value.code == "TOO_MANY_ATTEMPTS_TRY_LATER"

    def test_network_failure(self, monkeypatch, gateway):
        def fail(request):
            raise httpx.ConnectError("connection refused", request=request)

        mock_identity_toolkit(monkeypatch, fail)

        with pytest.raises(IdentityError) as exc_info:
            identity.sign_in("mei@example.com", "secret1")

        assert exc_info.value.code == "unavailable"

    def test_unverifiable_token(self, monkeypatch, gateway):
        mock_identity_toolkit(monkeypatch, lambda request: httpx.Response(200, json={"idToken": "forged"}))

        with pytest.raises(IdentityError) as exc_info:
            identity.sign_in("mei@example.com", "secret1")

        assert exc_info.value.code == "invalid_token"

    def test_missing_api_key(self, settings, gateway):
        settings.FIREBASE_API_KEY = ""

        with pytest.raises(IdentityError) as exc_info:
            identity.sign_in("mei@example.com", "secret1")

        assert exc_info.value.code == "configuration"


class TestRegister:
    def test_creates_bronze_member(self, gateway, backend, fake_db):
        user = identity.register("mei@example.com", "secret1", "Mei", phone="0912", address="Taipei")

        assert user.uid == "uid-1"
        assert user.display_name == "Mei"
        members = list(fake_db.docs("members").values())
        assert len(members) == 1
        assert members[0]["uid"] == "uid-1"
        assert members[0]["memberLevel"] == "bronze"
        assert members[0]["phoneNumber"] == "0912"

    def test_existing_email(self, gateway, backend, fake_db):
        backend.create_user_error = auth.EmailAlreadyExistsError("exists", None, None)

        with pytest.raises(IdentityError) as exc_info:
            identity.register("mei@example.com", "secret1", "Mei")

        assert exc_info.value.code == "email_exists"
        assert fake_db.docs("members") == {}

    def test_profile_write_failure(self, gateway, fake_db):
        fake_db.fail_on.add("create")

        with pytest.raises(IdentityError) as exc_info:
            identity.register("mei@example.com", "secret1", "Mei")

        assert exc_info.value.code == "profile_failed"
