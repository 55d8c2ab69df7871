"""Firebase Authentication for storefront shoppers.

Password sign-in is not part of the Admin SDK, so it goes through the
Identity Toolkit REST endpoint. The returned ID token is then verified with
the Admin SDK before the identity is trusted.
"""

import logging

import httpx
from django.conf import settings
from firebase_admin import auth
from firebase_admin.exceptions import FirebaseError

from siis import conf
from siis.gateway import GatewayError, get_gateway
from siis.gateway.records import Member

from .session import SessionUser

logger = logging.getLogger(__name__)

IDENTITY_TOOLKIT_URL = "https://identitytoolkit.googleapis.com/v1"

ERROR_MESSAGES = {
    "EMAIL_NOT_FOUND": "Incorrect email or password.",
    "INVALID_PASSWORD": "Incorrect email or password.",
    "INVALID_LOGIN_CREDENTIALS": "Incorrect email or password.",
    "INVALID_EMAIL": "Please enter a valid email address.",
    "USER_DISABLED": "This account has been disabled.",
    "TOO_MANY_ATTEMPTS_TRY_LATER": "Too many attempts. Please try again later.",
}


class IdentityError(Exception):
    """Sign-in or registration failed."""

    def __init__(self, code: str, message: str):
        self.code = code
        self.message = message
        super().__init__(message)


def _get_client() -> httpx.Client:
    """Get a configured httpx client."""
    return httpx.Client(
        base_url=IDENTITY_TOOLKIT_URL,
        timeout=conf.get_setting("AUTH_TIMEOUT"),
    )


def _handle_response(response: httpx.Response) -> dict:
    """Handle response from the Identity Toolkit."""
    if response.status_code == 200:
        return response.json()

    try:
        error = response.json().get("error", {})
        code = str(error.get("message", "UNKNOWN"))
    except ValueError:
        code = "UNKNOWN"

    # Codes can carry a suffix, e.g. "TOO_MANY_ATTEMPTS_TRY_LATER : ..."
    code = code.split(" ")[0]
    logger.info(f"Sign-in rejected: {code}")
    raise IdentityError(code, ERROR_MESSAGES.get(code, "Sign-in failed, please try again."))


def build_session_user(claims: dict, display_name: str | None = None) -> SessionUser:
    """Build the session identity from verified token claims."""
    email = claims.get("email", "") or ""
    is_admin = bool(claims.get("admin")) or email.lower() in conf.get_admin_emails()
    name = display_name or claims.get("name") or email.split("@")[0]
    return SessionUser(
        uid=claims.get("uid") or claims["sub"],
        email=email,
        display_name=name,
        is_admin=is_admin,
    )


def _profile_name(uid: str) -> str:
    """Display name from the member profile, which the console may have edited."""
    try:
        member = get_gateway().members.get_by_uid(uid)
    except GatewayError as e:
        logger.warning(f"Member profile lookup failed for {uid}: {e}")
        return ""
    return member.display_name if member else ""


def sign_in(email: str, password: str) -> SessionUser:
    """Sign in with email and password.

    Raises:
        IdentityError: credentials rejected or the service is unreachable
    """
    api_key = getattr(settings, "FIREBASE_API_KEY", "")
    if not api_key:
        raise IdentityError("configuration", "Sign-in is not configured.")

    try:
        with _get_client() as client:
            response = client.post(
                "/accounts:signInWithPassword",
                params={"key": api_key},
                json={"email": email, "password": password, "returnSecureToken": True},
            )
    except httpx.RequestError as e:
        logger.warning(f"Identity Toolkit request failed: {e}")
        raise IdentityError("unavailable", "Sign-in is temporarily unavailable, please try again.") from e

    data = _handle_response(response)

    try:
        claims = get_gateway().backend.verify_id_token(data["idToken"])
    except (KeyError, ValueError, FirebaseError, GatewayError) as e:
        logger.warning(f"ID token verification failed for {email}: {e}")
        raise IdentityError("invalid_token", "Sign-in failed, please try again.") from e

    display_name = _profile_name(claims.get("uid") or claims.get("sub", "")) or data.get("displayName")
    user = build_session_user(claims, display_name=display_name)
    logger.info(f"Shopper signed in: {user.uid}")
    return user


def register(
    email: str,
    password: str,
    display_name: str,
    phone: str = "",
    address: str = "",
) -> SessionUser:
    """Create the auth account and its bronze member profile."""
    gateway = get_gateway()

    try:
        record = gateway.backend.create_user(email, password, display_name)
    except auth.EmailAlreadyExistsError as e:
        raise IdentityError("email_exists", "An account with this email already exists.") from e
    except (ValueError, FirebaseError) as e:
        logger.warning(f"Account creation failed for {email}: {e}")
        raise IdentityError("registration_failed", "Registration failed, please try again.") from e

    member = Member(
        id="",
        uid=record.uid,
        email=email,
        display_name=display_name,
        phone=phone,
        address=address,
    )
    try:
        gateway.members.create(member.to_document())
    except GatewayError as e:
        raise IdentityError(
            "profile_failed",
            "Your account was created but the member profile could not be saved.",
        ) from e

    logger.info(f"Registered member {record.uid}")
    return build_session_user({"uid": record.uid, "email": email}, display_name=display_name)
