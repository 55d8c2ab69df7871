"""The signed-in shopper, kept in the Django session."""

from dataclasses import asdict, dataclass

SHOPPER_SESSION_KEY = "shopper"


@dataclass(frozen=True)
class SessionUser:
    """Identity mirrored from Firebase Auth."""

    uid: str
    email: str
    display_name: str
    is_admin: bool = False

    def to_session(self) -> dict:
        return asdict(self)

    @classmethod
    def from_session(cls, data) -> "SessionUser | None":
        if not isinstance(data, dict) or not data.get("uid"):
            return None
        return cls(
            uid=str(data["uid"]),
            email=str(data.get("email", "")),
            display_name=str(data.get("display_name", "")),
            is_admin=bool(data.get("is_admin", False)),
        )


def get_current_user(request) -> SessionUser | None:
    """Get the shopper stored in the session, if any."""
    return SessionUser.from_session(request.session.get(SHOPPER_SESSION_KEY))


def log_in(request, user: SessionUser):
    """Store the identity in a fresh session key."""
    request.session.cycle_key()
    request.session[SHOPPER_SESSION_KEY] = user.to_session()
    request.shopper = user


def log_out(request):
    """Forget the identity together with the cart and checkout staging.

    Carts are not stored per identity, so the next shopper on this browser
    must not inherit them.
    """
    from siis.store.cart import Cart
    from siis.store.checkout import clear_staging

    Cart(request.session).clear()
    clear_staging(request.session)
    request.session.pop(SHOPPER_SESSION_KEY, None)
    request.session.cycle_key()
    request.shopper = None
