"""Firebase backend client and gateway registry.

The Firebase Admin app is created at most once per process. Views never
touch the SDK directly: they ask for the gateway, which bundles one
repository per collection plus the image store, all bound to the same
backend client.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Any

import firebase_admin
from django.conf import settings
from firebase_admin import auth, credentials, firestore, storage

from .exceptions import BackendUnavailable
from .images import ImageStore
from .repositories import MemberRepository, OrderRepository, ProductRepository

logger = logging.getLogger(__name__)

_lock = threading.Lock()
_backend = None
_gateway = None


@dataclass
class BackendClient:
    """Handles onto one initialized Firebase app."""

    app: Any
    firestore: Any
    bucket: Any

    def verify_id_token(self, id_token: str) -> dict:
        """Verify a Firebase ID token and return its claims."""
        return auth.verify_id_token(id_token, app=self.app)

    def create_user(self, email: str, password: str, display_name: str | None = None):
        """Create a Firebase Auth user."""
        return auth.create_user(
            email=email,
            password=password,
            display_name=display_name or None,
            app=self.app,
        )


def _get_firebase_app():
    """Get the default Firebase app, initializing it if needed."""
    # Check if already initialized
    try:
        return firebase_admin.get_app()
    except ValueError:
        pass

    # Initialize from service account file or environment
    cred_path = getattr(settings, "FIREBASE_CREDENTIALS_PATH", None)
    if cred_path:
        cred = credentials.Certificate(cred_path)
    else:
        # Use Application Default Credentials
        cred = credentials.ApplicationDefault()

    app = firebase_admin.initialize_app(
        cred,
        {"storageBucket": getattr(settings, "FIREBASE_STORAGE_BUCKET", None)},
    )
    logger.info("Firebase Admin SDK initialized")
    return app


def get_backend() -> BackendClient:
    """Get or create the process-wide backend client."""
    global _backend

    if _backend is not None:
        return _backend

    with _lock:
        if _backend is None:
            try:
                app = _get_firebase_app()
                _backend = BackendClient(
                    app=app,
                    firestore=firestore.client(app),
                    bucket=storage.bucket(app=app),
                )
            except Exception as e:
                logger.exception(f"Failed to initialize Firebase: {e}")
                raise BackendUnavailable("Firebase backend is not available", operation="init") from e
    return _backend


class Gateway:
    """Repositories and image store bound to one backend client."""

    def __init__(self, backend: BackendClient):
        self.backend = backend
        self.products = ProductRepository(backend.firestore)
        self.orders = OrderRepository(backend.firestore)
        self.members = MemberRepository(backend.firestore)
        self.images = ImageStore(backend.bucket)


def install_gateway(gateway: Gateway) -> Gateway:
    """Install an explicitly constructed gateway for the process."""
    global _gateway

    with _lock:
        _gateway = gateway
    return gateway


def reset_gateway():
    """Forget the installed gateway and backend client."""
    global _gateway, _backend

    with _lock:
        _gateway = None
        _backend = None


def get_gateway() -> Gateway:
    """Get the installed gateway, building it from Firebase on first use."""
    global _gateway

    if _gateway is not None:
        return _gateway

    backend = get_backend()
    with _lock:
        if _gateway is None:
            _gateway = Gateway(backend)
    return _gateway
