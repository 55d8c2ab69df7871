"""Boundary to the Firebase backend (Firestore, Storage, Auth)."""

from .client import (
    BackendClient,
    Gateway,
    get_backend,
    get_gateway,
    install_gateway,
    reset_gateway,
)
from .exceptions import BackendUnavailable, GatewayError

__all__ = [
    "BackendClient",
    "BackendUnavailable",
    "Gateway",
    "GatewayError",
    "get_backend",
    "get_gateway",
    "install_gateway",
    "reset_gateway",
]
