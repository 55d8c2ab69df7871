"""Exceptions raised at the Firebase boundary."""


class GatewayError(Exception):
    """Transport or permission failure talking to the backend."""

    def __init__(self, message: str, operation: str | None = None):
        self.message = message
        self.operation = operation
        super().__init__(message)


class BackendUnavailable(GatewayError):
    """The Firebase app could not be initialized."""

    pass
