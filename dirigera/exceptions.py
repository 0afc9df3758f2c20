"""Exception types for the python-dirigera library."""
from typing import Optional


class DirigeraException(Exception):
    """Base exception for Dirigera-related errors."""


class DirigeraTransportException(DirigeraException):
    """Raised when the hub cannot be reached over HTTPS."""


class DirigeraConnectionException(DirigeraTransportException):
    """Raised when a connection to the hub cannot be established."""


class DirigeraTimeoutException(DirigeraTransportException):
    """Raised when the hub does not answer within the request timeout."""


class DirigeraHttpException(DirigeraException):
    """Raised when the hub answers with a non-2xx status."""

    def __init__(self, status: int, body: str, message: Optional[str] = None):
        super().__init__(message or f"Hub responded with HTTP {status}: {body}")
        self.status = status
        self.body = body


class DirigeraAuthenticationException(DirigeraHttpException):
    """Raised when the hub refuses the access token (HTTP 401/403)."""


class DirigeraDeserializationException(DirigeraException):
    """Raised when a response body does not have the expected shape."""

    def __init__(self, message: str, body: str = ""):
        super().__init__(message)
        self.body = body


class DirigeraPairingException(DirigeraException):
    """Base exception for a failed pairing attempt."""


class DirigeraPairingRejectedException(DirigeraPairingException):
    """Raised when the hub denies or expires the authorization code."""

    def __init__(self, status: int, body: str):
        super().__init__(f"Pairing rejected by hub (HTTP {status}): {body}")
        self.status = status
        self.body = body


class DirigeraPairingTimeoutException(DirigeraPairingException):
    """Raised when the action button was not pressed in time."""

    def __init__(self, attempts: int):
        super().__init__(
            f"Pairing not confirmed after {attempts} attempts, "
            "press the action button on the hub and try again"
        )
        self.attempts = attempts


class DirigeraPairingCancelledException(DirigeraPairingException):
    """Raised when a pairing attempt is aborted between retries."""
