"""
Error kinds raised or reported by the session core and the request pipeline.

Callers branch on the class, never on the message text.
"""

from typing import Optional


class SessionError(Exception):
    """Base exception for session and request errors."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - Details: {self.details}"
        return self.message


class StorageFailure(SessionError):
    """A credential store read, write or remove did not complete."""

    def __init__(self, message: str, key: str = None, details: dict = None):
        self.key = key
        super().__init__(message, details)


class MalformedRecord(SessionError):
    """A persisted value or a profile record could not be decoded."""
    pass


class CallerContractViolation(SessionError):
    """A session operation was invoked in a state that does not allow it."""
    pass


class RequestError(SessionError):
    """Base exception for outbound API call failures."""

    def __init__(self, message: str, status: Optional[int] = None, details: dict = None):
        self.status = status
        super().__init__(message, details)


class AuthenticationRejected(RequestError):
    """The backend rejected the credential (HTTP 401)."""
    pass


class NetworkUnavailable(RequestError):
    """The request never produced an HTTP response (DNS, refused, timeout)."""
    pass


class ServerError(RequestError):
    """The backend answered with a structured error other than 401."""
    pass


__all__ = [
    'SessionError',
    'StorageFailure',
    'MalformedRecord',
    'CallerContractViolation',
    'RequestError',
    'AuthenticationRejected',
    'NetworkUnavailable',
    'ServerError',
]
