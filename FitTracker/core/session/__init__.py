"""
Session core for the FitTracker client.
Holds the session state machine, its persisted form and its error kinds.
"""

from .exceptions import (
    SessionError,
    StorageFailure,
    MalformedRecord,
    CallerContractViolation,
    RequestError,
    AuthenticationRejected,
    NetworkUnavailable,
    ServerError,
)
from .manager import SessionManager
from .models import Session, SessionStatus, UserProfile
from .store import CredentialStore, FileCredentialStore, TOKEN_KEY, USER_KEY

__all__ = [
    'Session',
    'SessionStatus',
    'UserProfile',
    'SessionManager',
    'CredentialStore',
    'FileCredentialStore',
    'TOKEN_KEY',
    'USER_KEY',
    'SessionError',
    'StorageFailure',
    'MalformedRecord',
    'CallerContractViolation',
    'RequestError',
    'AuthenticationRejected',
    'NetworkUnavailable',
    'ServerError',
]
