"""
Authentication flow for FitTracker front-ends.
Runs login, registration, logout and profile updates against the API and
feeds the results into the session manager.
"""

import logging
from enum import Enum, auto
from typing import Any, Dict, Optional, Tuple, TYPE_CHECKING

from FitTracker.core.session.exceptions import (
    AuthenticationRejected,
    MalformedRecord,
    NetworkUnavailable,
    RequestError,
    ServerError,
    StorageFailure,
)
from FitTracker.core.session.models import UserProfile

if TYPE_CHECKING:
    from FitTracker.api.client import FitTrackerAPIClient
    from FitTracker.core.session.manager import SessionManager

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6
PROFILE_FIELDS = ("name", "age", "weight", "height", "goal")


class AuthResult(Enum):
    """Result of an authentication operation."""
    SUCCESS = auto()
    CANCELLED = auto()
    INVALID_CREDENTIALS = auto()
    SESSION_EXPIRED = auto()
    SERVER_ERROR = auto()
    NETWORK_ERROR = auto()
    STORAGE_ERROR = auto()
    INVALID_RESPONSE = auto()


class AuthFlow:
    """
    Handles authentication flows (login, registration, logout, profile).

    The flow reports outcomes and never signs the user out on its own:
    a 401 on an authenticated call comes back as SESSION_EXPIRED and the
    front-end decides what to do with it.
    """

    def __init__(self, api_client: 'FitTrackerAPIClient', session_manager: 'SessionManager'):
        """
        Initialize authentication flow.

        Args:
            api_client: API client for authentication requests
            session_manager: Session manager receiving the results
        """
        self._api_client = api_client
        self._session = session_manager
        self.last_error: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return self._session.session.is_authenticated

    async def login(self, email: str, password: str) -> AuthResult:
        """
        Log in and start a session.

        Returns:
            AuthResult indicating the outcome
        """
        self.last_error = None
        email = (email or "").strip()
        if not email or not password:
            self.last_error = "Please fill in all fields"
            return AuthResult.CANCELLED

        try:
            response = await self._api_client.login(email, password)
        except AuthenticationRejected as e:
            self.last_error = e.message
            return AuthResult.INVALID_CREDENTIALS
        except RequestError as e:
            return self._request_failed(e, "Login")

        return await self._start_session(response, "Login")

    async def register(self, name: str, email: str, password: str, **profile: Any) -> AuthResult:
        """
        Create an account and start a session with it.

        Args:
            name: Display name
            email: Account email
            password: Password, at least MIN_PASSWORD_LENGTH characters
            **profile: Optional age, weight, height, goal

        Returns:
            AuthResult indicating the outcome
        """
        self.last_error = None
        if not name or not email or not password:
            self.last_error = "Please fill in all required fields"
            return AuthResult.CANCELLED
        if len(password) < MIN_PASSWORD_LENGTH:
            self.last_error = f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
            return AuthResult.CANCELLED

        data: Dict[str, Any] = {"name": name, "email": email.strip(), "password": password}
        data.update({k: profile.get(k) for k in ("age", "weight", "height", "goal")})

        try:
            response = await self._api_client.register(data)
        except RequestError as e:
            return self._request_failed(e, "Registration")

        return await self._start_session(response, "Registration")

    async def logout(self) -> AuthResult:
        """Sign out locally; the backend keeps no session to close."""
        await self._session.sign_out()
        return AuthResult.SUCCESS

    async def save_profile(self, **changes: Any) -> AuthResult:
        """
        Push profile changes to the backend and store the returned profile.

        Args:
            **changes: Any of name, age, weight, height, goal

        Returns:
            AuthResult indicating the outcome
        """
        self.last_error = None
        if not self.is_authenticated:
            self.last_error = "Not signed in"
            return AuthResult.CANCELLED

        data = {k: v for k, v in changes.items() if k in PROFILE_FIELDS}
        try:
            response = await self._api_client.update_profile(data)
        except RequestError as e:
            return self._request_failed(e, "Profile update")

        try:
            user = UserProfile.from_dict((response or {}).get("user"))
        except (MalformedRecord, AttributeError) as e:
            self.last_error = f"Profile update failed: {e}"
            return AuthResult.INVALID_RESPONSE

        try:
            await self._session.update_user(user)
        except StorageFailure as e:
            self.last_error = f"Failed to save profile: {e.message}"
            return AuthResult.STORAGE_ERROR
        return AuthResult.SUCCESS

    async def _start_session(self, response: Any, action: str) -> AuthResult:
        try:
            token, user = _parse_auth_response(response)
        except MalformedRecord as e:
            self.last_error = f"{action} failed: {e.message}"
            logger.error("%s response rejected: %s", action, e)
            return AuthResult.INVALID_RESPONSE

        await self._session.sign_in(token, user)
        return AuthResult.SUCCESS

    def _request_failed(self, error: RequestError, action: str) -> AuthResult:
        match error:
            case AuthenticationRejected():
                self.last_error = "Your session has expired. Please log in again."
                return AuthResult.SESSION_EXPIRED
            case NetworkUnavailable():
                self.last_error = f"Network error: {error.message}"
                return AuthResult.NETWORK_ERROR
            case ServerError():
                self.last_error = f"{action} failed: {error.message}"
                return AuthResult.SERVER_ERROR
            case _:
                raise error


def _parse_auth_response(response: Any) -> Tuple[str, UserProfile]:
    if not isinstance(response, dict):
        raise MalformedRecord("Unexpected response from server")
    token = response.get("token")
    if not token or not isinstance(token, str):
        raise MalformedRecord("No token received")
    try:
        user = UserProfile.from_dict(response.get("user"))
    except MalformedRecord as e:
        raise MalformedRecord(f"Invalid user profile: {e.message}", details=e.details) from e
    return token, user
