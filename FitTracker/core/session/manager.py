"""
Session manager: single owner of the client's authentication state.

The manager is the only component that reads or writes the credential
store. Each operation runs under one asyncio lock, so transitions are
applied and published one at a time, in the order they were issued.
"""

import asyncio
import logging
from typing import Callable, List, Optional

from .exceptions import (
    CallerContractViolation,
    MalformedRecord,
    SessionError,
    StorageFailure,
)
from .models import Session, SessionStatus, UserProfile
from .store import CredentialStore, TOKEN_KEY, USER_KEY

logger = logging.getLogger(__name__)

Subscriber = Callable[[Session], None]
ErrorReporter = Callable[[SessionError], None]


class SessionManager:
    """
    Owns the session state machine and publishes every new snapshot.

    Subscribers are called synchronously, in registration order, before
    the operation that caused the transition returns.
    """

    def __init__(self, store: CredentialStore, error_reporter: Optional[ErrorReporter] = None):
        """
        Initialize the session manager.

        Args:
            store: Credential store holding the persisted session
            error_reporter: Optional telemetry hook receiving every reported error
        """
        self._store = store
        self._error_reporter = error_reporter
        self._session = Session.initializing()
        self._subscribers: List[Subscriber] = []
        self._lock = asyncio.Lock()
        self._initialize_started = False

    @property
    def session(self) -> Session:
        """Current session snapshot."""
        return self._session

    @property
    def status(self) -> SessionStatus:
        return self._session.status

    @property
    def token(self) -> Optional[str]:
        return self._session.token

    @property
    def user(self) -> Optional[UserProfile]:
        return self._session.user

    def get_token(self) -> Optional[str]:
        """Token source for the request pipeline; read at every dispatch."""
        return self._session.token

    def subscribe(self, callback: Subscriber, replay: bool = True) -> Callable[[], None]:
        """
        Register a callback for session changes.

        Args:
            callback: Called with each new Session snapshot
            replay: Deliver the current snapshot immediately

        Returns:
            A function that removes the subscription
        """
        self._subscribers.append(callback)
        if replay:
            self._notify(callback, self._session)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    async def initialize(self) -> Session:
        """
        Restore the persisted session, once, at startup.

        Only a complete record (token plus a profile that deserializes)
        yields an authenticated session; anything else fails closed. The
        manager leaves Initializing even if restoring raises.
        """
        if self._initialize_started:
            self._report(CallerContractViolation("initialize() called more than once"))
            return self._session
        self._initialize_started = True

        async with self._lock:
            session = Session.unauthenticated()
            try:
                session = await self._restore()
            finally:
                self._publish(session)
            return self._session

    async def _restore(self) -> Session:
        try:
            token = await self._store.get(TOKEN_KEY)
            user_json = await self._store.get(USER_KEY)
        except SessionError as e:
            self._report(e)
            return Session.unauthenticated()

        if not token or user_json is None:
            if token or user_json is not None:
                logger.warning(
                    "Partial credential record (token=%s, user=%s), starting signed out",
                    bool(token), user_json is not None
                )
            return Session.unauthenticated()

        try:
            user = UserProfile.from_json(user_json)
        except MalformedRecord as e:
            self._report(e)
            return Session.unauthenticated()

        logger.info("Restored session for user %s", user.id)
        return Session.authenticated(token, user)

    async def sign_in(self, token: str, user: UserProfile) -> Session:
        """
        Persist and publish a new authenticated session.

        A storage failure is reported but does not block the transition:
        the user stays signed in for this process and will have to sign
        in again after a restart.
        """
        if not token:
            raise ValueError("sign_in requires a non-empty token")

        async with self._lock:
            if self._session.is_loading:
                self._report(CallerContractViolation("sign_in() called before initialize() completed"))
                return self._session

            if self._session.is_authenticated and self._session.user.id != user.id:
                logger.info("Switching account from user %s to %s", self._session.user.id, user.id)

            try:
                await self._store.set(TOKEN_KEY, token)
                await self._store.set(USER_KEY, user.to_json())
            except StorageFailure as e:
                self._report(e)

            logger.info("Signed in as user %s", user.id)
            self._publish(Session.authenticated(token, user))
            return self._session

    async def sign_out(self) -> Session:
        """
        Clear the persisted credentials and publish the signed-out state.

        The transition happens even if the store cannot be cleared.
        """
        async with self._lock:
            if self._session.is_loading:
                self._report(CallerContractViolation("sign_out() called before initialize() completed"))
                return self._session

            was_authenticated = self._session.is_authenticated

            for key in (TOKEN_KEY, USER_KEY):
                try:
                    await self._store.remove(key)
                except StorageFailure as e:
                    self._report(e)

            if was_authenticated:
                logger.info("Signed out")
                self._publish(Session.unauthenticated())
            return self._session

    async def update_user(self, user: UserProfile) -> Session:
        """
        Replace the profile of the active session; the token is untouched.

        Raises:
            StorageFailure: The profile could not be persisted. The old
                profile stays in place and nothing is published.
        """
        async with self._lock:
            if not self._session.is_authenticated:
                self._report(CallerContractViolation(
                    "update_user() called without an active session",
                    details={"status": self._session.status.name}
                ))
                return self._session

            try:
                await self._store.set(USER_KEY, user.to_json())
            except StorageFailure as e:
                self._report(e)
                raise

            self._publish(Session.authenticated(self._session.token, user))
            return self._session

    def _publish(self, session: Session) -> None:
        self._session = session
        logger.debug("Session changed: %r", session)
        for callback in list(self._subscribers):
            self._notify(callback, session)

    def _notify(self, callback: Subscriber, session: Session) -> None:
        try:
            callback(session)
        except Exception:
            logger.exception("Session subscriber %r failed", callback)

    def _report(self, error: SessionError) -> None:
        logger.error("%s: %s", type(error).__name__, error)
        if self._error_reporter is not None:
            try:
                self._error_reporter(error)
            except Exception:
                logger.exception("Error reporter failed")


__all__ = ['SessionManager', 'Subscriber', 'ErrorReporter']
