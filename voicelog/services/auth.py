"""
Session Manager - current signed-in identity.

Authentication itself is handled elsewhere; this object only records who is
signed in and tells interested components when that changes.
"""

import inspect
from collections.abc import Awaitable, Callable

from voicelog.models.user import Session
from voicelog.utils.exceptions import NotAuthenticatedError
from voicelog.utils.logger import get_logger

logger = get_logger(__name__)

SessionListener = Callable[[Session | None], Awaitable[None] | None]


class SessionManager:
    """Holds the current session and notifies listeners on sign-in/sign-out."""

    def __init__(self):
        self._session: Session | None = None
        self._listeners: list[SessionListener] = []

    @property
    def current(self) -> Session | None:
        return self._session

    @property
    def is_authenticated(self) -> bool:
        return self._session is not None

    def add_listener(self, listener: SessionListener) -> None:
        """Register a callback receiving the new session (or None on sign-out)."""
        self._listeners.append(listener)

    def remove_listener(self, listener: SessionListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    async def sign_in(self, user_id: str, email: str = "") -> Session:
        """
        Record a signed-in user.

        Args:
            user_id: Authenticated user ID
            email: User email

        Returns:
            The new session
        """
        self._session = Session(user_id=user_id, email=email)
        logger.info(f"Signed in: {user_id}", extra={"user_id": user_id})
        await self._notify(self._session)
        return self._session

    async def sign_out(self) -> None:
        """Clear the session. Signing out twice is harmless."""
        if self._session is None:
            return
        user_id = self._session.user_id
        self._session = None
        logger.info(f"Signed out: {user_id}", extra={"user_id": user_id})
        await self._notify(None)

    def require_session(self) -> Session:
        """
        Return the current session.

        Raises:
            NotAuthenticatedError: If nobody is signed in
        """
        if self._session is None:
            raise NotAuthenticatedError("You must be signed in to do that")
        return self._session

    async def _notify(self, session: Session | None) -> None:
        for listener in list(self._listeners):
            try:
                result = listener(session)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.error(f"Session listener failed: {e}", extra={"error": str(e)})
