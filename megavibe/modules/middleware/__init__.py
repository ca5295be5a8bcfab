"""
Session Middleware Module - Black Box Interface

Purpose: Bind the session cookie to the request for FastAPI applications
Interface: SessionMiddleware, create_session_middleware()
Hidden: Cookie parsing, stale cookie cleanup, sliding renewal

Downstream handlers only see request.state.session_id and
request.state.session; they never touch the cookie.
"""

import copy
import logging
import uuid
from typing import Any, Dict, Optional

from fastapi import Request, Response

from ..session import SessionModule, SessionNotFound

logger = logging.getLogger(__name__)


def is_valid_session_id(value: str) -> bool:
    """Check that a cookie value looks like a session id we issued."""
    try:
        return str(uuid.UUID(value)) == value.lower()
    except (ValueError, AttributeError):
        return False


class SessionMiddleware:
    """
    Cookie-backed session middleware for FastAPI applications.

    On the way in it attaches the session named by the cookie (or None).
    On the way out, for responses below 400, it persists changes made to
    request.state.session, renews the session and re-issues the cookie.
    Unknown, expired, malformed or ended sessions get their cookie cleared.
    """

    def __init__(
        self,
        session_module: SessionModule,
        cookie_name: str = "sessionId",
        secure: bool = True,
    ):
        """
        Initialize session middleware.

        Args:
            session_module: SessionModule holding the sessions
            cookie_name: Name of the cookie carrying the session id
            secure: Whether the cookie is only sent over HTTPS
        """
        self.sessions = session_module
        self.cookie_name = cookie_name
        self.secure = secure

    def _load(self, session_id: Optional[str]) -> Optional[Dict[str, Any]]:
        if not session_id:
            return None
        if not is_valid_session_id(session_id):
            logger.debug(f"Ignoring malformed {self.cookie_name} cookie")
            return None
        try:
            return self.sessions.get_session(session_id)
        except SessionNotFound:
            logger.debug(f"Session cookie refers to unknown session {session_id}")
            return None

    def issue_cookie(self, response: Response, session_id: str) -> None:
        response.set_cookie(
            self.cookie_name,
            session_id,
            max_age=self.sessions.default_ttl,
            path="/",
            secure=self.secure,
            httponly=True,
            samesite="lax",
        )

    def clear_cookie(self, response: Response) -> None:
        response.delete_cookie(
            self.cookie_name, path="/", secure=self.secure, httponly=True, samesite="lax"
        )

    def _commit(self, request: Request, incoming_id: Optional[str], original: Any) -> bool:
        """Persist handler changes and renew. Returns False if the session is gone."""
        session_id = request.state.session_id
        data = request.state.session
        try:
            if (
                session_id == incoming_id
                and not request.state.session_saved
                and data is not None
                and data != original
            ):
                self.sessions.update_session(session_id, data)
            if not request.state.session_renewed:
                self.sessions.renew_session(session_id)
        except SessionNotFound:
            logger.debug(f"Session {session_id} ended during request")
            return False
        return True

    async def __call__(self, request: Request, call_next):
        """Process the request through the session middleware."""
        cookie_value = request.cookies.get(self.cookie_name)
        data = self._load(cookie_value)
        incoming_id = cookie_value if data is not None else None

        request.state.session_id = incoming_id
        request.state.session = data
        # Handlers that already renewed set this so expiry moves once per request
        request.state.session_renewed = False
        # Handlers that stored their change atomically set this
        request.state.session_saved = False
        original = copy.deepcopy(data)

        response = await call_next(request)

        if response.status_code >= 400:
            if cookie_value and incoming_id is None:
                self.clear_cookie(response)
            return response

        session_id = getattr(request.state, "session_id", None)
        if session_id and self._commit(request, incoming_id, original):
            self.issue_cookie(response, session_id)
        elif cookie_value:
            self.clear_cookie(response)

        return response


def create_session_middleware(session_module: SessionModule, config) -> SessionMiddleware:
    """
    Factory function to create the session middleware from configuration.

    Args:
        session_module: SessionModule instance
        config: ConfigModule (or anything with get(key, default))

    Returns:
        Configured SessionMiddleware instance
    """
    return SessionMiddleware(
        session_module,
        cookie_name=config.get("session_cookie_name", "sessionId"),
        secure=config.get("session_cookie_secure", True),
    )


__all__ = ["SessionMiddleware", "create_session_middleware", "is_valid_session_id"]
