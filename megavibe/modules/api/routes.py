"""
Session endpoints for the MegaVibe API.

Handlers work on request.state.session_id / request.state.session as
attached by SessionMiddleware; cookie issuing and renewal happen there.
modify-session-data stores its merge through the session module itself
so concurrent patches to one session do not overwrite each other.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, HTTPException, Request, Response

from ..middleware import is_valid_session_id
from ..session import SessionModule
from .models import (
    SessionCreatedResponse,
    SessionDataResponse,
    SessionExpiryResponse,
    SessionRenewedResponse,
)

logger = logging.getLogger(__name__)


def _require_session(request: Request) -> str:
    session_id = getattr(request.state, "session_id", None)
    if not session_id:
        raise HTTPException(404, "Session not found")
    return session_id


def create_session_router(session_module: SessionModule, cookie_name: str = "sessionId") -> APIRouter:
    """
    Create session router with injected session module.

    Args:
        session_module: SessionModule instance
        cookie_name: Name of the cookie carrying the session id

    Returns:
        FastAPI router with session endpoints
    """
    router = APIRouter(tags=["session"])

    @router.post("/create-session", response_model=SessionCreatedResponse, status_code=201)
    async def create_session(
        request: Request,
        payload: Optional[Dict[str, Any]] = Body(None),
    ):
        """
        Create a session holding the request body.

        Returns:
            201: Session created, cookie set
            422: Body is not a JSON object
        """
        session_id = session_module.create_session(payload or {})
        request.state.session_id = session_id
        request.state.session = session_module.get_session(session_id)
        request.state.session_renewed = True
        return SessionCreatedResponse(session_id=session_id)

    @router.post("/renew-session", response_model=SessionRenewedResponse)
    async def renew_session(request: Request):
        """
        Renew the session named by the cookie.

        Returns:
            200: Session renewed, cookie re-issued
            400: No usable session cookie
            404: Session not found or expired
        """
        cookie_value = request.cookies.get(cookie_name)
        if not cookie_value or not is_valid_session_id(cookie_value):
            raise HTTPException(400, f"Missing or malformed {cookie_name} cookie")

        # SessionNotFound is mapped to 404 by the app exception handler
        expires_at = session_module.renew_session(cookie_value)
        request.state.session_renewed = True
        return SessionRenewedResponse(session_id=cookie_value, expires_at=expires_at)

    @router.post("/end-session", status_code=204)
    async def end_session(request: Request):
        """
        End the current session. Always succeeds.

        Returns:
            204: Session ended (or there was none), cookie cleared
        """
        cookie_value = request.cookies.get(cookie_name)
        if cookie_value:
            session_module.end_session(cookie_value)
        request.state.session_id = None
        request.state.session = None
        return Response(status_code=204)

    @router.get("/retrieve-session-data", response_model=SessionDataResponse)
    async def retrieve_session_data(request: Request):
        """
        Get the data stored in the current session.

        Returns:
            200: Session id and data
            404: Session not found
        """
        session_id = _require_session(request)
        return SessionDataResponse(session_id=session_id, session_data=request.state.session)

    @router.post("/modify-session-data", response_model=SessionDataResponse)
    async def modify_session_data(
        request: Request,
        patch: Dict[str, Any] = Body(...),
    ):
        """
        Merge the request body into the current session data.

        Returns:
            200: Updated session data
            404: Session not found
            422: Body is not a JSON object
        """
        session_id = _require_session(request)
        request.state.session = session_module.patch_session(session_id, patch)
        # Already stored; the middleware must not write back its older copy
        request.state.session_saved = True
        logger.debug(f"Session {session_id} data modified: {sorted(patch)}")
        return SessionDataResponse(session_id=session_id, session_data=request.state.session)

    @router.get("/check-session-expiry", response_model=SessionExpiryResponse)
    async def check_session_expiry(request: Request):
        """
        Get the expiry of the current session, including the renewal
        this request itself earns.

        Returns:
            200: Creation and expiry timestamps
            404: Session not found
        """
        session_id = _require_session(request)
        session_module.renew_session(session_id)
        request.state.session_renewed = True
        record = session_module.get_record(session_id)
        return SessionExpiryResponse(
            session_id=session_id,
            created_at=record.created_at,
            expires_at=record.expires_at,
        )

    return router
