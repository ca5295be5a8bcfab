"""
API Module - Black Box Interface

Purpose: HTTP routing for the session lifecycle
Interface: create_session_router(), response models
Hidden: Request handling, error responses

The API module only orchestrates - it contains no session logic.
All logic is delegated to the session module.
"""

from .models import (
    SessionCreatedResponse,
    SessionDataResponse,
    SessionExpiryResponse,
    SessionRenewedResponse,
    SessionStatus,
)
from .routes import create_session_router

__all__ = [
    "create_session_router",
    "SessionCreatedResponse",
    "SessionDataResponse",
    "SessionExpiryResponse",
    "SessionRenewedResponse",
    "SessionStatus",
]
