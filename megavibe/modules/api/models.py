"""
MegaVibe session API data models.

Field names are snake_case in Python and camelCase on the wire, matching
what the web client sends and reads.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

# Enums


class SessionStatus(str, Enum):
    """State reported for a session; only live sessions are ever returned."""

    ACTIVE = "active"


# Response Models (API Output)


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SessionCreatedResponse(CamelModel):
    """Response after creating a session."""

    message: str = "Session created"
    session_id: str


class SessionDataResponse(CamelModel):
    """Session id and its stored data."""

    session_id: str
    session_data: Dict[str, Any]


class SessionExpiryResponse(CamelModel):
    """Expiry details of a live session."""

    session_id: str
    status: SessionStatus = SessionStatus.ACTIVE
    created_at: datetime
    expires_at: datetime


class SessionRenewedResponse(CamelModel):
    """Response after renewing a session."""

    session_id: str
    expires_at: datetime
