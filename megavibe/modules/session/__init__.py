"""
Session Module - Black Box Interface

Purpose: Manage session lifecycle
Interface: create_session(), get_session(), renew_session(), update_session(), patch_session(), end_session()
Hidden: Session storage, TTL management, eviction

Replaceable with any session backend that offers put/get/delete.
"""

from .session import SessionModule, SessionNotFound, apply_merge_patch, utc_now
from .store import MemorySessionStore, SessionRecord

__all__ = [
    "SessionModule",
    "SessionNotFound",
    "MemorySessionStore",
    "SessionRecord",
    "apply_merge_patch",
    "utc_now",
]
