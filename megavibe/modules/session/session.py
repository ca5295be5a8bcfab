import copy
import logging
import uuid
from dataclasses import replace
from datetime import UTC, datetime, timedelta
from typing import Any, Callable, Dict, Optional

from .store import MemorySessionStore, SessionRecord

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(UTC)


def apply_merge_patch(data: Dict[str, Any], patch: Dict[str, Any]) -> None:
    """Merge top-level keys of patch into data; a None value removes the key."""
    for key, value in patch.items():
        if value is None:
            data.pop(key, None)
        else:
            data[key] = value


class SessionNotFound(LookupError):
    """Session is unknown, ended or expired."""

    def __init__(self, session_id: str):
        super().__init__(f"Session not found: {session_id}")
        self.session_id = session_id


class SessionModule:
    def __init__(
        self,
        store: MemorySessionStore,
        default_ttl: int,
        clock: Callable[[], datetime] = utc_now,
    ):
        """
        Initialize session module.

        Args:
            store: Session record storage
            default_ttl: Session TTL in seconds (sliding)
            clock: Callable returning the current aware datetime
        """
        self.store = store
        self.default_ttl = default_ttl
        self.clock = clock

    @property
    def ttl(self) -> timedelta:
        return timedelta(seconds=self.default_ttl)

    def create_session(self, payload: Optional[Dict[str, Any]] = None) -> str:
        """
        Create a new session.

        Args:
            payload: JSON-serializable session data (defaults to empty)

        Returns:
            Session ID (UUID v4)
        """
        session_id = str(uuid.uuid4())
        now = self.clock()
        record = SessionRecord(
            id=session_id,
            created_at=now,
            renewed_at=now,
            expires_at=now + self.ttl,
            data=copy.deepcopy(payload) if payload else {},
        )
        self.store.put(session_id, record)

        logger.info(f"Session {session_id} created, expires at {record.expires_at.isoformat()}")
        return session_id

    def get_record(self, session_id: str) -> SessionRecord:
        """
        Get the full session record, with a private copy of its data.

        Raises:
            SessionNotFound: If the session is absent or expired
        """
        record = self._live_record(session_id)
        return replace(record, data=copy.deepcopy(record.data))

    def _live_record(self, session_id: str) -> SessionRecord:
        record = self.store.get(session_id)
        if record is None:
            logger.debug(f"Session {session_id} not found")
            raise SessionNotFound(session_id)
        return record

    def get_session(self, session_id: str) -> Dict[str, Any]:
        """
        Get session data.

        Returns a copy; changing it does not change the stored session.

        Raises:
            SessionNotFound: If the session is absent or expired
        """
        return copy.deepcopy(self._live_record(session_id).data)

    def renew_session(self, session_id: str) -> datetime:
        """
        Push the session expiry a full TTL past now.

        Args:
            session_id: Session identifier

        Returns:
            New expiry time

        Raises:
            SessionNotFound: If the session is absent or expired
        """
        now = self.clock()

        def extend(record: SessionRecord) -> SessionRecord:
            expires_at = now + self.ttl
            # Expiry stays strictly monotonic when the clock has not advanced
            if expires_at <= record.expires_at:
                expires_at = record.expires_at + timedelta(microseconds=1)
            return replace(record, renewed_at=now, expires_at=expires_at)

        renewed = self.store.modify(session_id, extend)
        if renewed is None:
            logger.debug(f"Cannot renew session {session_id}: not found")
            raise SessionNotFound(session_id)
        return renewed.expires_at

    def update_session(self, session_id: str, data: Dict[str, Any]) -> None:
        """
        Replace the session data. Expiry is left unchanged.

        Raises:
            SessionNotFound: If the session is absent or expired
        """
        snapshot = copy.deepcopy(data)
        if self.store.modify(session_id, lambda record: replace(record, data=snapshot)) is None:
            logger.debug(f"Cannot update session {session_id}: not found")
            raise SessionNotFound(session_id)

    def patch_session(self, session_id: str, patch: Dict[str, Any]) -> Dict[str, Any]:
        """
        Merge patch into the session data in one step, so concurrent
        patches to the same session all land. Expiry is left unchanged.

        Returns:
            Copy of the merged session data

        Raises:
            SessionNotFound: If the session is absent or expired
        """
        snapshot = copy.deepcopy(patch)

        def merge(record: SessionRecord) -> SessionRecord:
            data = copy.deepcopy(record.data)
            apply_merge_patch(data, snapshot)
            return replace(record, data=data)

        patched = self.store.modify(session_id, merge)
        if patched is None:
            logger.debug(f"Cannot patch session {session_id}: not found")
            raise SessionNotFound(session_id)
        return copy.deepcopy(patched.data)

    def end_session(self, session_id: str) -> None:
        """
        End a session. Ending an unknown session is not an error.
        """
        self.store.delete(session_id)
        logger.info(f"Session {session_id} ended")

    def active_session_count(self) -> int:
        """Number of live sessions, used for monitoring."""
        return len(self.store)

    def cleanup_expired(self) -> int:
        """
        Clean up expired sessions.

        Returns:
            Number of sessions cleaned up
        """
        cleaned = self.store.purge_expired()
        if cleaned:
            logger.info(f"Removed {cleaned} expired sessions")
        return cleaned
