"""In-memory session store backend."""

import logging
import math
import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, Optional

from cachetools import TLRUCache

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionRecord:
    """Stored state of one session. Replaced wholesale on every change."""

    id: str
    created_at: datetime
    renewed_at: datetime
    expires_at: datetime
    data: Dict[str, Any] = field(default_factory=dict)


class _SessionCache(TLRUCache):
    """TLRUCache that reports capacity evictions."""

    def popitem(self):
        session_id, record = super().popitem()
        logger.info(f"Evicted least recently used session {session_id} (store full)")
        return session_id, record


class MemorySessionStore:
    """
    Thread-safe in-memory session storage.

    Each record expires once the injected clock passes its own ``expires_at``.
    Expired records are dropped lazily on access or eagerly through
    purge_expired(). When ``maxsize`` live records are held, inserting a new
    one evicts the least recently used.
    """

    def __init__(self, maxsize: int, clock: Callable[[], datetime]):
        """
        Initialize session store.

        Args:
            maxsize: Maximum number of live sessions
            clock: Callable returning the current aware datetime
        """
        self._lock = threading.RLock()
        self._cache = _SessionCache(
            maxsize=maxsize,
            ttu=self._time_to_use,
            timer=lambda: clock().timestamp(),
        )

    @staticmethod
    def _time_to_use(session_id: str, record: SessionRecord, now: float) -> float:
        # Still live at exactly expires_at; TLRUCache expires once now >= ttu
        return math.nextafter(record.expires_at.timestamp(), math.inf)

    def put(self, session_id: str, record: SessionRecord) -> None:
        with self._lock:
            self._cache[session_id] = record

    def get(self, session_id: str) -> Optional[SessionRecord]:
        with self._lock:
            record = self._cache.get(session_id)
            if record is None:
                # Drops the entry if it was only hidden by expiry
                self._cache.expire()
            return record

    def modify(
        self, session_id: str, change: Callable[[SessionRecord], SessionRecord]
    ) -> Optional[SessionRecord]:
        """
        Atomically replace a live record with ``change(record)``.

        Returns:
            The new record, or None if the session is absent or expired
        """
        with self._lock:
            record = self.get(session_id)
            if record is None:
                return None
            updated = change(record)
            self._cache[session_id] = updated
            return updated

    def delete(self, session_id: str) -> None:
        with self._lock:
            self._cache.pop(session_id, None)

    def purge_expired(self) -> int:
        """
        Remove all expired sessions.

        Returns:
            Number of sessions removed
        """
        with self._lock:
            before = len(self._cache)
            self._cache.expire()
            return before - len(self._cache)

    def __len__(self) -> int:
        with self._lock:
            self._cache.expire()
            return len(self._cache)

    def __contains__(self, session_id: str) -> bool:
        return self.get(session_id) is not None
