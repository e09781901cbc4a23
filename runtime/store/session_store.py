"""Bounded in-memory session storage.

Sessions map an opaque, unguessable id to an ordered transcript. The
store is process-local; nothing is written to disk.

How it works:
- An LRU-ordered dict is the only source of truth.
- Capacity is bounded: creating a session past capacity evicts the least
  recently used one.
- Sessions idle for longer than `ttl_seconds` are evicted lazily, the
  next time they (or the store) are touched.
- Each session has its own asyncio.Lock; appends to one session are
  serialized, appends to different sessions never wait on each other.
"""

import asyncio
import logging
import secrets
import time
from collections import OrderedDict
from typing import Callable, Dict, List, Optional, Protocol

from core.content.models import ConversationTurn
from exceptions.exceptions import UnknownSessionError

from ..models.session_models import Session


logger = logging.getLogger(__name__)


class SessionStore(Protocol):
    """Interface the orchestration layer depends on."""

    async def create(self) -> str:
        ...

    async def get(self, session_id: str) -> List[ConversationTurn]:
        ...

    async def append(self, session_id: str, *turns: ConversationTurn) -> None:
        ...

    async def close(self, session_id: str) -> None:
        ...


def new_session_id() -> str:
    """URL-safe id with 256 bits of randomness."""
    return secrets.token_urlsafe(32)


class InMemorySessionStore:
    """LRU + TTL bounded session store.

    Parameters
    ----------
    capacity:
        Maximum number of live sessions.
    ttl_seconds:
        Idle time after which a session is dropped. None disables expiry.
    clock:
        Monotonic time source; injectable for tests.
    """

    def __init__(
        self,
        capacity: int = 1000,
        ttl_seconds: Optional[float] = 3600.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.capacity = capacity
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._sessions: "OrderedDict[str, Session]" = OrderedDict()
        self._locks: Dict[str, asyncio.Lock] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def create(self) -> str:
        """Create an empty session and return its id."""
        self._evict_expired()
        session_id = new_session_id()
        while session_id in self._sessions:
            session_id = new_session_id()

        now = self._clock()
        self._sessions[session_id] = Session(
            session_id=session_id, created_at=now, last_used_at=now
        )
        self._locks[session_id] = asyncio.Lock()

        while len(self._sessions) > self.capacity:
            evicted, _ = self._sessions.popitem(last=False)
            self._locks.pop(evicted, None)
            logger.info("Evicted least recently used session %s", evicted[:8])
        return session_id

    async def get(self, session_id: str) -> List[ConversationTurn]:
        """Return a copy of the transcript for `session_id`."""
        session = self._touch(session_id)
        return list(session.turns)

    async def append(self, session_id: str, *turns: ConversationTurn) -> None:
        """Append `turns` to the session as one atomic batch."""
        self._touch(session_id)
        async with self._locks[session_id]:
            # The session may have been closed while we waited on the lock.
            session = self._sessions.get(session_id)
            if session is None:
                raise UnknownSessionError(session_id)
            session.turns.extend(turns)
            session.last_used_at = self._clock()

    async def close(self, session_id: str) -> None:
        """Drop a session. Closing an unknown id raises UnknownSessionError."""
        if self._sessions.pop(session_id, None) is None:
            raise UnknownSessionError(session_id)
        self._locks.pop(session_id, None)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _is_expired(self, session: Session, now: float) -> bool:
        return self.ttl_seconds is not None and now - session.last_used_at > self.ttl_seconds

    def _evict_expired(self) -> None:
        now = self._clock()
        # Oldest entries come first in LRU order; stop at the first live one.
        for session_id in list(self._sessions):
            if not self._is_expired(self._sessions[session_id], now):
                break
            del self._sessions[session_id]
            self._locks.pop(session_id, None)
            logger.info("Expired idle session %s", session_id[:8])

    def _touch(self, session_id: str) -> Session:
        session = self._sessions.get(session_id)
        if session is None:
            raise UnknownSessionError(session_id)

        now = self._clock()
        if self._is_expired(session, now):
            del self._sessions[session_id]
            self._locks.pop(session_id, None)
            raise UnknownSessionError(session_id)

        session.last_used_at = now
        self._sessions.move_to_end(session_id)
        return session
