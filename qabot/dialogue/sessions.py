"""SessionManager: bounded, expiring in-memory store of per-session dialogue state.

Sessions are created lazily, evicted least-recently-used beyond
``max_sessions`` and forgotten after ``ttl_seconds`` without activity;
sessions with a request in flight are never evicted. All
mutation from the pipeline goes through ``lease()``, which holds the
session's own lock so concurrent requests on one session run one at a time.
"""
from __future__ import annotations

import asyncio
import logging
import time
from collections import OrderedDict
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import AsyncIterator, Callable, List, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HistoryTurn:
    user: str
    bot: str


@dataclass
class Session:
    session_id: str
    history: List[HistoryTurn] = field(default_factory=list)
    context_id: Optional[str] = None
    created_at: float = 0.0
    last_seen: float = 0.0
    lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False, compare=False)
    # Requests holding or waiting for the lock; such a session is never evicted.
    leases: int = field(default=0, repr=False, compare=False)


class SessionManager:
    def __init__(
        self,
        *,
        max_sessions: int = 10_000,
        ttl_seconds: float = 3600,
        max_history: int = 0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._max_sessions = max_sessions
        self._ttl = ttl_seconds
        self._max_history = max_history
        self._clock = clock
        self._store: OrderedDict[str, Session] = OrderedDict()

    # ── Lookup ─────────────────────────────────────────────────────

    def get_or_create(self, session_id: str) -> Session:
        session = self.get(session_id)
        if session is not None:
            return session
        now = self._clock()
        session = Session(session_id=session_id, created_at=now, last_seen=now)
        self._store[session_id] = session
        self._evict(keep=session_id)
        logger.debug("SessionManager: created session %s", session_id)
        return session

    def get(self, session_id: str) -> Optional[Session]:
        """Live session for *session_id*, or None. Never creates one."""
        session = self._store.get(session_id)
        if session is None:
            return None
        now = self._clock()
        if now - session.last_seen > self._ttl and not session.leases:
            self._store.pop(session_id, None)
            logger.debug("SessionManager: session %s expired", session_id)
            return None
        session.last_seen = now
        self._store.move_to_end(session_id)
        return session

    def drop(self, session_id: str) -> bool:
        return self._store.pop(session_id, None) is not None

    @asynccontextmanager
    async def lease(self, session_id: str) -> AsyncIterator[Session]:
        """Exclusive access to the session for the duration of one request."""
        session = self.get_or_create(session_id)
        session.leases += 1
        try:
            async with session.lock:
                yield session
        finally:
            session.leases -= 1

    # ── Mutation ───────────────────────────────────────────────────

    @staticmethod
    def set_context(session: Session, context_id: Optional[str]) -> None:
        session.context_id = context_id

    def append_history(self, session: Session, utterance: str, answer: str) -> None:
        session.history.append(HistoryTurn(user=utterance, bot=answer))
        if self._max_history and len(session.history) > self._max_history:
            del session.history[: len(session.history) - self._max_history]

    # ── Housekeeping ───────────────────────────────────────────────

    @property
    def size(self) -> int:
        return len(self._store)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._store

    def clear(self) -> None:
        self._store.clear()

    def _evict(self, keep: str) -> None:
        now = self._clock()
        overflow = len(self._store) - self._max_sessions
        # LRU order: expired sessions come first, then the least recently used.
        for session_id, session in list(self._store.items()):
            if session.leases or session_id == keep:
                continue
            if now - session.last_seen > self._ttl:
                logger.debug("SessionManager: session %s expired", session_id)
            elif overflow > 0:
                logger.info("SessionManager: capacity reached, evicted session %s", session_id)
            else:
                break
            del self._store[session_id]
            overflow -= 1
        if overflow > 0:
            logger.warning(
                "SessionManager: %d sessions over capacity, all of them in use", overflow,
            )
