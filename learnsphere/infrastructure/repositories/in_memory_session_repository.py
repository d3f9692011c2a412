from __future__ import annotations

import asyncio
from collections import OrderedDict
from typing import List, Optional

import structlog

from learnsphere.core.settings import settings
from learnsphere.domain.interfaces.session_repository import ISessionRepository
from learnsphere.domain.sessions import LearningSession

logger = structlog.get_logger(__name__)


class InMemorySessionRepository(ISessionRepository):
    """
    Bounded session store.

    Inserting a new id beyond `max_sessions` evicts the oldest insertion.
    Re-saving a known id replaces it without changing its position.
    """

    def __init__(self, max_sessions: Optional[int] = None):
        self.max_sessions = max(1, max_sessions or settings.SESSION_STORE_MAX_SESSIONS)
        self._lock = asyncio.Lock()
        self._sessions: "OrderedDict[str, LearningSession]" = OrderedDict()

    async def save(self, session: LearningSession) -> None:
        async with self._lock:
            if session.id in self._sessions:
                self._sessions[session.id] = session
                return
            self._sessions[session.id] = session
            while len(self._sessions) > self.max_sessions:
                evicted_id, _ = self._sessions.popitem(last=False)
                logger.info("session_evicted", evicted_session_id=evicted_id, limit=self.max_sessions)

    async def get(self, session_id: str) -> Optional[LearningSession]:
        async with self._lock:
            return self._sessions.get(session_id)

    async def list(self) -> List[LearningSession]:
        async with self._lock:
            return list(reversed(self._sessions.values()))

    async def delete(self, session_id: str) -> bool:
        async with self._lock:
            return self._sessions.pop(session_id, None) is not None

    async def clear(self) -> None:
        async with self._lock:
            self._sessions.clear()
