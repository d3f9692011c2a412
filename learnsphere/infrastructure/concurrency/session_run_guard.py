import asyncio
from typing import Dict, Optional

import structlog

from learnsphere.domain.cancellation import CancellationToken

logger = structlog.get_logger(__name__)


class SessionRunGuard:
    """
    Tracks the active pipeline run per session.

    At most one run per session id; each active run owns a cancellation token.
    """

    def __init__(self):
        self._active: Dict[str, CancellationToken] = {}
        self._lock = asyncio.Lock()

    async def try_acquire(self, session_id: str) -> Optional[CancellationToken]:
        async with self._lock:
            if session_id in self._active:
                return None
            token = CancellationToken()
            self._active[session_id] = token
            return token

    async def release(self, session_id: str) -> None:
        async with self._lock:
            self._active.pop(session_id, None)

    async def cancel(self, session_id: str, reason: str = "Generation was cancelled") -> bool:
        async with self._lock:
            token = self._active.get(session_id)
        if token is None:
            return False
        token.cancel(reason)
        logger.info("session_run_cancel_requested", target_session_id=session_id)
        return True

    async def is_active(self, session_id: str) -> bool:
        async with self._lock:
            return session_id in self._active
