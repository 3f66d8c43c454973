"""Server-side registry of live interview sessions."""
import logging
import threading
import time
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

from interview_sim.models.interview_state import ConversationEntry, InterviewConfig

logger = logging.getLogger(__name__)


@dataclass
class ServerSession:
    config: InterviewConfig
    history: List[ConversationEntry] = field(default_factory=list)


class SessionStore(ABC):
    """Registry interface: sessions by interview id, plus a per-session lock."""

    def __init__(self):
        self._locks: Dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    @abstractmethod
    def get(self, interview_id: str) -> Optional[ServerSession]:
        ...

    @abstractmethod
    def put(self, interview_id: str, session: ServerSession) -> None:
        ...

    @abstractmethod
    def delete(self, interview_id: str) -> None:
        ...

    @contextmanager
    def session_lock(self, interview_id: str):
        """Serialize work on one interview id; other ids are not blocked."""
        with self._locks_guard:
            lock = self._locks.setdefault(interview_id, threading.Lock())
        with lock:
            yield

    def _drop_lock(self, interview_id: str) -> None:
        with self._locks_guard:
            self._locks.pop(interview_id, None)


class InMemorySessionStore(SessionStore):
    """Process-lifetime store with inactivity eviction (ttl_seconds=0 keeps forever).

    Expired sessions are dropped when looked up and swept on every ``put``.
    """

    def __init__(self, ttl_seconds: int = 0, clock: Callable[[], float] = time.monotonic):
        super().__init__()
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._sessions: Dict[str, Tuple[ServerSession, float]] = {}
        self._guard = threading.Lock()

    def _expired(self, touched_at: float) -> bool:
        return bool(self.ttl_seconds) and self._clock() - touched_at > self.ttl_seconds

    def get(self, interview_id: str) -> Optional[ServerSession]:
        with self._guard:
            item = self._sessions.get(interview_id)
            if item is None:
                return None
            session, touched_at = item
            if self._expired(touched_at):
                del self._sessions[interview_id]
                logger.info("Session expired interview_id=%s", interview_id)
                expired = True
            else:
                self._sessions[interview_id] = (session, self._clock())
                expired = False
        if expired:
            self._drop_lock(interview_id)
            return None
        return session

    def put(self, interview_id: str, session: ServerSession) -> None:
        with self._guard:
            expired = self._sweep_locked()
            self._sessions[interview_id] = (session, self._clock())
        for stale_id in expired:
            self._drop_lock(stale_id)

    def _sweep_locked(self) -> List[str]:
        """Remove expired sessions; caller holds ``_guard``. Returns the evicted ids."""
        if not self.ttl_seconds:
            return []
        expired = [sid for sid, (_, touched_at) in self._sessions.items() if self._expired(touched_at)]
        for sid in expired:
            del self._sessions[sid]
        if expired:
            logger.info("Swept expired sessions count=%d", len(expired))
        return expired

    def delete(self, interview_id: str) -> None:
        with self._guard:
            self._sessions.pop(interview_id, None)
        self._drop_lock(interview_id)

    def __len__(self) -> int:
        with self._guard:
            return len(self._sessions)
