"""
In-memory per-browser sessions.

A session bundles one viewport, one calendar host (with its view controller)
and one activity feed host. Creating it mounts the calendar controller;
ending or expiring it tears the controller down so its resize listener is
released. Nothing here is persisted.
"""

import logging
import threading
from dataclasses import dataclass, field
from time import time
from typing import Callable, Optional

from config import SESSION_TTL_SECONDS
from hosts import ActivityFeedHost, CalendarHost
from security import _new_session_token
from viewport import Viewport

logger = logging.getLogger(__name__)


@dataclass
class Session:
    token: str
    viewport: Viewport
    calendar: CalendarHost
    activity: ActivityFeedHost
    last_seen: float = field(default_factory=time)
    mounted: bool = False

    def mount(self):
        if self.mounted:
            return
        self.mounted = True
        self.calendar.mount()

    def teardown(self):
        self.calendar.teardown()
        self.mounted = False


def _default_factory(token: str, width: int) -> Session:
    viewport = Viewport(width)
    return Session(token=token, viewport=viewport, calendar=CalendarHost(viewport), activity=ActivityFeedHost())


class SessionStore:
    def __init__(self, ttl_seconds: int = SESSION_TTL_SECONDS,
                 factory: Callable[[str, int], Session] = _default_factory):
        self.ttl_seconds = ttl_seconds
        self._factory = factory
        self._sessions: dict[str, Session] = {}
        self._lock = threading.Lock()

    def get(self, token: str) -> Optional[Session]:
        now = time()
        with self._lock:
            session = self._sessions.get(token or "")
            if session is None:
                return None
            if now - session.last_seen > self.ttl_seconds:
                del self._sessions[token]
                expired = session
            else:
                session.last_seen = now
                return session
        logger.info("Session expired after %ss idle", self.ttl_seconds)
        expired.teardown()
        return None

    def create(self, width: int) -> Session:
        self.purge_expired()
        token = _new_session_token()
        session = self._factory(token, width)
        session.last_seen = time()
        with self._lock:
            self._sessions[token] = session
            active = len(self._sessions)
        logger.info("Session mounted (%d active)", active)
        return session

    def end(self, token: str) -> bool:
        with self._lock:
            session = self._sessions.pop(token or "", None)
            active = len(self._sessions)
        if session is None:
            return False
        session.teardown()
        logger.info("Session ended (%d active)", active)
        return True

    def purge_expired(self) -> int:
        now = time()
        with self._lock:
            stale = [t for t, s in self._sessions.items() if now - s.last_seen > self.ttl_seconds]
            expired = [self._sessions.pop(t) for t in stale]
        for session in expired:
            session.teardown()
        if expired:
            logger.info("Purged %d idle sessions", len(expired))
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
