"""Single-flight registry of in-progress jobs."""

import logging
import threading
from collections.abc import Hashable
from dataclasses import dataclass

from anime_relay.domain.jobs import UserJob

logger = logging.getLogger(__name__)


@dataclass
class SessionRegistry:
    """Track at most one in-flight job per user.

    Admission and release are atomic with respect to concurrent callers;
    the first caller for a user wins and every other caller is rejected
    until that user's session is released.
    """

    _sessions: dict[Hashable, UserJob | None]
    _lock: threading.Lock

    def __init__(self) -> None:
        self._sessions = {}
        self._lock = threading.Lock()

    def try_admit(self, user_id: Hashable, job: UserJob | None = None) -> bool:
        """Register a session for the user unless one is already active."""
        with self._lock:
            if user_id in self._sessions:
                return False
            self._sessions[user_id] = job
            count = len(self._sessions)
        logger.info("Session admitted for %s, active sessions: %d", user_id, count)
        return True

    def release(self, user_id: Hashable) -> None:
        """Remove the user's session if present."""
        with self._lock:
            if self._sessions.pop(user_id, _MISSING) is _MISSING:
                return
            count = len(self._sessions)
        logger.info("Session released for %s, active sessions: %d", user_id, count)

    def is_active(self, user_id: Hashable) -> bool:
        """Return true while the user has an admitted session."""
        with self._lock:
            return user_id in self._sessions

    def active_jobs(self) -> list[UserJob]:
        """Return a snapshot of the jobs currently in flight."""
        with self._lock:
            return [job for job in self._sessions.values() if job is not None]

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)


_MISSING = object()
