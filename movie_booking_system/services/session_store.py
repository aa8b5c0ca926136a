"""
In-memory registry of booking sessions.

Booking state is deliberately not persisted: a restart drops every
session and patrons log in again. A session lives no longer than the
token issued for it; expired entries are purged whenever the store is
used.
"""

import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Optional, Tuple

from ..config import settings
from .flow_controller import FlowController

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SessionStore:
    """Maps session ids to their flow controllers."""

    def __init__(
        self,
        lifetime: Optional[timedelta] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.lifetime = lifetime or timedelta(minutes=settings.SESSION_TOKEN_EXPIRE_MINUTES)
        self._clock = clock
        self._sessions: Dict[str, Tuple[FlowController, datetime]] = {}

    def __len__(self) -> int:
        self.purge_expired()
        return len(self._sessions)

    def create(self, factory: Callable[[], FlowController]) -> tuple:
        """Register a new controller and return ``(session_id, controller)``."""
        self.purge_expired()
        session_id = secrets.token_urlsafe(16)
        controller = factory()
        self._sessions[session_id] = (controller, self._clock() + self.lifetime)
        logger.debug(f"Session opened ({len(self._sessions)} active)")
        return session_id, controller

    def get(self, session_id: str) -> Optional[FlowController]:
        self.purge_expired()
        entry = self._sessions.get(session_id)
        return entry[0] if entry else None

    def discard(self, session_id: str) -> None:
        if self._sessions.pop(session_id, None) is not None:
            logger.debug(f"Session closed ({len(self._sessions)} active)")

    def purge_expired(self) -> int:
        """Drop sessions whose token has expired. Returns how many went."""
        now = self._clock()
        expired = [sid for sid, (_, expires_at) in self._sessions.items() if expires_at <= now]
        for session_id in expired:
            del self._sessions[session_id]
        if expired:
            logger.info(f"Purged {len(expired)} expired sessions ({len(self._sessions)} active)")
        return len(expired)

    def clear(self) -> None:
        self._sessions.clear()


_store = SessionStore()


def get_session_store() -> SessionStore:
    """Get the process-wide session store."""
    return _store
