"""
app/services/session_service.py

Purpose: Bot upload session management

- In-memory session per Telegram user (not persisted)
- Enforces valid state transitions
- Serializes handling per user (asyncio.Lock per key)
- Idle session expiry
"""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

from app.core.config import settings
from app.core.logging import get_logger, LogContext
from app.flow.states import UploadState, is_valid_transition
from utils.time_utils import is_session_expired, utc_now

logger = get_logger(__name__)


@dataclass
class MediaInfo:
    telegram_file_id: str
    original_name: str
    mime_type: str
    size: Optional[int] = None


@dataclass
class UploadSession:
    state: UploadState
    artist_id: str
    product_type: Optional[str] = None
    media: Optional[MediaInfo] = None
    title: Optional[str] = None
    description: Optional[str] = None
    price: Optional[int] = None
    currency: str = "INR"
    category: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    stock: Optional[int] = None
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)


class BotSessionStore:
    """
    Telegram user id -> UploadSession.

    Callers hold `lock(user_id)` while reading and mutating a session so two
    updates from the same user never interleave.
    """

    def __init__(self):
        self._sessions: Dict[int, UploadSession] = {}
        self._locks: Dict[int, asyncio.Lock] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def lock(self, telegram_user_id: int) -> asyncio.Lock:
        return self._locks.setdefault(telegram_user_id, asyncio.Lock())

    def get(self, telegram_user_id: int) -> Optional[UploadSession]:
        return self._sessions.get(telegram_user_id)

    def start(self, telegram_user_id: int, artist_id: str) -> UploadSession:
        """
        Replaces any existing session with a fresh one at AWAITING_MEDIA_TYPE.
        """
        session = UploadSession(state=UploadState.AWAITING_MEDIA_TYPE, artist_id=artist_id)
        self._sessions[telegram_user_id] = session
        logger.debug(f"Upload session started for {telegram_user_id}")
        return session

    def advance(self, telegram_user_id: int, new_state: UploadState, **changes) -> UploadSession:
        """
        Moves the session to `new_state` and applies field changes.

        Raises:
            KeyError: no session for the user
            ValueError: transition not allowed
        """
        session = self._sessions[telegram_user_id]

        with LogContext(telegram_user_id=telegram_user_id, state=new_state.value):
            if not is_valid_transition(session.state, new_state):
                logger.warning(f"Invalid state transition attempted: {session.state} -> {new_state}")
                raise ValueError(f"Invalid state transition: {session.state} -> {new_state}")

            for key, value in changes.items():
                setattr(session, key, value)
            session.state = new_state
            session.updated_at = utc_now()
            logger.debug("Upload session advanced")
            return session

    def clear(self, telegram_user_id: int) -> bool:
        return self._sessions.pop(telegram_user_id, None) is not None

    def _is_busy(self, telegram_user_id: int) -> bool:
        lock = self._locks.get(telegram_user_id)
        return lock is not None and lock.locked()

    def cleanup(self, timeout_minutes: Optional[int] = None) -> int:
        """
        Drops sessions idle for longer than the timeout. Sessions whose
        user lock is held are mid-update and stay.

        Returns:
            Number of sessions removed
        """
        timeout = timeout_minutes if timeout_minutes is not None else settings.SESSION_TIMEOUT_MINUTES
        expired = [
            user_id
            for user_id, session in self._sessions.items()
            if is_session_expired(session.updated_at, timeout) and not self._is_busy(user_id)
        ]
        for user_id in expired:
            del self._sessions[user_id]

        # Locks are only kept for users that still have a session or are mid-update
        for user_id in list(self._locks):
            if user_id not in self._sessions and not self._is_busy(user_id):
                del self._locks[user_id]

        if expired:
            logger.info(f"Expired {len(expired)} idle upload sessions")
        return len(expired)


# Singleton instance
session_store = BotSessionStore()
