"""SessionStore owns every chat session for the lifetime of the process."""

import logging
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any

from app.llm.chat.session import ChatSession, new_session_id

if TYPE_CHECKING:
    from app.llm.gemini_client import GeminiClient

logger = logging.getLogger(__name__)


class SessionStore:
    """In-memory mapping from session ID to chat session.

    Responsibilities:
    - Create sessions bound to the shared Gemini client
    - Get/delete sessions by ID
    - Sweep sessions older than the TTL (called by the reaper)

    Sessions are lost when the process exits.
    """

    def __init__(self, client: "GeminiClient | None" = None):
        """Initialize the store.

        Args:
            client: Gemini client handed to every new session. ``None`` means
                no provider is configured and every reply falls back offline.
        """
        self._client = client
        self._sessions: dict[str, ChatSession] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def create(self) -> ChatSession:
        """Create and store an empty session.

        Returns:
            The new ChatSession; its ``session_id`` is the handle clients use.
        """
        session_id = new_session_id()
        while session_id in self._sessions:
            session_id = new_session_id()

        session = ChatSession(session_id=session_id, client=self._client)
        self._sessions[session_id] = session
        logger.info(f"Created chat session {session_id} (total sessions: {len(self._sessions)})")
        return session

    def get(self, session_id: str) -> ChatSession | None:
        """Get a session by ID.

        Returns:
            The ChatSession if found, None otherwise.
        """
        return self._sessions.get(session_id)

    def delete(self, session_id: str) -> bool:
        """Remove a session.

        Returns:
            True if the session existed, False otherwise.
        """
        session = self._sessions.pop(session_id, None)
        if session:
            logger.info(f"Cleared chat session {session_id}")
            return True
        return False

    def sweep(self, now: datetime, ttl: timedelta) -> int:
        """Remove sessions created before ``now - ttl``.

        Returns:
            Number of sessions removed.
        """
        cutoff = now - ttl
        expired_ids = [
            sid for sid, s in self._sessions.items()
            if s.created_at < cutoff
        ]

        for session_id in expired_ids:
            del self._sessions[session_id]
            logger.info(f"Cleaned up old session: {session_id}")

        return len(expired_ids)

    def get_stats(self) -> dict[str, Any]:
        """Get store statistics."""
        now = datetime.now(UTC)
        oldest = None
        if self._sessions:
            oldest = max(s.age_seconds(now) for s in self._sessions.values())
        return {
            "active_sessions": len(self._sessions),
            "processing_sessions": sum(1 for s in self._sessions.values() if s.is_processing),
            "oldest_session_age_seconds": oldest,
            "provider_configured": self._client is not None,
        }
