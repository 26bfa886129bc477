"""Background task that evicts expired chat sessions."""

import asyncio
import logging
from datetime import UTC, datetime, timedelta

from app.llm.chat.store import SessionStore

logger = logging.getLogger(__name__)

SESSION_TTL = timedelta(hours=1)


class SessionReaper:
    """Periodically sweeps sessions older than the TTL out of a store.

    Evicted sessions are dropped silently; clients holding their ID get a
    404 on the next request.
    """

    def __init__(
        self,
        store: SessionStore,
        ttl: timedelta = SESSION_TTL,
        interval: timedelta | None = None,
    ):
        self._store = store
        self._ttl = ttl
        self._interval = interval or ttl
        self._task: asyncio.Task | None = None

    @property
    def is_running(self) -> bool:
        return self._task is not None

    def sweep(self, now: datetime | None = None) -> int:
        """Run one sweep immediately.

        Returns:
            Number of sessions removed.
        """
        removed = self._store.sweep(now or datetime.now(UTC), self._ttl)
        if removed:
            logger.info(f"Cleaned up {removed} expired chat session(s)")
        return removed

    async def start(self) -> None:
        """Start the background sweep task."""
        if self._task is None:
            self._task = asyncio.create_task(self._loop())
            logger.info(
                f"Started chat session reaper (ttl={self._ttl.total_seconds():.0f}s, "
                f"interval={self._interval.total_seconds():.0f}s)"
            )

    async def stop(self) -> None:
        """Stop the background sweep task."""
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
            logger.info("Stopped chat session reaper")

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self._interval.total_seconds())
            try:
                self.sweep()
            except Exception as e:
                logger.exception(f"Error in chat session reaper: {e}")
