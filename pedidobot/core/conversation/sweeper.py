"""
Periodic eviction of idle sessions.
"""

import asyncio
import logging
from datetime import datetime, timedelta
from typing import Optional

from pedidobot.config import settings
from pedidobot.core.conversation.engine import ConversationEngine

logger = logging.getLogger(__name__)


class SessionSweeper:
    """Runs the engine's idle-session eviction on its own timer."""

    def __init__(
        self,
        engine: ConversationEngine,
        interval: Optional[timedelta] = None,
        initial_delay: timedelta = timedelta(seconds=10),
    ):
        self.engine = engine
        self.interval = interval or timedelta(minutes=settings.session_check_interval_minutes)
        self.initial_delay = initial_delay
        self._task: Optional[asyncio.Task] = None

    async def run_once(self, now: Optional[datetime] = None) -> list[str]:
        """Single sweep; pending session writes are retried first."""
        evicted = await self.engine.expire_sessions(now)
        if evicted:
            logger.info(f"Evicted {len(evicted)} idle session(s)")
        return evicted

    async def run_forever(self) -> None:
        await asyncio.sleep(self.initial_delay.total_seconds())
        while True:
            try:
                await self.run_once()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error(f"Session sweep failed: {e}", exc_info=True)
            await asyncio.sleep(self.interval.total_seconds())

    def start(self) -> None:
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self.run_forever())
            logger.info(f"Session sweeper started (every {self.interval})")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Session sweeper stopped")
