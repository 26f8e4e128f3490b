"""
Session store - durable sender -> last-activity mapping.
Backs idle-timeout eviction and survives process restarts.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError

from pedidobot.db.models import SessionRecord
from pedidobot.db.sqlite import Database, db

logger = logging.getLogger(__name__)

# Marker for a queued removal in the pending-write map
_REMOVED = None


class SessionStore:
    """
    Session records on top of the async database.

    Reads fail open: a storage error means "no sessions known".
    Writes that fail are queued and retried by ``flush_pending``,
    which the expired-session sweep calls on every cycle.
    """

    def __init__(self, database: Optional[Database] = None):
        self.db = database or db
        self._pending: dict[str, Optional[datetime]] = {}

    async def get(self, sender: str) -> Optional[datetime]:
        """Last activity of a sender, or None if unknown."""
        if sender in self._pending:
            return self._pending[sender]
        try:
            async with self.db.session() as session:
                record = await session.get(SessionRecord, sender)
                return record.last_active_at if record else None
        except SQLAlchemyError as e:
            logger.error(f"Failed to read session for {sender}: {e}")
            return None

    async def touch(self, sender: str, now: Optional[datetime] = None) -> None:
        """Create or refresh the session record of a sender."""
        now = now or datetime.now()
        try:
            async with self.db.session() as session:
                await session.merge(SessionRecord(sender=sender, last_active_at=now))
            self._pending.pop(sender, None)
        except SQLAlchemyError as e:
            logger.warning(f"Failed to save session for {sender}, will retry: {e}")
            self._pending[sender] = now

    async def remove(self, sender: str) -> None:
        """Delete the session record of a sender."""
        try:
            async with self.db.session() as session:
                await session.execute(delete(SessionRecord).where(SessionRecord.sender == sender))
            self._pending.pop(sender, None)
        except SQLAlchemyError as e:
            logger.warning(f"Failed to remove session for {sender}, will retry: {e}")
            self._pending[sender] = _REMOVED

    async def list_expired(self, now: datetime, timeout: timedelta) -> list[str]:
        """
        Senders whose last activity is older than ``timeout``.

        Storage is re-read on every call so that records written by a
        previous process are taken into account.
        """
        await self.flush_pending()

        sessions: dict[str, datetime] = {}
        try:
            async with self.db.session() as session:
                rows = (await session.execute(select(SessionRecord))).scalars().all()
                sessions = {row.sender: row.last_active_at for row in rows}
        except SQLAlchemyError as e:
            logger.error(f"Failed to load sessions: {e}")

        for sender, last_active in self._pending.items():
            if last_active is _REMOVED:
                sessions.pop(sender, None)
            else:
                sessions[sender] = last_active

        cutoff = now - timeout
        return [sender for sender, last_active in sessions.items() if last_active < cutoff]

    async def flush_pending(self) -> int:
        """Retry queued writes. Returns the number still pending."""
        if not self._pending:
            return 0

        logger.info(f"Retrying {len(self._pending)} pending session writes")
        for sender, last_active in list(self._pending.items()):
            if last_active is _REMOVED:
                await self.remove(sender)
            else:
                await self.touch(sender, last_active)
        return len(self._pending)
