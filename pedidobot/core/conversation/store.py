"""
In-memory conversation state with one lock per sender.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from pedidobot.core.conversation.models import ConversationState


class ConversationStore:
    """
    Holds conversation state per sender.

    All reads and writes of one sender's state happen while holding that
    sender's lock; different senders never wait for each other. A lock is
    dropped once nobody holds or waits for it and the sender has no state.
    """

    def __init__(self):
        self._states: dict[str, ConversationState] = {}
        self._locks: dict[str, asyncio.Lock] = {}
        self._lock_users: dict[str, int] = {}

    @asynccontextmanager
    async def lock(self, sender: str) -> AsyncIterator[None]:
        """Serialize events for a sender."""
        lock = self._locks.get(sender)
        if lock is None:
            lock = self._locks[sender] = asyncio.Lock()
        self._lock_users[sender] = self._lock_users.get(sender, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[sender] -= 1
            if not self._lock_users[sender]:
                del self._lock_users[sender]
                if sender not in self._states:
                    del self._locks[sender]

    def get(self, sender: str) -> Optional[ConversationState]:
        return self._states.get(sender)

    def put(self, state: ConversationState) -> None:
        self._states[state.sender] = state

    def discard(self, sender: str) -> None:
        """Forget a sender's state; its lock goes once the last holder releases it."""
        self._states.pop(sender, None)
        if sender not in self._lock_users:
            self._locks.pop(sender, None)

    def has_lock(self, sender: str) -> bool:
        return sender in self._locks

    def __contains__(self, sender: str) -> bool:
        return sender in self._states

    def __len__(self) -> int:
        return len(self._states)
