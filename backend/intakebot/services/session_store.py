"""
Session Store — Process-scoped, in-memory keyed store of conversation sessions.

Nothing is persisted: sessions live as long as the process does. Each user id
has its own asyncio lock so that two events for the same user in one webhook
batch are processed one after the other, while different users run in parallel.
"""
import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, List, Optional

from intakebot.models.session import ChatSession


class SessionStore:
    def __init__(self):
        self._sessions: Dict[str, ChatSession] = {}
        self._locks: Dict[str, asyncio.Lock] = {}

    def _lock_for(self, user_id: str) -> asyncio.Lock:
        # setdefault is atomic on the event loop thread
        return self._locks.setdefault(user_id, asyncio.Lock())

    def get_or_create(self, user_id: str) -> ChatSession:
        session = self._sessions.get(user_id)
        if session is None:
            session = ChatSession(user_id=user_id)
            self._sessions[user_id] = session
        return session

    def get(self, user_id: str) -> Optional[ChatSession]:
        return self._sessions.get(user_id)

    def put(self, session: ChatSession) -> None:
        self._sessions[session.user_id] = session

    def all(self) -> List[ChatSession]:
        return list(self._sessions.values())

    def __len__(self) -> int:
        return len(self._sessions)

    @asynccontextmanager
    async def locked(self, user_id: str) -> AsyncIterator[ChatSession]:
        """Hold the user's lock for the duration of one turn and yield their session.

        Callers put the updated session back before leaving the block.
        """
        async with self._lock_for(user_id):
            yield self.get_or_create(user_id)
