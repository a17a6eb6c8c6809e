"""
Conversation Service — Runs one webhook event through normalizer, store, engine and LINE.
"""
import asyncio
from functools import lru_cache
from typing import List, Optional

from intakebot.models.session import ChatSession, Mode, State
from intakebot.schemas.schemas import LineEvent, TextReply
from intakebot.services.event_normalizer import normalize_event
from intakebot.services.line_client import LineMessagingClient
from intakebot.services.session_store import SessionStore
from intakebot.services.state_machine import StateMachine
from intakebot.utils.logger import log


class ConversationService:
    def __init__(self, store: SessionStore, engine: StateMachine, line_client: LineMessagingClient):
        self.store = store
        self.engine = engine
        self.line_client = line_client

    async def handle_event(self, event: LineEvent) -> Optional[TextReply]:
        """Process one event and deliver its reply. Returns the reply, or None when silent."""
        intent = normalize_event(event)
        user_id = event.source.user_id
        if intent is None or not user_id:
            return None

        async with self.store.locked(user_id) as session:
            result = await self.engine.step(session, intent)
            self.store.put(result.session)

        if result.reply is not None and event.reply_token:
            await self.line_client.reply(event.reply_token, result.reply)
        return result.reply

    async def handle_batch(self, events: List[LineEvent]) -> List[Optional[BaseException]]:
        """Process a webhook batch concurrently; one failing event does not stop the others.

        Returns:
            One entry per event: None on success, the raised exception otherwise.
        """
        outcomes = await asyncio.gather(
            *(self.handle_event(event) for event in events),
            return_exceptions=True,
        )

        failures: List[Optional[BaseException]] = []
        for event, outcome in zip(events, outcomes):
            if isinstance(outcome, BaseException):
                log(
                    "WEBHOOK",
                    f"Event failed (type={event.type}, user={event.source.user_id}, "
                    f"replyToken={event.reply_token}): {outcome!r}",
                )
                failures.append(outcome)
            else:
                failures.append(None)
        return failures

    async def set_mode(self, user_id: str, mode: Mode) -> ChatSession:
        """Operator override with the same effect as the global mode phrases."""
        async with self.store.locked(user_id) as session:
            session.mode = mode
            if mode == Mode.AUTOMATED:
                session.state = State.IDLE
            self.store.put(session)
        return session


@lru_cache()
def get_conversation_service() -> ConversationService:
    """Process-wide service: one session store shared by every request."""
    from intakebot.services.chat_service import ChatService
    from intakebot.services.ledger_service import LedgerService

    engine = StateMachine(sink=LedgerService(), responder=ChatService())
    return ConversationService(SessionStore(), engine, LineMessagingClient())
