from intakebot.services.chat_service import ChatService
from intakebot.services.ledger_service import LedgerService
from intakebot.services.line_client import LineMessagingClient
from intakebot.services.session_store import SessionStore
from intakebot.services.state_machine import StateMachine
from intakebot.services.conversation_service import ConversationService, get_conversation_service

__all__ = [
    "ChatService", "LedgerService", "LineMessagingClient", "SessionStore",
    "StateMachine", "ConversationService", "get_conversation_service",
]
