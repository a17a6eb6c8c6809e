from intakebot.models.session import ChatSession, State, Mode
from intakebot.models.intake import IntakeRecord

__all__ = ["ChatSession", "State", "Mode", "IntakeRecord"]
