"""
Conversation Session Model — Per-user conversational position.
Lives in memory for the process lifetime; one record per LINE user id.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List


class State(str, Enum):
    """Position of a user inside an intake flow."""

    IDLE = "IDLE"

    # Course enrollment
    COURSE_ASK_ROLE = "COURSE_ASK_ROLE"
    COURSE_ASK_NAME = "COURSE_ASK_NAME"
    COURSE_ASK_PHONE = "COURSE_ASK_PHONE"
    COURSE_ASK_TYPE = "COURSE_ASK_TYPE"

    # Shuttle-ride inquiry
    SHUTTLE_ASK_DATE = "SHUTTLE_ASK_DATE"
    SHUTTLE_ASK_LOCATIONS = "SHUTTLE_ASK_LOCATIONS"
    SHUTTLE_ASK_DETAILS = "SHUTTLE_ASK_DETAILS"  # passengers, wheelchair

    # Vehicle-rental inquiry
    RENTAL_ASK_DATE = "RENTAL_ASK_DATE"
    RENTAL_ASK_DRIVER = "RENTAL_ASK_DRIVER"
    RENTAL_ASK_CONTACT = "RENTAL_ASK_CONTACT"

    @classmethod
    def parse(cls, value) -> "State | None":
        """Return the matching State, or None for anything outside the declared set."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


class Mode(str, Enum):
    AUTOMATED = "AUTOMATED"
    HUMAN_HANDOFF = "HUMAN_HANDOFF"


@dataclass
class ChatSession:
    user_id: str
    # Kept loose so a corrupt value can be detected and recovered by the engine
    state: State | str = State.IDLE
    mode: Mode = Mode.AUTOMATED
    fields: Dict[str, str] = field(default_factory=dict)
    tags: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        state = self.state.value if isinstance(self.state, State) else str(self.state)
        return {
            "user_id": self.user_id,
            "state": state,
            "mode": self.mode.value,
            "fields": dict(self.fields),
            "tags": list(self.tags),
        }
