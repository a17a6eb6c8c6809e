"""
Event Normalizer — Turns raw LINE webhook events into intents the engine understands.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from intakebot.schemas.schemas import LineEvent


class ButtonAction(str, Enum):
    START_COURSE = "start-course-flow"
    START_SHUTTLE = "start-shuttle-flow"
    START_RENTAL = "start-rental-flow"
    SWITCH_TO_HUMAN = "switch-to-human"


# Postback data sent by the rich menu buttons
POSTBACK_ACTIONS = {
    "action=course": ButtonAction.START_COURSE,
    "action=shuttle": ButtonAction.START_SHUTTLE,
    "action=rental": ButtonAction.START_RENTAL,
    "action=human": ButtonAction.SWITCH_TO_HUMAN,
}


@dataclass(frozen=True)
class ButtonIntent:
    action: ButtonAction


@dataclass(frozen=True)
class TextIntent:
    text: str


Intent = Union[ButtonIntent, TextIntent]


def normalize_event(event: LineEvent) -> Optional[Intent]:
    """Return the intent carried by an event, or None when there is nothing to act on."""
    if event.type == "postback" and event.postback is not None:
        action = POSTBACK_ACTIONS.get(event.postback.data.strip())
        return ButtonIntent(action) if action else None

    if event.type == "message" and event.message is not None:
        if event.message.type == "text" and event.message.text is not None:
            return TextIntent(event.message.text.strip())

    return None
