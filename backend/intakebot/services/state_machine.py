"""
State Machine Engine — Decides the next session and the reply for one inbound intent.

Evaluation order for a turn (first match wins):
    1. Global mode phrases (text only): switch to automated or human handoff.
    2. Corrupt state: reset to IDLE and ask the user to repeat.
    3. Buttons: start a flow, or switch to human handoff.
    4. Text inside a flow: capture the field and ask the next question,
       or complete the flow when the last field is captured.
    5. Text while IDLE: keyword-triggered flow start (automated mode only),
       silence in human handoff, otherwise the fallback assistant.

The engine never raises. Calls to the completion sink and the fallback
responder are bounded by timeouts and their failures are handled here.
"""
import asyncio
from dataclasses import dataclass, replace
from typing import Dict, Optional, Protocol

from intakebot.config import Settings, get_settings
from intakebot.models.session import ChatSession, Mode, State
from intakebot.schemas.schemas import TextReply
from intakebot.services.event_normalizer import ButtonAction, ButtonIntent, Intent, TextIntent
from intakebot.services.flows import (
    COURSE_FLOW, RENTAL_FLOW, SHUTTLE_FLOW, STEP_INDEX,
    FlowDefinition, match_keyword, quick_reply_options, render,
)
from intakebot.utils.logger import log

LOST_TRACK_TEXT = "抱歉，我剛剛忘了我們聊到哪裡了，可以請您再說一次嗎？"
FALLBACK_APOLOGY_TEXT = "抱歉，我現在腦袋有點打結，請稍後再試，或聯絡真人客服。"
AUTOMATED_SWITCH_TEXT = "已切換回 AI 智能助理模式，有什麼我可以幫您的嗎？"
HUMAN_SWITCH_TEXT = "已切換為真人模式，請稍候客服回應。"
HUMAN_BUTTON_TEXT = (
    "【切換為真人模式】\n目前客服人員會儘快查看您的訊息。\n"
    "若有急事請撥打 {hotline}。\n(輸入「{phrase}」可切換回自動回覆)"
)

BUTTON_FLOWS: Dict[ButtonAction, FlowDefinition] = {
    ButtonAction.START_COURSE: COURSE_FLOW,
    ButtonAction.START_SHUTTLE: SHUTTLE_FLOW,
    ButtonAction.START_RENTAL: RENTAL_FLOW,
}


class CompletionSink(Protocol):
    async def record(self, flow_label: str, fields: Dict[str, str]) -> None: ...


class FallbackResponder(Protocol):
    async def respond(self, text: str) -> str: ...


@dataclass
class TurnResult:
    session: ChatSession
    reply: Optional[TextReply]


def _text(text: str, quick_replies=None) -> TextReply:
    return TextReply(text=text, quick_replies=quick_replies)


class StateMachine:
    """Single authority over session transitions."""

    def __init__(
        self,
        sink: CompletionSink,
        responder: FallbackResponder,
        settings: Optional[Settings] = None,
    ):
        self.sink = sink
        self.responder = responder
        self.settings = settings or get_settings()

    async def step(self, session: ChatSession, intent: Intent) -> TurnResult:
        """Compute one turn. The input session is left untouched; the result carries the next one."""
        session = replace(session, fields=dict(session.fields), tags=list(session.tags))

        state = State.parse(session.state)
        if state is None:
            log("STATE_MACHINE", f"Corrupt state {session.state!r} for user {session.user_id}; reset to IDLE")
            session.state = State.IDLE

        if isinstance(intent, TextIntent):
            result = self._global_command(session, intent.text)
            if result is not None:
                return result

        if state is None:
            return TurnResult(session, _text(LOST_TRACK_TEXT))
        session.state = state

        if isinstance(intent, ButtonIntent):
            return self._on_button(session, intent.action)

        if state is not State.IDLE:
            return await self._capture(session, state, intent.text)

        return await self._on_idle_text(session, intent.text)

    # ─── Global phrases ──────────────────────────────────────────────

    def _global_command(self, session: ChatSession, text: str) -> Optional[TurnResult]:
        if text == self.settings.AUTOMATED_MODE_PHRASE:
            session.mode = Mode.AUTOMATED
            session.state = State.IDLE
            return TurnResult(session, _text(AUTOMATED_SWITCH_TEXT))

        if text == self.settings.HUMAN_MODE_PHRASE:
            session.mode = Mode.HUMAN_HANDOFF
            return TurnResult(session, _text(HUMAN_SWITCH_TEXT))

        return None

    # ─── Buttons ─────────────────────────────────────────────────────

    def _on_button(self, session: ChatSession, action: ButtonAction) -> TurnResult:
        if action is ButtonAction.SWITCH_TO_HUMAN:
            session.mode = Mode.HUMAN_HANDOFF
            text = HUMAN_BUTTON_TEXT.format(
                hotline=self.settings.HUMAN_HOTLINE,
                phrase=self.settings.AUTOMATED_MODE_PHRASE,
            )
            return TurnResult(session, _text(text))

        return self._start_flow(session, BUTTON_FLOWS[action], from_keyword=False)

    def _start_flow(self, session: ChatSession, flow: FlowDefinition, from_keyword: bool) -> TurnResult:
        session.fields = {"type": flow.label}
        session.tags.append(flow.tag)
        session.state = flow.entry_state

        intro = flow.keyword_intro if from_keyword else flow.intro
        return TurnResult(session, _text(intro, quick_reply_options(flow.steps[0].quick_replies)))

    # ─── In-flow capture ─────────────────────────────────────────────

    async def _capture(self, session: ChatSession, state: State, text: str) -> TurnResult:
        flow, index = STEP_INDEX[state]
        session.fields[flow.steps[index].field] = text

        if index + 1 < len(flow.steps):
            nxt = flow.steps[index + 1]
            session.state = nxt.state
            prompt = render(nxt.prompt, session.fields)
            return TurnResult(session, _text(prompt, quick_reply_options(nxt.quick_replies)))

        return await self._complete(session, flow)

    async def _complete(self, session: ChatSession, flow: FlowDefinition) -> TurnResult:
        snapshot = dict(session.fields)
        session.state = State.IDLE

        # Best effort: the session stays IDLE and the user is answered either way
        try:
            await asyncio.wait_for(
                self.sink.record(flow.label, snapshot),
                timeout=self.settings.SINK_TIMEOUT_SECONDS,
            )
        except asyncio.TimeoutError:
            log("STATE_MACHINE", f"Completion sink timed out for {flow.label} ({session.user_id}): {snapshot}")
        except Exception as e:
            log("STATE_MACHINE", f"Completion sink failed for {flow.label} ({session.user_id}): {e!r}")

        summary = render(flow.summary, snapshot, price_range=self.settings.SHUTTLE_PRICE_RANGE)
        return TurnResult(session, _text(summary))

    # ─── Idle text ───────────────────────────────────────────────────

    async def _on_idle_text(self, session: ChatSession, text: str) -> TurnResult:
        if session.mode == Mode.HUMAN_HANDOFF:
            return TurnResult(session, None)

        flow = match_keyword(text)
        if flow is not None:
            return self._start_flow(session, flow, from_keyword=True)

        try:
            answer = await asyncio.wait_for(
                self.responder.respond(text),
                timeout=self.settings.FALLBACK_TIMEOUT_SECONDS,
            )
        except asyncio.TimeoutError:
            log("STATE_MACHINE", f"Fallback responder timed out for user {session.user_id}")
            answer = FALLBACK_APOLOGY_TEXT
        except Exception as e:
            log("STATE_MACHINE", f"Fallback responder failed for user {session.user_id}: {e!r}")
            answer = FALLBACK_APOLOGY_TEXT

        return TurnResult(session, _text(answer or FALLBACK_APOLOGY_TEXT))
