"""
Flow Definitions — Declarative step tables for the guided intake flows.

Each flow is an ordered list of steps. A step names the state the user is in,
the field that the user's next text is stored under, and the question asked
when the user arrives at that step. Capturing the last step's field completes
the flow.
"""
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from intakebot.models.session import State
from intakebot.schemas.schemas import QuickReplyOption


@dataclass(frozen=True)
class FlowStep:
    state: State
    field: str
    prompt: str
    quick_replies: Tuple[Tuple[str, str], ...] = ()


@dataclass(frozen=True)
class FlowDefinition:
    label: str          # Stored as fields["type"] and passed to the completion sink
    title: str          # Human-readable name for the ledger and notifications
    tag: str            # Appended to session tags on entry
    intro: str          # First question when started from a button
    keyword_intro: str  # First question when started by a keyword in free text
    summary: str        # Completion reply, formatted with captured fields
    steps: Tuple[FlowStep, ...]
    keywords: Tuple[str, ...] = ()

    @property
    def entry_state(self) -> State:
        return self.steps[0].state


class _Blank(dict):
    def __missing__(self, key):
        return ""


def render(template: str, fields: Dict[str, str], **extra) -> str:
    """Fill a prompt template from captured fields. Unknown placeholders render empty."""
    values = _Blank(fields)
    values.update(extra)
    return template.format_map(values)


def quick_reply_options(pairs: Tuple[Tuple[str, str], ...]) -> Optional[List[QuickReplyOption]]:
    if not pairs:
        return None
    return [QuickReplyOption(label=label, text=text) for label, text in pairs]


ROLE_SHORTCUTS = (
    ("我是照顧者", "我是照顧者"),
    ("長輩本人", "我是長輩本人"),
    ("社工/其他", "社工/其他"),
)

COURSE_TYPE_SHORTCUTS = (
    ("認知訓練", "認知訓練"),
    ("體適能運動", "體適能運動"),
    ("藝術創作", "藝術創作"),
)

DRIVER_SHORTCUTS = (
    ("自駕", "自駕"),
    ("需要駕駛", "需要駕駛"),
)


COURSE_FLOW = FlowDefinition(
    label="course",
    title="課程預約",
    tag="學堂-潛在學員",
    intro="【多扶學堂 課程報名】\n很高興您對課程有興趣！請問您是幫誰詢問呢？",
    keyword_intro="想了解課程嗎？請問您是幫誰詢問呢？(照顧者/長輩本人)",
    summary=(
        "感謝您！資料已收到。\n我們記下了：\n姓名：{name}\n電話：{phone}\n興趣：{courseType}"
        "\n\n專員會儘快與您聯繫安排試聽或說明！"
    ),
    steps=(
        FlowStep(State.COURSE_ASK_ROLE, "role", "請問您是幫誰詢問呢？", ROLE_SHORTCUTS),
        FlowStep(State.COURSE_ASK_NAME, "name", "了解。請問怎麼稱呼您？"),
        FlowStep(State.COURSE_ASK_PHONE, "phone", "好的 {name}，請留下您的聯絡電話，方便我們聯繫確認。"),
        FlowStep(
            State.COURSE_ASK_TYPE, "courseType",
            "請問您感興趣的課程類型是？(可直接輸入，如：認知課程、運動、藝術)",
            COURSE_TYPE_SHORTCUTS,
        ),
    ),
    keywords=("上課", "課程"),
)

SHUTTLE_FLOW = FlowDefinition(
    label="shuttle",
    title="接送諮詢",
    tag="接送-照顧者",
    intro="【多扶接送 預約諮詢】\n請告訴我您預計用車的「日期」與「出發時間」？\n(例如：下週三早上9點)",
    keyword_intro="沒問題，請問您想預約什麼時候的接送？",
    summary=(
        "收到您的需求！\n單趟預估費用約在 ${price_range} 元之間。"
        "\n\n客服專員會稍後致電給您確認精確報價與車輛狀況。"
    ),
    steps=(
        FlowStep(State.SHUTTLE_ASK_DATE, "date", "請告訴我您預計用車的「日期」與「出發時間」？"),
        FlowStep(State.SHUTTLE_ASK_LOCATIONS, "locations", "好的，請問「起點」和「終點」大概在哪裡？(例如：從木柵路三段到台大醫院)"),
        FlowStep(State.SHUTTLE_ASK_DETAILS, "details", "請問搭乘人數？是否有輪椅需求？"),
    ),
    keywords=("接送", "訂車"),
)

# Reachable from the rich menu only; no free-text keywords.
RENTAL_FLOW = FlowDefinition(
    label="rental",
    title="租車諮詢",
    tag="租車-需求者",
    intro="【無障礙租車 諮詢】\n請問您預計租借的日期區間是？\n(例如：12/20 到 12/22)",
    keyword_intro="請問您預計租借的日期區間是？",
    summary=(
        "感謝您！租車需求已收到。\n日期：{date}\n駕駛需求：{driverNeed}\n聯絡方式：{contact}"
        "\n\n專員會儘快與您確認車輛與報價。"
    ),
    steps=(
        FlowStep(State.RENTAL_ASK_DATE, "date", "請問您預計租借的日期區間是？"),
        FlowStep(State.RENTAL_ASK_DRIVER, "driverNeed", "請問需要我們安排駕駛嗎？(自駕 / 需要駕駛)", DRIVER_SHORTCUTS),
        FlowStep(State.RENTAL_ASK_CONTACT, "contact", "請留下您的稱呼與聯絡電話，方便專員與您確認車輛。"),
    ),
)

# Declaration order is the keyword priority: the first flow with a matching keyword wins.
FLOWS: Tuple[FlowDefinition, ...] = (COURSE_FLOW, SHUTTLE_FLOW, RENTAL_FLOW)

FLOWS_BY_LABEL: Dict[str, FlowDefinition] = {flow.label: flow for flow in FLOWS}

# state -> (flow, index of the step within that flow)
STEP_INDEX: Dict[State, Tuple[FlowDefinition, int]] = {
    step.state: (flow, i) for flow in FLOWS for i, step in enumerate(flow.steps)
}


def match_keyword(text: str) -> Optional[FlowDefinition]:
    """Substring match against each flow's vocabulary, in declaration order."""
    for flow in FLOWS:
        if any(word in text for word in flow.keywords):
            return flow
    return None
