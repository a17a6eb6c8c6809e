"""
Pydantic Schemas — LINE webhook payloads, reply descriptors and admin responses.
"""
from datetime import datetime
from typing import Optional, Dict, List
from pydantic import BaseModel, ConfigDict, Field


# ──────────────── Inbound (LINE webhook) ────────────────

class EventSource(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    type: str = "user"
    user_id: Optional[str] = Field(None, alias="userId")


class EventMessage(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None
    type: str
    text: Optional[str] = None


class EventPostback(BaseModel):
    model_config = ConfigDict(extra="allow")

    data: str = ""


class LineEvent(BaseModel):
    """One entry of the webhook 'events' array. Unknown event types are kept, then ignored."""
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    type: str
    reply_token: Optional[str] = Field(None, alias="replyToken")
    source: EventSource = Field(default_factory=EventSource)
    message: Optional[EventMessage] = None
    postback: Optional[EventPostback] = None


class WebhookPayload(BaseModel):
    model_config = ConfigDict(extra="allow")

    destination: Optional[str] = None
    events: List[LineEvent] = []


# ──────────────── Outbound (reply descriptor) ────────────────

class QuickReplyOption(BaseModel):
    label: str
    text: str


class TextReply(BaseModel):
    type: str = "text"
    text: str
    quick_replies: Optional[List[QuickReplyOption]] = None


# ──────────────── Admin ────────────────

class SessionSnapshot(BaseModel):
    user_id: str
    state: str
    mode: str
    fields: Dict[str, str] = {}
    tags: List[str] = []


class SessionListResponse(BaseModel):
    total: int
    sessions: List[SessionSnapshot]


class ModeChangeRequest(BaseModel):
    mode: str = Field(..., description="AUTOMATED or HUMAN_HANDOFF")


class IntakeRecordEntry(BaseModel):
    id: int
    flow: str
    flow_title: Optional[str] = None
    fields: Dict = {}
    created_at: datetime

    class Config:
        from_attributes = True


class IntakeListResponse(BaseModel):
    total: int
    records: List[IntakeRecordEntry]
