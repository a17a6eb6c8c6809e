"""
Admin Routes — Operator view of live conversations and the intake ledger.
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from intakebot.database import get_db
from intakebot.models.session import Mode
from intakebot.schemas.schemas import (
    IntakeListResponse, IntakeRecordEntry, ModeChangeRequest, SessionListResponse, SessionSnapshot,
)
from intakebot.services.conversation_service import ConversationService, get_conversation_service
from intakebot.services.ledger_service import LedgerService

router = APIRouter(prefix="/api/admin", tags=["Admin"])


@router.get("/sessions", response_model=SessionListResponse)
def list_sessions(service: ConversationService = Depends(get_conversation_service)):
    """Snapshot of every conversation held in memory."""
    sessions = [SessionSnapshot(**s.to_dict()) for s in service.store.all()]
    return SessionListResponse(total=len(sessions), sessions=sessions)


@router.get("/sessions/{user_id}", response_model=SessionSnapshot)
def get_session(user_id: str, service: ConversationService = Depends(get_conversation_service)):
    session = service.store.get(user_id)
    if not session:
        raise HTTPException(status_code=404, detail="Session not found")
    return SessionSnapshot(**session.to_dict())


@router.post("/sessions/{user_id}/mode", response_model=SessionSnapshot)
async def change_mode(
    user_id: str,
    payload: ModeChangeRequest,
    service: ConversationService = Depends(get_conversation_service),
):
    """Take over a conversation or hand it back to the assistant."""
    if service.store.get(user_id) is None:
        raise HTTPException(status_code=404, detail="Session not found")
    try:
        mode = Mode(payload.mode.upper())
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Unknown mode: {payload.mode}")

    session = await service.set_mode(user_id, mode)
    return SessionSnapshot(**session.to_dict())


@router.get("/intakes", response_model=IntakeListResponse)
def list_intakes(
    flow: str = None,
    limit: int = 50,
    offset: int = 0,
    db: Session = Depends(get_db),
):
    """Completed intakes from the ledger, newest first."""
    total, records = LedgerService.list_records(db, flow=flow, limit=limit, offset=offset)
    return IntakeListResponse(
        total=total,
        records=[IntakeRecordEntry.model_validate(r) for r in records],
    )
