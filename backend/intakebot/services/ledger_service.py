"""
Ledger Service — Completion sink for finished intake flows.
Writes one ledger row per completed flow and notifies the human team.
"""
import asyncio
import json
from typing import Dict, Optional

from sqlalchemy.orm import Session, sessionmaker

from intakebot.database import SessionLocal
from intakebot.models.intake import IntakeRecord
from intakebot.services.flows import FLOWS_BY_LABEL
from intakebot.services.notification_service import NotificationService


class LedgerService:
    """Records completed intakes in the ledger database."""

    def __init__(self, session_factory: sessionmaker = SessionLocal):
        self.session_factory = session_factory

    async def record(self, flow_label: str, fields: Dict[str, str]) -> None:
        # SQLAlchemy sessions here are synchronous
        await asyncio.to_thread(self.record_sync, flow_label, fields)

    def record_sync(self, flow_label: str, fields: Dict[str, str]) -> IntakeRecord:
        """Persist the intake and send the team notification.

        Args:
            flow_label: Flow identifier (course, shuttle, rental).
            fields: Every field captured during the flow.

        Returns:
            The created IntakeRecord.
        """
        flow = FLOWS_BY_LABEL.get(flow_label)
        title = flow.title if flow else flow_label

        db = self.session_factory()
        try:
            entry = LedgerService.save(db, flow_label, title, fields)
        finally:
            db.close()

        NotificationService.send_email(
            subject=f"新{title}",
            body=json.dumps(fields, ensure_ascii=False),
        )
        return entry

    @staticmethod
    def save(db: Session, flow_label: str, flow_title: str, fields: Dict[str, str]) -> IntakeRecord:
        entry = IntakeRecord(
            flow=flow_label,
            flow_title=flow_title,
            fields=dict(fields),
        )
        db.add(entry)
        db.commit()
        db.refresh(entry)
        return entry

    @staticmethod
    def list_records(
        db: Session,
        flow: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[int, list[IntakeRecord]]:
        """Ledger rows, newest first, with the unpaged total."""
        query = db.query(IntakeRecord).order_by(IntakeRecord.id.desc())
        if flow:
            query = query.filter(IntakeRecord.flow == flow)
        total = query.count()
        return total, query.offset(offset).limit(limit).all()
