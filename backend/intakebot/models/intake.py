"""
Intake Record Model — Ledger row written when a guided intake flow completes.
Maps to the 'intake_records' table.
"""
from datetime import datetime, timezone
from sqlalchemy import Column, String, Integer, DateTime, JSON

from intakebot.database import Base


class IntakeRecord(Base):
    __tablename__ = "intake_records"

    id = Column(Integer, primary_key=True, autoincrement=True, index=True)

    flow = Column(String(16), nullable=False, index=True)   # course | shuttle | rental
    flow_title = Column(String(32))                         # 課程預約 | 接送諮詢 | 租車諮詢

    fields = Column(JSON, default=dict)   # Every field captured during the flow instance

    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
