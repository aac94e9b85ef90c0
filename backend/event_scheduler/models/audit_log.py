"""AuditLogEntry ORM model — append-only change history for events.

``event_id`` carries no foreign key: entries outlive the event they describe.
"""
from sqlalchemy import Column, String, DateTime, Integer, JSON, Index

from event_scheduler.database import Base
from event_scheduler.models.profile import utcnow


class AuditLogEntry(Base):
    __tablename__ = "event_logs"

    log_id = Column(Integer, primary_key=True, autoincrement=True)
    event_id = Column(String(36), nullable=False, index=True)
    updated_by = Column(String(36), nullable=True, index=True)  # acting profile, None for system changes
    changed_at_utc = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    diff = Column(JSON, nullable=False)

    __table_args__ = (Index("ix_event_logs_event_changed", "event_id", "changed_at_utc"),)
