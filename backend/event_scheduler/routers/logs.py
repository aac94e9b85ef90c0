"""Audit log API routes."""
import logging
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from event_scheduler.database import get_db
from event_scheduler.schemas.audit_log import AuditLogEntryOut
from event_scheduler.services import event_service

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/event/{event_id}", response_model=list[AuditLogEntryOut])
def get_logs_for_event(event_id: str, db: Session = Depends(get_db)):
    """Change history of an event, newest first (also after the event was deleted)."""
    return event_service.get_logs_for_event(db, event_id)
