"""Pydantic schemas for audit log entries."""
from datetime import datetime
from typing import Any, Optional
from pydantic import BaseModel

from event_scheduler.schemas.profile import ProfileRef


class AuditLogEntryOut(BaseModel):
    log_id: int
    event_id: str
    updated_by: Optional[ProfileRef] = None
    changed_at_utc: datetime
    diff: dict[str, Any]
