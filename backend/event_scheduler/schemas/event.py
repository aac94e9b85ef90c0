"""Pydantic schemas for Events."""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel

from event_scheduler.schemas.profile import ProfileRef


class EventCreate(BaseModel):
    title: Optional[str] = None
    participants: list[str] = []
    event_timezone: Optional[str] = None
    start_local: Optional[str] = None  # wall-clock time in event_timezone, e.g. "2025-11-10T14:30"
    end_local: Optional[str] = None
    created_by: Optional[str] = None


class EventUpdate(BaseModel):
    """Partial update: exactly the mutable fields, unknown keys rejected."""

    participants: Optional[list[str]] = None
    event_timezone: Optional[str] = None
    start_local: Optional[str] = None
    end_local: Optional[str] = None

    model_config = {"extra": "forbid"}


class EventOut(BaseModel):
    event_id: str
    title: Optional[str] = None
    participants: list[ProfileRef] = []
    event_timezone: str
    start_at_utc: datetime
    end_at_utc: datetime
    created_by: Optional[ProfileRef] = None
    created_at_utc: datetime
    updated_at_utc: datetime
    # Set when events are listed for a profile: boundaries in that profile's zone
    viewer_timezone: Optional[str] = None
    start_local: Optional[datetime] = None
    end_local: Optional[datetime] = None


class EventDeleted(BaseModel):
    id: str
