"""Event API routes — delegates to event_service for invariant enforcement."""
import logging
from datetime import datetime
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from event_scheduler.config import settings
from event_scheduler.database import get_db
from event_scheduler.dependencies import get_timezones
from event_scheduler.schemas.event import EventCreate, EventUpdate, EventOut, EventDeleted
from event_scheduler.services import event_service
from event_scheduler.services.timezones import TimezoneRegistry

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/", response_model=EventOut, status_code=status.HTTP_201_CREATED)
def create_event(
    payload: EventCreate,
    db: Session = Depends(get_db),
    timezones: TimezoneRegistry = Depends(get_timezones),
):
    """Create an event from wall-clock times in its timezone."""
    return event_service.create_event(
        db,
        timezones,
        participants=payload.participants,
        event_timezone=payload.event_timezone,
        start_local=payload.start_local,
        end_local=payload.end_local,
        title=payload.title,
        created_by=payload.created_by,
    )


@router.get("/", response_model=list[EventOut])
def list_events(
    profile_id: Optional[str] = Query(None, description="Only events this profile participates in"),
    from_utc: Optional[datetime] = Query(None, alias="from"),
    to_utc: Optional[datetime] = Query(None, alias="to"),
    limit: int = Query(settings.DEFAULT_EVENT_LIMIT, ge=1, le=settings.MAX_EVENT_LIMIT),
    db: Session = Depends(get_db),
    timezones: TimezoneRegistry = Depends(get_timezones),
):
    """List events by ascending start time, optionally for one profile and a start-time range."""
    if profile_id:
        return event_service.get_events_for_profile(db, timezones, profile_id, from_utc, to_utc, limit)
    return event_service.list_events(db, from_utc, to_utc, limit)


@router.get("/{event_id}", response_model=EventOut)
def get_event(event_id: str, db: Session = Depends(get_db)):
    return event_service.get_event(db, event_id)


@router.put("/{event_id}", response_model=EventOut)
def update_event(
    event_id: str,
    payload: EventUpdate,
    actor_id: Optional[str] = Query(None, description="Profile performing the update"),
    db: Session = Depends(get_db),
    timezones: TimezoneRegistry = Depends(get_timezones),
):
    """Partially update participants, timezone or either boundary."""
    return event_service.update_event(db, timezones, event_id, payload, actor_id=actor_id)


@router.delete("/{event_id}", response_model=EventDeleted)
def delete_event(
    event_id: str,
    actor_id: Optional[str] = Query(None, description="Profile performing the deletion"),
    db: Session = Depends(get_db),
):
    """Delete an event permanently; its history stays in the audit log."""
    return event_service.delete_event(db, event_id, actor_id=actor_id)
