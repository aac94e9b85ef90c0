"""Profile API routes."""
import logging
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from event_scheduler.database import get_db
from event_scheduler.dependencies import get_timezones
from event_scheduler.schemas.profile import ProfileCreate, ProfileUpdate, ProfileOut, ProfileDeleted
from event_scheduler.services import profile_service
from event_scheduler.services.timezones import TimezoneRegistry

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/", response_model=ProfileOut, status_code=status.HTTP_201_CREATED)
def create_profile(
    payload: ProfileCreate,
    db: Session = Depends(get_db),
    timezones: TimezoneRegistry = Depends(get_timezones),
):
    """Create a profile; legacy timezone names are stored in canonical form."""
    logger.info("Received profile creation request: name=%r timezone=%r", payload.name, payload.timezone)
    return profile_service.create_profile(db, timezones, payload.name, payload.timezone)


@router.get("/", response_model=list[ProfileOut])
def list_profiles(db: Session = Depends(get_db)):
    """List all profiles sorted by name."""
    return profile_service.list_profiles(db)


@router.get("/{profile_id}", response_model=ProfileOut)
def get_profile(profile_id: str, db: Session = Depends(get_db)):
    return profile_service.get_profile(db, profile_id)


@router.patch("/{profile_id}", response_model=ProfileOut)
def update_profile(
    profile_id: str,
    payload: ProfileUpdate,
    db: Session = Depends(get_db),
    timezones: TimezoneRegistry = Depends(get_timezones),
):
    """Update name and/or timezone (partial update)."""
    return profile_service.update_profile(db, timezones, profile_id, payload)


@router.delete("/{profile_id}", response_model=ProfileDeleted)
def delete_profile(profile_id: str, db: Session = Depends(get_db)):
    """Delete a profile and remove it from every event it participates in."""
    return profile_service.delete_profile(db, profile_id)
