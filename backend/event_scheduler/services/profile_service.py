"""Profile service — name/timezone validation and the participant cascade.

Deleting a profile removes it from every event without going through the
event service. An event whose only participant was the deleted profile is
left with no participants; that state is not audited or repaired.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from event_scheduler.errors import ConflictError, NotFoundError, ValidationError
from event_scheduler.models.event import Event, EventParticipant
from event_scheduler.models.profile import Profile
from event_scheduler.schemas.profile import ProfileUpdate
from event_scheduler.services.timezones import TimezoneRegistry
from event_scheduler.services.validation import PROFILE_NAME_MAX_LENGTH, validate_profile_data

logger = logging.getLogger(__name__)


def _canonical_timezone(timezones: TimezoneRegistry, tz: str) -> str:
    if not timezones.is_valid(tz):
        raise ValidationError(f"Unknown timezone: {tz.strip()}", field="timezone")
    return timezones.normalize(tz)


def _ensure_name_free(db: Session, name: str, profile_id: Optional[str] = None) -> None:
    query = db.query(Profile.profile_id).filter(Profile.name == name)
    if profile_id:
        query = query.filter(Profile.profile_id != profile_id)
    if query.first() is not None:
        raise ConflictError("Profile with this name already exists", field="name")


def _commit_profile(db: Session, profile: Profile) -> Profile:
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Profile with this name already exists", field="name") from None
    db.refresh(profile)
    return profile


def create_profile(db: Session, timezones: TimezoneRegistry, name: Optional[str], timezone_name: Optional[str]) -> Profile:
    result = validate_profile_data(name, timezone_name)
    if not result.valid:
        raise ValidationError(result.error, field=result.field)

    trimmed = name.strip()
    canonical = _canonical_timezone(timezones, timezone_name)
    _ensure_name_free(db, trimmed)

    now = datetime.now(timezone.utc)
    profile = Profile(name=trimmed, timezone=canonical, created_at_utc=now, updated_at_utc=now)
    db.add(profile)
    _commit_profile(db, profile)
    logger.info("Created profile %s (%s, %s)", profile.profile_id, profile.name, profile.timezone)
    return profile


def list_profiles(db: Session) -> list[Profile]:
    return db.query(Profile).order_by(Profile.name).all()


def get_profile(db: Session, profile_id: str) -> Profile:
    profile = db.get(Profile, profile_id)
    if profile is None:
        raise NotFoundError(f"No profile found with ID: {profile_id}", field="profile_id")
    return profile


def update_profile(db: Session, timezones: TimezoneRegistry, profile_id: str, patch: ProfileUpdate) -> Profile:
    """Partial update of name and/or timezone."""
    profile = get_profile(db, profile_id)
    changes = patch.model_dump(exclude_unset=True)

    if "name" in changes:
        name = (changes["name"] or "").strip()
        if not name:
            raise ValidationError("Name is required", field="name")
        if len(name) > PROFILE_NAME_MAX_LENGTH:
            raise ValidationError(f"Name cannot exceed {PROFILE_NAME_MAX_LENGTH} characters", field="name")
        _ensure_name_free(db, name, profile_id)
        profile.name = name

    if "timezone" in changes:
        if not changes["timezone"] or not changes["timezone"].strip():
            raise ValidationError("Timezone is required", field="timezone")
        profile.timezone = _canonical_timezone(timezones, changes["timezone"])

    profile.updated_at_utc = datetime.now(timezone.utc)
    _commit_profile(db, profile)
    logger.info("Updated profile %s", profile_id)
    return profile


def delete_profile(db: Session, profile_id: str) -> dict[str, Any]:
    """Delete a profile and pull it from every event it takes part in.

    One transaction of bulk statements. The events are not diffed and no
    audit entries are written for this cascade. Events can end up with an
    empty participant list.
    """
    profile = get_profile(db, profile_id)

    affected = db.query(EventParticipant.event_id).filter(EventParticipant.profile_id == profile_id)
    event_ids = [row.event_id for row in affected]
    if event_ids:
        db.query(Event).filter(Event.event_id.in_(event_ids)).update(
            {Event.updated_at_utc: datetime.now(timezone.utc)}, synchronize_session=False
        )
        db.query(EventParticipant).filter(EventParticipant.profile_id == profile_id).delete(
            synchronize_session=False
        )
    db.query(Event).filter(Event.created_by == profile_id).update(
        {Event.created_by: None}, synchronize_session=False
    )
    db.delete(profile)
    db.commit()
    logger.info("Deleted profile %s (removed from %d events)", profile_id, len(event_ids))
    return {"success": True, "id": profile_id}
