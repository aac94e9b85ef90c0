"""Core event service — enforces the event invariants.

Responsibilities:
- Wall-clock input is converted to UTC in the event's canonical timezone
- Every stored event has end_at_utc > start_at_utc and at least one participant
- Participants are checked with one bulk COUNT, never per-id lookups
- Updates are diffed against the stored state; only non-empty diffs are logged
- Creation and deletion are logged (best effort, see audit_service)

Lifecycle: nonexistent -> active -> (updated)* -> deleted. Deletion is final;
afterwards the event survives only in its audit entries.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from event_scheduler.errors import NotFoundError, ValidationError
from event_scheduler.models.event import Event, EventParticipant
from event_scheduler.models.profile import Profile
from event_scheduler.schemas.event import EventUpdate
from event_scheduler.services import audit_service
from event_scheduler.services.diff import build_diff, event_snapshot, serialize_value
from event_scheduler.services.timezones import TimezoneRegistry, as_utc
from event_scheduler.services.validation import (
    ValidationResult,
    sanitize_string,
    validate_date_range,
    validate_event_data,
    validate_participants,
)

logger = logging.getLogger(__name__)


def _raise_if_invalid(result: ValidationResult) -> None:
    if not result.valid:
        raise ValidationError(result.error, field=result.field)


def _resolve_timezone(timezones: TimezoneRegistry, tz: Optional[str]) -> str:
    if not timezones.is_valid(tz):
        raise ValidationError("Invalid timezone", field="event_timezone")
    return timezones.normalize(tz)


def _to_utc(timezones: TimezoneRegistry, local: str, tz: str, field: str) -> datetime:
    try:
        return timezones.local_to_utc(local, tz)
    except (TypeError, ValueError):
        raise ValidationError("Invalid date format", field=field) from None


def _check_participants_exist(db: Session, participant_ids: list[str]) -> None:
    """Single COUNT over the requested ids; does not reveal which one is unknown."""
    count = (
        db.query(func.count(Profile.profile_id))
        .filter(Profile.profile_id.in_(participant_ids))
        .scalar()
    )
    if count != len(participant_ids):
        raise ValidationError("One or more participants are invalid", field="participants")


def _participant_links(participant_ids: list[str], event_id: Optional[str] = None) -> list[EventParticipant]:
    return [
        EventParticipant(event_id=event_id, profile_id=pid, position=position)
        for position, pid in enumerate(participant_ids)
    ]


def _profile_ref(profile_id: Optional[str], profile: Optional[Profile]) -> Optional[dict[str, Any]]:
    if profile is not None:
        return {"profile_id": profile.profile_id, "name": profile.name, "timezone": profile.timezone}
    if profile_id:
        return {"profile_id": profile_id}
    return None


def to_display(
    event: Event,
    timezones: Optional[TimezoneRegistry] = None,
    viewer_timezone: Optional[str] = None,
) -> dict[str, Any]:
    """Event with participant and creator ids resolved to names.

    With a viewer timezone the boundaries are also rendered as wall-clock
    time in that zone.
    """
    data: dict[str, Any] = {
        "event_id": event.event_id,
        "title": event.title,
        "participants": [_profile_ref(link.profile_id, link.profile) for link in event.participant_links],
        "event_timezone": event.event_timezone,
        "start_at_utc": as_utc(event.start_at_utc),
        "end_at_utc": as_utc(event.end_at_utc),
        "created_by": _profile_ref(event.created_by, event.creator),
        "created_at_utc": as_utc(event.created_at_utc),
        "updated_at_utc": as_utc(event.updated_at_utc),
    }
    if timezones is not None and viewer_timezone:
        data["viewer_timezone"] = viewer_timezone
        data["start_local"] = timezones.utc_to_local(event.start_at_utc, viewer_timezone)
        data["end_local"] = timezones.utc_to_local(event.end_at_utc, viewer_timezone)
    return data


def _enrich_participant_names(db: Session, diff: dict[str, Any]) -> dict[str, Any]:
    """Copy of ``diff`` with participant ids replaced by profile names.

    Display only: on any failure the raw ids are kept. Called after the
    update has been committed, so a failed lookup is rolled back to leave the
    session usable for the audit write.
    """
    change = diff.get("participants")
    if not change:
        return diff
    try:
        before = change["from"] or []
        after = change["to"] or []
        ids = sorted({str(pid) for pid in [*before, *after]})
        names = dict(
            db.query(Profile.profile_id, Profile.name).filter(Profile.profile_id.in_(ids)).all()
        )
        enriched = {
            "from": [names.get(str(pid), pid) for pid in before],
            "to": [names.get(str(pid), pid) for pid in after],
        }
    except Exception:
        db.rollback()
        logger.exception("Error populating participant names for log diff")
        return diff
    return {**diff, "participants": enriched}


def _apply_start_range(query, from_utc: Optional[datetime], to_utc: Optional[datetime]):
    if from_utc is not None:
        query = query.filter(Event.start_at_utc >= as_utc(from_utc))
    if to_utc is not None:
        query = query.filter(Event.start_at_utc <= as_utc(to_utc))
    return query


def _get_or_404(db: Session, event_id: str) -> Event:
    event = db.get(Event, event_id)
    if event is None:
        raise NotFoundError("Event not found", field="event_id")
    return event


def create_event(
    db: Session,
    timezones: TimezoneRegistry,
    participants: list[str],
    event_timezone: Optional[str],
    start_local: Optional[str],
    end_local: Optional[str],
    title: Optional[str] = None,
    created_by: Optional[str] = None,
) -> dict[str, Any]:
    """Validate, normalize and persist a new event, then log its creation."""
    _raise_if_invalid(validate_event_data(participants, event_timezone, start_local, end_local))

    tz = _resolve_timezone(timezones, event_timezone)
    start_at = _to_utc(timezones, start_local, tz, "start_local")
    end_at = _to_utc(timezones, end_local, tz, "end_local")
    _raise_if_invalid(validate_date_range(start_at, end_at))

    _check_participants_exist(db, participants)
    if created_by and db.get(Profile, created_by) is None:
        raise ValidationError("Creator profile not found", field="created_by")

    now = datetime.now(timezone.utc)
    event = Event(
        title=sanitize_string(title) or None,
        event_timezone=tz,
        start_at_utc=start_at,
        end_at_utc=end_at,
        created_by=created_by or None,
        created_at_utc=now,
        updated_at_utc=now,
        participant_links=_participant_links(participants),
    )
    db.add(event)
    db.commit()
    db.refresh(event)
    logger.info("Created event %s (%s, %d participants)", event.event_id, tz, len(participants))

    audit_service.record_entry(
        db,
        event.event_id,
        {
            "created": {
                "participants": list(participants),
                "event_timezone": tz,
                "start_at_utc": serialize_value(start_at),
                "end_at_utc": serialize_value(end_at),
            }
        },
        actor_id=created_by or None,
    )
    return to_display(event)


def get_event(db: Session, event_id: str) -> dict[str, Any]:
    return to_display(_get_or_404(db, event_id))


def get_events_for_profile(
    db: Session,
    timezones: TimezoneRegistry,
    profile_id: str,
    from_utc: Optional[datetime] = None,
    to_utc: Optional[datetime] = None,
    limit: int = 100,
) -> list[dict[str, Any]]:
    """Events the profile takes part in, by ascending start, bounds inclusive.

    Boundaries are also rendered in the profile's own timezone.
    """
    query = (
        db.query(Event)
        .join(EventParticipant, EventParticipant.event_id == Event.event_id)
        .filter(EventParticipant.profile_id == profile_id)
    )
    events = _apply_start_range(query, from_utc, to_utc).order_by(Event.start_at_utc).limit(limit).all()

    profile = db.get(Profile, profile_id)
    viewer_timezone = profile.timezone if profile is not None else None
    return [to_display(event, timezones, viewer_timezone) for event in events]


def list_events(
    db: Session,
    from_utc: Optional[datetime] = None,
    to_utc: Optional[datetime] = None,
    limit: int = 100,
) -> list[dict[str, Any]]:
    query = _apply_start_range(db.query(Event), from_utc, to_utc)
    return [to_display(event) for event in query.order_by(Event.start_at_utc).limit(limit).all()]


def update_event(
    db: Session,
    timezones: TimezoneRegistry,
    event_id: str,
    patch: EventUpdate,
    actor_id: Optional[str] = None,
) -> dict[str, Any]:
    """Apply a partial update and log the diff when anything tracked changed.

    A supplied boundary is re-derived from its wall-clock value in the patch
    (or stored) timezone; the other keeps its stored instant. The resulting
    interval is re-validated as a whole.
    """
    event = _get_or_404(db, event_id)
    before = event_snapshot(event)

    tz = _resolve_timezone(
        timezones, patch.event_timezone if patch.event_timezone is not None else event.event_timezone
    )
    start_at = as_utc(event.start_at_utc)
    end_at = as_utc(event.end_at_utc)
    if patch.start_local is not None:
        start_at = _to_utc(timezones, patch.start_local, tz, "start_local")
    if patch.end_local is not None:
        end_at = _to_utc(timezones, patch.end_local, tz, "end_local")
    _raise_if_invalid(validate_date_range(start_at, end_at))

    participants = before["participants"]
    if patch.participants is not None:
        _raise_if_invalid(validate_participants(patch.participants))
        _check_participants_exist(db, patch.participants)
        participants = list(patch.participants)

    after = {
        **before,
        "participants": participants,
        "event_timezone": tz,
        "start_at_utc": start_at,
        "end_at_utc": end_at,
    }
    diff = build_diff(before, after)
    if not diff:
        logger.info("Update of event %s changed nothing", event_id)
        return to_display(event)

    if "participants" in diff:
        event.participant_links = _participant_links(participants, event_id=event.event_id)
    event.event_timezone = tz
    event.start_at_utc = start_at
    event.end_at_utc = end_at
    event.updated_at_utc = datetime.now(timezone.utc)
    db.commit()
    db.refresh(event)
    logger.info("Updated event %s (%s)", event_id, ", ".join(diff))

    audit_service.record_entry(db, event_id, _enrich_participant_names(db, diff), actor_id=actor_id)
    return to_display(event)


def delete_event(db: Session, event_id: str, actor_id: Optional[str] = None) -> dict[str, str]:
    """Log the full prior state, then remove the event for good."""
    event = _get_or_404(db, event_id)

    audit_service.record_entry(
        db, event_id, {"deleted": True, "before": event_snapshot(event)}, actor_id=actor_id
    )

    db.delete(event)
    db.commit()
    logger.info("Deleted event %s", event_id)
    return {"id": event_id}


def get_logs_for_event(db: Session, event_id: str) -> list[dict[str, Any]]:
    """Audit entries for the event, newest first.

    Entries outlive the event, so a deleted event's history stays readable;
    only an id with neither an event nor any entry is reported as not found.
    """
    entries = audit_service.list_entries_for_event(db, event_id)
    if not entries and db.get(Event, event_id) is None:
        raise NotFoundError("Event not found", field="event_id")
    return entries
