"""Interval and request-structure validation.

Each check returns a ``ValidationResult``; callers raise on the first
failure so event-level validation never partially succeeds.
"""
from datetime import datetime
from typing import Any, NamedTuple, Optional

from event_scheduler.services.timezones import as_utc, parse_wall_clock

PROFILE_NAME_MAX_LENGTH = 100


class ValidationResult(NamedTuple):
    valid: bool
    error: Optional[str] = None
    field: Optional[str] = None


OK = ValidationResult(True)


def _to_instant(value: Any) -> datetime:
    return as_utc(parse_wall_clock(value))


def validate_date_range(start: Any, end: Any) -> ValidationResult:
    """Check that ``start``/``end`` are real instants with ``end > start``.

    Accepts datetimes or ISO strings; naive values are read as UTC.
    """
    if not start or not end:
        return ValidationResult(False, "Both start and end dates are required", "start_local" if not start else "end_local")
    try:
        start_at = _to_instant(start)
        end_at = _to_instant(end)
    except (TypeError, ValueError):
        return ValidationResult(False, "Invalid date format")
    if end_at <= start_at:
        return ValidationResult(False, "End date must be after start date", "end_local")
    return OK


def validate_participants(participants: Any) -> ValidationResult:
    if not isinstance(participants, (list, tuple)) or len(participants) == 0:
        return ValidationResult(False, "At least one participant is required", "participants")
    if any(not isinstance(p, str) or not p.strip() for p in participants):
        return ValidationResult(False, "Participant IDs must be non-empty strings", "participants")
    if len(set(participants)) != len(participants):
        return ValidationResult(False, "Participants must not contain duplicates", "participants")
    return OK


def validate_event_data(
    participants: Any,
    event_timezone: Optional[str],
    start_local: Any,
    end_local: Any,
) -> ValidationResult:
    """Structure check for a new event, failing fast on the first problem."""
    result = validate_participants(participants)
    if not result.valid:
        return result
    if not event_timezone or not event_timezone.strip():
        return ValidationResult(False, "Timezone is required", "event_timezone")
    if not start_local or not end_local:
        return ValidationResult(False, "Start and end dates are required", "start_local" if not start_local else "end_local")
    return OK


def validate_profile_data(name: Optional[str], timezone: Optional[str]) -> ValidationResult:
    if not name or not name.strip():
        return ValidationResult(False, "Name is required", "name")
    if len(name.strip()) > PROFILE_NAME_MAX_LENGTH:
        return ValidationResult(False, f"Name cannot exceed {PROFILE_NAME_MAX_LENGTH} characters", "name")
    if not timezone or not timezone.strip():
        return ValidationResult(False, "Timezone is required", "timezone")
    return OK


def sanitize_string(value: Any) -> str:
    if not isinstance(value, str):
        return ""
    return value.strip().replace("<", "").replace(">", "")
