"""Field-level change tracking for events.

Snapshots and diffs are plain JSON-safe dicts so they can be stored in the
audit log as they are. Only ``TRACKED_FIELDS`` take part in a diff.
"""
import copy
from datetime import datetime
from typing import Any, Mapping

from event_scheduler.models.event import Event
from event_scheduler.services.timezones import as_utc

TRACKED_FIELDS = ("start_at_utc", "end_at_utc", "event_timezone", "participants")


def serialize_value(value: Any) -> Any:
    """Canonical JSON-safe form used for both comparison and storage."""
    if isinstance(value, datetime):
        return as_utc(value).isoformat()
    if isinstance(value, (list, tuple)):
        return [serialize_value(v) for v in value]
    return value


def event_snapshot(event: Event) -> dict[str, Any]:
    """Serialize an event's full state to a JSON-safe dict."""
    return {
        "event_id": event.event_id,
        "title": event.title,
        "participants": list(event.participant_ids),
        "event_timezone": event.event_timezone,
        "start_at_utc": serialize_value(event.start_at_utc),
        "end_at_utc": serialize_value(event.end_at_utc),
        "created_by": event.created_by,
        "created_at_utc": serialize_value(event.created_at_utc),
        "updated_at_utc": serialize_value(event.updated_at_utc),
    }


def build_diff(old: Mapping[str, Any], new: Mapping[str, Any]) -> dict[str, dict[str, Any]]:
    """Return ``{field: {"from": old, "to": new}}`` for each tracked field that changed.

    Participants compare as an ordered list, so a reordering counts as a change.
    """
    diff: dict[str, dict[str, Any]] = {}
    for field in TRACKED_FIELDS:
        before = serialize_value(old.get(field))
        after = serialize_value(new.get(field))
        if before != after:
            diff[field] = {"from": before, "to": after}
    return diff


def has_changes(old: Mapping[str, Any], new: Mapping[str, Any]) -> bool:
    return bool(build_diff(old, new))


def apply_diff(snapshot: Mapping[str, Any], diff: Mapping[str, Mapping[str, Any]]) -> dict[str, Any]:
    """Return a copy of ``snapshot`` with the diff's ``to`` values applied."""
    result = copy.deepcopy(dict(snapshot))
    for field, change in diff.items():
        if field in TRACKED_FIELDS:
            result[field] = copy.deepcopy(change["to"])
    return result
