"""Audit log store — best-effort, append-only event history.

``record_entry`` is the single write path. It runs in its own commit after
(or, for deletions, before) the primary change and never raises: a failed
audit write is rolled back and logged, and the caller carries on. Readers
must not assume the log is gapless.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy.orm import Session

from event_scheduler.models.audit_log import AuditLogEntry
from event_scheduler.models.profile import Profile
from event_scheduler.services.timezones import as_utc

logger = logging.getLogger(__name__)


def record_entry(
    db: Session,
    event_id: str,
    diff: dict[str, Any],
    actor_id: Optional[str] = None,
) -> Optional[AuditLogEntry]:
    """Append one entry; returns None when the write failed."""
    try:
        entry = AuditLogEntry(
            event_id=event_id,
            updated_by=actor_id,
            changed_at_utc=datetime.now(timezone.utc),
            diff=diff,
        )
        db.add(entry)
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("Error creating audit log entry for event %s", event_id)
        return None
    logger.debug("Audit entry %s written for event %s (%s)", entry.log_id, event_id, ", ".join(diff))
    return entry


def list_entries_for_event(db: Session, event_id: str) -> list[dict[str, Any]]:
    """All entries for ``event_id``, newest first, with the actor's name resolved."""
    rows = (
        db.query(AuditLogEntry, Profile.name)
        .outerjoin(Profile, Profile.profile_id == AuditLogEntry.updated_by)
        .filter(AuditLogEntry.event_id == event_id)
        .order_by(AuditLogEntry.changed_at_utc.desc(), AuditLogEntry.log_id.desc())
        .all()
    )
    return [
        {
            "log_id": entry.log_id,
            "event_id": entry.event_id,
            "updated_by": {"profile_id": entry.updated_by, "name": name} if entry.updated_by else None,
            "changed_at_utc": as_utc(entry.changed_at_utc),
            "diff": entry.diff,
        }
        for entry, name in rows
    ]
