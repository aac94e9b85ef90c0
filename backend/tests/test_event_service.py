"""Service-level tests — best-effort audit writes and invariants without HTTP."""
import pytest
from sqlalchemy.exc import OperationalError
from pydantic import ValidationError as PatchError

from event_scheduler.errors import NotFoundError, ValidationError
from event_scheduler.models.audit_log import AuditLogEntry
from event_scheduler.models.event import Event
from event_scheduler.schemas.event import EventUpdate
from event_scheduler.services import audit_service, event_service, profile_service


@pytest.fixture
def ann(db, timezones):
    return profile_service.create_profile(db, timezones, "Ann", "Asia/Calcutta")


def _create(db, timezones, participants, **overrides):
    kwargs = {
        "event_timezone": "Asia/Kolkata",
        "start_local": "2025-11-10T14:30",
        "end_local": "2025-11-10T15:30",
    }
    kwargs.update(overrides)
    return event_service.create_event(db, timezones, participants, **kwargs)


def _broken_entry(**kwargs):
    raise RuntimeError("audit store unavailable")


class TestBestEffortAudit:

    def test_create_survives_audit_failure(self, db, timezones, ann, monkeypatch):
        monkeypatch.setattr(audit_service, "AuditLogEntry", _broken_entry)
        event = _create(db, timezones, [ann.profile_id])
        assert db.get(Event, event["event_id"]) is not None
        assert db.query(AuditLogEntry).count() == 0

    def test_update_survives_audit_failure(self, db, timezones, ann, monkeypatch):
        event = _create(db, timezones, [ann.profile_id])
        monkeypatch.setattr(audit_service, "AuditLogEntry", _broken_entry)
        updated = event_service.update_event(
            db, timezones, event["event_id"], EventUpdate(end_local="2025-11-10T16:30")
        )
        assert updated["end_at_utc"].hour == 11
        assert db.query(AuditLogEntry).count() == 1

    def test_delete_survives_audit_failure(self, db, timezones, ann, monkeypatch):
        event = _create(db, timezones, [ann.profile_id])
        monkeypatch.setattr(audit_service, "AuditLogEntry", _broken_entry)
        assert event_service.delete_event(db, event["event_id"]) == {"id": event["event_id"]}
        assert db.get(Event, event["event_id"]) is None

    def test_record_entry_returns_none_on_failure(self, db, monkeypatch):
        monkeypatch.setattr(audit_service, "AuditLogEntry", _broken_entry)
        assert audit_service.record_entry(db, "e1", {"deleted": True}) is None

    def test_name_lookup_failure_still_logs_raw_ids(self, db, timezones, ann, monkeypatch):
        bob = profile_service.create_profile(db, timezones, "Bob", "Europe/London")
        event = _create(db, timezones, [ann.profile_id])

        real_query = db.query
        real_rollback = db.rollback
        rollbacks = []

        def failing_name_lookup(*entities, **kwargs):
            if len(entities) == 2:
                raise OperationalError("SELECT profiles", {}, Exception("connection reset"))
            return real_query(*entities, **kwargs)

        def counting_rollback():
            rollbacks.append(True)
            real_rollback()

        monkeypatch.setattr(db, "query", failing_name_lookup)
        monkeypatch.setattr(db, "rollback", counting_rollback)
        event_service.update_event(
            db, timezones, event["event_id"],
            EventUpdate(participants=[ann.profile_id, bob.profile_id]),
        )
        monkeypatch.undo()

        assert len(rollbacks) == 1
        entries = (
            db.query(AuditLogEntry)
            .filter(AuditLogEntry.event_id == event["event_id"])
            .order_by(AuditLogEntry.log_id)
            .all()
        )
        assert len(entries) == 2
        assert entries[-1].diff == {
            "participants": {
                "from": [ann.profile_id],
                "to": [ann.profile_id, bob.profile_id],
            }
        }


class TestServiceErrors:

    def test_ordering_error_is_validation_error(self, db, timezones, ann):
        with pytest.raises(ValidationError) as excinfo:
            _create(db, timezones, [ann.profile_id], end_local="2025-11-10T14:00")
        assert excinfo.value.status_code == 400
        assert excinfo.value.field == "end_local"

    def test_update_missing_event(self, db, timezones):
        with pytest.raises(NotFoundError):
            event_service.update_event(db, timezones, "missing", EventUpdate(start_local="2025-11-10T10:00"))

    def test_delete_missing_event(self, db):
        with pytest.raises(NotFoundError):
            event_service.delete_event(db, "missing")

    def test_logs_for_unknown_event(self, db):
        with pytest.raises(NotFoundError):
            event_service.get_logs_for_event(db, "missing")

    def test_update_patch_rejects_unknown_keys(self):
        with pytest.raises(PatchError):
            EventUpdate(title="Renamed")


class TestInvariants:

    def test_every_stored_event_is_ordered(self, db, timezones, ann):
        # Stored interval starts as 14:30-15:30 Asia/Kolkata.
        event = _create(db, timezones, [ann.profile_id])
        for patch, accepted in (
            (EventUpdate(start_local="2025-11-10T15:00"), True),
            (EventUpdate(start_local="2025-11-10T16:00"), False),
            (EventUpdate(end_local="2025-11-10T14:00"), False),
            (EventUpdate(end_local="2025-11-10T17:00"), True),
        ):
            if accepted:
                event_service.update_event(db, timezones, event["event_id"], patch)
            else:
                with pytest.raises(ValidationError) as exc_info:
                    event_service.update_event(db, timezones, event["event_id"], patch)
                assert exc_info.value.detail["message"] == "End date must be after start date"
            db.expire_all()
            stored = db.get(Event, event["event_id"])
            assert stored.end_at_utc > stored.start_at_utc

        assert stored.start_at_utc.hour == 9 and stored.start_at_utc.minute == 30
        assert stored.end_at_utc.hour == 11 and stored.end_at_utc.minute == 30

    def test_timezone_always_canonical(self, db, timezones, ann):
        event = _create(db, timezones, [ann.profile_id], event_timezone="Calcutta")
        assert event["event_timezone"] == "Asia/Kolkata"
        updated = event_service.update_event(
            db, timezones, event["event_id"], EventUpdate(event_timezone="Asia/Saigon")
        )
        assert updated["event_timezone"] == "Asia/Ho_Chi_Minh"
