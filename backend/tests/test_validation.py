"""Tests for interval, participant and profile validation."""
from datetime import datetime, timedelta, timezone

from event_scheduler.services.validation import (
    sanitize_string,
    validate_date_range,
    validate_event_data,
    validate_participants,
    validate_profile_data,
)

START = datetime(2025, 11, 10, 9, 0, tzinfo=timezone.utc)


class TestDateRange:

    def test_valid(self):
        result = validate_date_range(START, START + timedelta(hours=1))
        assert result.valid
        assert result.error is None

    def test_missing(self):
        assert validate_date_range(None, START).error == "Both start and end dates are required"
        assert validate_date_range(START, None).error == "Both start and end dates are required"

    def test_invalid_format(self):
        assert validate_date_range("yesterday", "tomorrow").error == "Invalid date format"

    def test_end_equal_to_start_rejected(self):
        result = validate_date_range(START, START)
        assert not result.valid
        assert result.error == "End date must be after start date"

    def test_end_before_start_rejected(self):
        assert not validate_date_range(START, START - timedelta(minutes=30)).valid

    def test_iso_strings_and_mixed_awareness(self):
        assert validate_date_range("2025-11-10T09:00:00+00:00", "2025-11-10T10:00:00Z").valid
        # naive values are UTC, so 09:30 naive is after 09:00 UTC
        assert validate_date_range(START, datetime(2025, 11, 10, 9, 30)).valid


class TestParticipants:

    def test_valid(self):
        assert validate_participants(["a", "b"]).valid

    def test_empty(self):
        result = validate_participants([])
        assert not result.valid
        assert result.field == "participants"

    def test_not_a_list(self):
        assert not validate_participants("abc").valid
        assert not validate_participants(None).valid

    def test_duplicates(self):
        assert validate_participants(["a", "a"]).error == "Participants must not contain duplicates"

    def test_blank_ids(self):
        assert not validate_participants(["a", "  "]).valid


class TestEventData:

    def test_fails_fast_on_participants(self):
        result = validate_event_data([], None, None, None)
        assert result.field == "participants"

    def test_timezone_required(self):
        assert validate_event_data(["a"], "  ", "2025-11-10T14:30", "2025-11-10T15:30").error == "Timezone is required"

    def test_boundaries_required(self):
        result = validate_event_data(["a"], "UTC", "2025-11-10T14:30", None)
        assert not result.valid
        assert result.field == "end_local"

    def test_valid(self):
        assert validate_event_data(["a"], "UTC", "2025-11-10T14:30", "2025-11-10T15:30").valid


class TestProfileData:

    def test_name_required(self):
        assert validate_profile_data("   ", "UTC").field == "name"

    def test_name_length(self):
        assert validate_profile_data("x" * 100, "UTC").valid
        assert not validate_profile_data("x" * 101, "UTC").valid
        # length is measured after trimming
        assert validate_profile_data("  " + "x" * 100 + "  ", "UTC").valid

    def test_timezone_required(self):
        assert validate_profile_data("Ann", "").field == "timezone"


def test_sanitize_string():
    assert sanitize_string("  <b>Standup</b> ") == "bStandup/b"
    assert sanitize_string(None) == ""
