"""Tests for booking, queue and status types."""

from datetime import datetime, timedelta, timezone

from resource_queue.types import (
    DEFAULT_PRESETS,
    Booking,
    BookingView,
    HistoryRecord,
    QueueEntry,
    QueueRecord,
    Resource,
    ResourceStatus,
)

START = datetime(2026, 1, 5, 9, 0, tzinfo=timezone.utc)


def _booking(minutes: int = 30) -> Booking:
    return Booking(
        resource_id="r1",
        user_id="alice",
        started_at=START,
        expires_at=START + timedelta(minutes=minutes),
    )


class TestBooking:
    def test_defaults(self):
        booking = _booking()
        assert booking.purpose == ""
        assert booking.notified_near_expiry is False
        assert booking.notified_queue_joined is False

    def test_is_expired_from_expiry_instant(self):
        booking = _booking()
        assert not booking.is_expired(START + timedelta(minutes=29, seconds=59))
        assert booking.is_expired(START + timedelta(minutes=30))

    def test_remaining_and_duration(self):
        booking = _booking(90)
        assert booking.remaining(START + timedelta(minutes=60)) == timedelta(minutes=30)
        assert booking.duration == timedelta(minutes=90)

    def test_json_round_trip_keeps_timezone(self):
        booking = _booking()
        restored = Booking.model_validate_json(booking.model_dump_json())
        assert restored == booking
        assert restored.expires_at.tzinfo is not None


class TestRecords:
    def test_empty_records(self):
        assert QueueRecord().entries == []
        assert HistoryRecord().entries == []

    def test_queue_entry_defaults_queued_at(self):
        entry = QueueEntry(resource_id="r1", user_id="bob", desired_minutes=60)
        assert entry.queued_at.tzinfo is not None


class TestViews:
    def test_booking_view_extends_booking(self):
        view = BookingView(**_booking().model_dump(), username="Alice")
        assert view.username == "Alice"
        assert view.user_id == "alice"

    def test_status_defaults(self):
        status = ResourceStatus(resource=Resource(id="r1", name="gpu"))
        assert status.booking is None
        assert status.queue == []
        assert status.subscribers == 0

    def test_presets_ascending(self):
        minutes = [p.minutes for p in DEFAULT_PRESETS]
        assert minutes == sorted(minutes)
