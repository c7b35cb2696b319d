"""Tests for conflict detection across native bookings and mirrored calendars."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from bookingcore.calendar.base import CalendarIntegrationService
from bookingcore.calendar.locator import CalendarIntegrationsServiceLocator
from bookingcore.core.conflicts import ConflictDetector
from bookingcore.database import Database
from bookingcore.models import (
    CalendarIntegration,
    IntegrationVendor,
    ScheduledBufferTime,
    ScheduledEvent,
    ScheduledStatus,
    ScheduledTimeset,
    VendorMirroredScheduledEvent,
)

EVENT_ID = 1


def at(hh, mm=0):
    return datetime(2024, 3, 10, hh, mm, tzinfo=timezone.utc)


def timeset(start, end):
    return ScheduledTimeset(start_timestamp=start, end_timestamp=end)


class MirrorOnlyCalendar(CalendarIntegrationService):
    """Reads the mirrored store; never writes."""

    vendor = IntegrationVendor.GOOGLE

    async def create_calendar_event(self, integration, calendar_integration, timezone, scheduled_event):
        raise AssertionError("not used")

    async def patch_calendar_event(self, integration, calendar_integration, scheduled_event, created_event):
        raise AssertionError("not used")


class BrokenCalendar(MirrorOnlyCalendar):
    def __init__(self, db):
        super().__init__(db)
        self.calls = 0

    async def find_conflict(self, window_start, window_end, calendar_integration_id):
        self.calls += 1
        raise ConnectionError("mirror unavailable")


@pytest.fixture
def db(tmp_path):
    d = Database(tmp_path / "test.db")
    d.connect()
    yield d
    d.close()


@pytest.fixture
def detector(db):
    return ConflictDetector(db, CalendarIntegrationsServiceLocator([MirrorOnlyCalendar(db)]))


@pytest.fixture
def google_calendar():
    return CalendarIntegration(
        id=7, vendor=IntegrationVendor.GOOGLE, integration_id=1, profile_id=10, outbound_write_sync=True
    )


def book(db, start, end, buffer=None, event_id=EVENT_ID, status=ScheduledStatus.CONFIRMED):
    return db.save_scheduled_event(
        ScheduledEvent(
            scheduled_time=timeset(start, end),
            scheduled_buffer_time=buffer or ScheduledBufferTime(),
            event_id=event_id,
            status=status,
        )
    )


def mirror(db, start, end, calendar_integration_id=7, buffer=None):
    return db.save_mirrored_scheduled_event(
        VendorMirroredScheduledEvent(
            scheduled_time=timeset(start, end),
            scheduled_buffer_time=buffer or ScheduledBufferTime(),
            vendor=IntegrationVendor.GOOGLE,
            calendar_integration_id=calendar_integration_id,
            status=ScheduledStatus.CONFIRMED,
        )
    )


def test_conflict_window_narrowed_by_margin(detector):
    start, end = detector.conflict_window(timeset(at(10), at(10, 30)), None)
    assert start == at(10) + timedelta(seconds=1)
    assert end == at(10, 30) - timedelta(seconds=1)


def test_conflict_window_uses_buffer_edges(detector):
    buffer = ScheduledBufferTime(start_buffer_timestamp=at(9, 45), end_buffer_timestamp=at(10, 45))
    start, end = detector.conflict_window(timeset(at(10), at(10, 30)), buffer)
    assert start == at(9, 45) + timedelta(seconds=1)
    assert end == at(10, 45) - timedelta(seconds=1)


@pytest.mark.asyncio
async def test_overlapping_start_conflicts(db, detector):
    existing = book(db, at(10), at(10, 30))
    conflict = await detector.find_conflict(timeset(at(10, 15), at(10, 45)), None, EVENT_ID)
    assert conflict is not None
    assert conflict.source == "native"
    assert conflict.scheduled_event.uuid == existing.uuid


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "start,end",
    [
        (at(10, 5), at(10, 20)),  # existing contains candidate
        (at(9, 30), at(11)),  # candidate contains existing
        (at(9, 45), at(10, 15)),  # candidate ends inside existing
        (at(10), at(10, 30)),  # identical
    ],
)
async def test_overlap_shapes(db, detector, start, end):
    book(db, at(10), at(10, 30))
    assert await detector.find_conflict(timeset(start, end), None, EVENT_ID) is not None


@pytest.mark.asyncio
async def test_back_to_back_is_not_a_conflict(db, detector):
    book(db, at(10), at(10, 30))
    assert await detector.find_conflict(timeset(at(10, 30), at(11)), None, EVENT_ID) is None
    assert await detector.find_conflict(timeset(at(9, 30), at(10)), None, EVENT_ID) is None


@pytest.mark.asyncio
async def test_candidate_buffer_overlapping_existing(db, detector):
    book(db, at(10), at(10, 30))
    core = timeset(at(10, 40), at(11, 10))
    buffer = ScheduledBufferTime(start_buffer_timestamp=at(10, 25), end_buffer_timestamp=at(11, 15))

    assert await detector.find_conflict(core, None, EVENT_ID) is None
    assert await detector.find_conflict(core, buffer, EVENT_ID) is not None


@pytest.mark.asyncio
async def test_existing_buffer_overlapping_candidate(db, detector):
    book(
        db, at(10), at(10, 30),
        buffer=ScheduledBufferTime(start_buffer_timestamp=at(9, 45), end_buffer_timestamp=at(10, 45)),
    )
    assert await detector.find_conflict(timeset(at(10, 40), at(11)), None, EVENT_ID) is not None


@pytest.mark.asyncio
async def test_candidate_inside_existing_buffer(db, detector):
    book(
        db, at(10), at(10, 30),
        buffer=ScheduledBufferTime(start_buffer_timestamp=at(9), end_buffer_timestamp=at(11, 30)),
    )
    assert await detector.find_conflict(timeset(at(9, 15), at(9, 45)), None, EVENT_ID) is not None
    assert await detector.find_conflict(timeset(at(10, 45), at(11, 15)), None, EVENT_ID) is not None


@pytest.mark.asyncio
async def test_candidate_inside_mirrored_buffer(db, detector, google_calendar):
    mirror(
        db, at(10), at(10, 30),
        buffer=ScheduledBufferTime(start_buffer_timestamp=at(9), end_buffer_timestamp=at(11, 30)),
    )
    conflict = await detector.find_conflict(timeset(at(10, 45), at(11, 15)), None, EVENT_ID, google_calendar)
    assert conflict.source == "google"


@pytest.mark.asyncio
async def test_canceled_booking_never_conflicts(db, detector):
    book(db, at(10), at(10, 30), status=ScheduledStatus.CANCELED)
    assert await detector.find_conflict(timeset(at(10), at(10, 30)), None, EVENT_ID) is None


@pytest.mark.asyncio
async def test_native_lookup_scoped_to_event(db, detector):
    book(db, at(10), at(10, 30), event_id=2)
    assert await detector.find_conflict(timeset(at(10), at(10, 30)), None, EVENT_ID) is None


@pytest.mark.asyncio
async def test_mirrored_event_conflicts(db, detector, google_calendar):
    mirrored = mirror(db, at(10), at(10, 30))
    conflict = await detector.find_conflict(timeset(at(10, 15), at(10, 45)), None, EVENT_ID, google_calendar)
    assert conflict.source == "google"
    assert conflict.scheduled_event.uuid == mirrored.uuid


@pytest.mark.asyncio
async def test_mirrored_events_ignored_without_outbound_calendar(db, detector):
    mirror(db, at(10), at(10, 30))
    assert await detector.find_conflict(timeset(at(10, 15), at(10, 45)), None, EVENT_ID) is None


@pytest.mark.asyncio
async def test_mirrored_lookup_scoped_to_calendar_integration(db, detector, google_calendar):
    mirror(db, at(10), at(10, 30), calendar_integration_id=8)
    assert await detector.find_conflict(timeset(at(10, 15), at(10, 45)), None, EVENT_ID, google_calendar) is None


@pytest.mark.asyncio
async def test_native_conflict_wins_over_vendor_error(db, google_calendar):
    detector = ConflictDetector(db, CalendarIntegrationsServiceLocator([BrokenCalendar(db)]))
    book(db, at(10), at(10, 30))
    conflict = await detector.find_conflict(timeset(at(10), at(10, 30)), None, EVENT_ID, google_calendar)
    assert conflict.source == "native"


@pytest.mark.asyncio
async def test_vendor_error_surfaces_without_native_conflict(db, google_calendar):
    detector = ConflictDetector(db, CalendarIntegrationsServiceLocator([BrokenCalendar(db)]))
    with pytest.raises(ConnectionError):
        await detector.find_conflict(timeset(at(10), at(10, 30)), None, EVENT_ID, google_calendar)


@pytest.mark.asyncio
async def test_custom_margin(db):
    detector = ConflictDetector(db, CalendarIntegrationsServiceLocator(), exclusive_margin=timedelta(minutes=10))
    book(db, at(10), at(10, 30))
    # Overlaps by 5 minutes, inside the 10 minute margin
    assert await detector.find_conflict(timeset(at(10, 25), at(11)), None, EVENT_ID) is None
