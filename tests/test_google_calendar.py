"""Tests for the Google Calendar provider and Meet link extraction."""

from __future__ import annotations

from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import pytest
from google.oauth2.credentials import Credentials

from bookingcore.calendar.google_auth import get_integration_credentials
from bookingcore.calendar.google_calendar import GoogleCalendarIntegrationService
from bookingcore.conference.google_meet import GoogleMeetConferenceLinkService, extract_meet_link
from bookingcore.config import GoogleConfig, RetryConfig
from bookingcore.database import Database
from bookingcore.models import (
    CalendarIntegration,
    ConferenceLink,
    Contact,
    ContactType,
    CreatedCalendarEvent,
    Integration,
    IntegrationVendor,
    Invitee,
    ScheduledEvent,
    ScheduledTimeset,
)

UTC = timezone.utc


@pytest.fixture
def db(tmp_path):
    d = Database(tmp_path / "test.db")
    d.connect()
    yield d
    d.close()


@pytest.fixture
def integration():
    return Integration(
        id=1, vendor=IntegrationVendor.GOOGLE, profile_id=10, access_token="access", refresh_token="refresh"
    )


@pytest.fixture
def calendar_integration():
    return CalendarIntegration(
        id=7, vendor=IntegrationVendor.GOOGLE, integration_id=1, profile_id=10,
        calendar_id="team@example.com", outbound_write_sync=True,
    )


def booking(contacts=()):
    return ScheduledEvent(
        scheduled_time=ScheduledTimeset(
            datetime(2024, 3, 10, 9, tzinfo=UTC), datetime(2024, 3, 10, 9, 30, tzinfo=UTC)
        ),
        name="Intro call",
        contacts=list(contacts),
        invitee=Invitee(name="Bob", email="bob@example.com"),
    )


@pytest.fixture
def mock_build():
    with patch("bookingcore.calendar.google_calendar.build") as build, patch(
        "bookingcore.calendar.google_calendar.get_integration_credentials"
    ):
        yield build


@pytest.mark.asyncio
async def test_create_requests_meet_conference(db, integration, calendar_integration, mock_build):
    events = mock_build.return_value.events.return_value
    events.insert.return_value.execute.return_value = {
        "id": "evt-1", "iCalUID": "evt-1@google.com", "htmlLink": "https://calendar.google.com/evt-1",
    }
    service = GoogleCalendarIntegrationService(db, GoogleConfig(), RetryConfig(max_retries=0))

    created = await service.create_calendar_event(
        integration, calendar_integration, "Europe/Kyiv", booking([Contact(type=ContactType.GOOGLE_MEET)])
    )

    assert created.id == "evt-1"
    assert created.ical_uid == "evt-1@google.com"
    kwargs = events.insert.call_args.kwargs
    assert kwargs["calendarId"] == "team@example.com"
    assert kwargs["conferenceDataVersion"] == 1
    body = kwargs["body"]
    assert body["start"] == {"dateTime": "2024-03-10T09:00:00+00:00", "timeZone": "Europe/Kyiv"}
    assert body["attendees"] == [{"email": "bob@example.com"}]
    assert body["conferenceData"]["createRequest"]["conferenceSolutionKey"] == {"type": "hangoutsMeet"}


@pytest.mark.asyncio
async def test_create_without_meet_contact(db, integration, calendar_integration, mock_build):
    events = mock_build.return_value.events.return_value
    events.insert.return_value.execute.return_value = {"id": "evt-2"}
    service = GoogleCalendarIntegrationService(db, GoogleConfig(), RetryConfig(max_retries=0))

    await service.create_calendar_event(
        integration, calendar_integration, "UTC", booking([Contact(type=ContactType.ZOOM)])
    )

    kwargs = events.insert.call_args.kwargs
    assert kwargs["conferenceDataVersion"] == 0
    assert "conferenceData" not in kwargs["body"]


@pytest.mark.asyncio
async def test_patch_sets_location_to_first_link(db, integration, calendar_integration, mock_build):
    events = mock_build.return_value.events.return_value
    events.patch.return_value.execute.return_value = {"id": "evt-1"}
    service = GoogleCalendarIntegrationService(db, GoogleConfig(), RetryConfig(max_retries=0))
    scheduled_event = booking()
    scheduled_event.conference_links = [
        ConferenceLink(type=IntegrationVendor.ZOOM, service_name="Zoom", link="https://zoom.us/j/1")
    ]

    await service.patch_calendar_event(
        integration, calendar_integration, scheduled_event, CreatedCalendarEvent(id="evt-1")
    )

    kwargs = events.patch.call_args.kwargs
    assert kwargs["eventId"] == "evt-1"
    assert kwargs["body"]["location"] == "https://zoom.us/j/1"
    assert "Zoom: https://zoom.us/j/1" in kwargs["body"]["description"]


def test_credentials_refreshed_when_token_missing(integration):
    integration.access_token = ""
    on_refresh = MagicMock()

    with patch.object(Credentials, "refresh") as refresh:
        creds = get_integration_credentials(integration, GoogleConfig(client_id="cid"), on_refresh=on_refresh)

    refresh.assert_called_once()
    on_refresh.assert_called_once_with(integration, creds)


def test_credentials_not_refreshed_when_valid(integration):
    with patch.object(Credentials, "refresh") as refresh:
        get_integration_credentials(integration, GoogleConfig())
    refresh.assert_not_called()


def test_extract_meet_link_prefers_video_entry_point():
    raw = {
        "hangoutLink": "https://meet.google.com/fallback",
        "conferenceData": {
            "entryPoints": [
                {"entryPointType": "phone", "uri": "tel:+1-555"},
                {"entryPointType": "video", "uri": "https://meet.google.com/abc"},
            ]
        },
    }
    assert extract_meet_link(raw) == "https://meet.google.com/abc"
    assert extract_meet_link({"hangoutLink": "https://meet.google.com/x"}) == "https://meet.google.com/x"
    assert extract_meet_link({}) is None


@pytest.mark.asyncio
async def test_meet_link_requires_google_event(db, integration):
    service = GoogleMeetConferenceLinkService(db)
    contacts = [Contact(type=ContactType.GOOGLE_MEET)]

    assert await service.create_meeting(integration, contacts, booking(), "UTC", None) is None

    created = CreatedCalendarEvent(
        id="evt-1",
        raw={"conferenceData": {"entryPoints": [{"entryPointType": "video", "uri": "https://meet.google.com/abc"}]}},
    )
    link = await service.create_meeting(integration, contacts, booking(), "UTC", created)
    assert link == ConferenceLink(type=IntegrationVendor.GOOGLE, service_name="Google Meet", link="https://meet.google.com/abc")

    # Event does not offer Meet
    assert await service.create_meeting(integration, [Contact(type=ContactType.PHONE)], booking(), "UTC", created) is None
