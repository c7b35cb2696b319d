"""Tests for Zoom meeting creation with a mocked HTTP transport."""

from __future__ import annotations

import base64
import json
from datetime import datetime, timezone
from urllib.parse import parse_qs

import httpx
import pytest

from bookingcore.conference.zoom import ZoomConferenceLinkService
from bookingcore.config import RetryConfig, ZoomConfig
from bookingcore.database import Database
from bookingcore.models import (
    Contact,
    ContactType,
    HostProfile,
    Integration,
    IntegrationVendor,
    ScheduledEvent,
    ScheduledTimeset,
)

UTC = timezone.utc
CONFIG = ZoomConfig(client_id="zid", client_secret="zsecret")


@pytest.fixture
def db(tmp_path):
    d = Database(tmp_path / "test.db")
    d.connect()
    yield d
    d.close()


@pytest.fixture
def integration(db):
    return db.save_integration(
        Integration(id=None, vendor=IntegrationVendor.ZOOM, profile_id=10, access_token="old", refresh_token="r1")
    )


def booking():
    return ScheduledEvent(
        scheduled_time=ScheduledTimeset(
            datetime(2024, 3, 10, 9, tzinfo=UTC), datetime(2024, 3, 10, 9, 45, tzinfo=UTC)
        ),
        name="Intro call",
    )


class ZoomAPI:
    """Records requests and answers like the Zoom token and meetings endpoints."""

    def __init__(self, token_status=200):
        self.token_status = token_status
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path == "/oauth/token":
            if self.token_status != 200:
                return httpx.Response(self.token_status, json={"reason": "Invalid Token!"})
            return httpx.Response(200, json={"access_token": "new-access", "refresh_token": "r2"})
        if request.url.path == "/v2/users/me/meetings":
            return httpx.Response(201, json={"id": 123, "join_url": "https://zoom.us/j/123"})
        return httpx.Response(404)


def make_service(db, api):
    client = httpx.AsyncClient(transport=httpx.MockTransport(api))
    return ZoomConferenceLinkService(db, CONFIG, RetryConfig(max_retries=0), http_client=client)


@pytest.mark.asyncio
async def test_create_meeting(db, integration):
    api = ZoomAPI()
    service = make_service(db, api)

    link = await service.create_meeting(
        integration, [Contact(type=ContactType.ZOOM)], booking(), "Asia/Seoul", None
    )

    assert link.link == "https://zoom.us/j/123"
    assert link.type == IntegrationVendor.ZOOM

    token_request, meeting_request = api.requests
    assert parse_qs(token_request.content.decode()) == {"grant_type": ["refresh_token"], "refresh_token": ["r1"]}
    expected_auth = base64.b64encode(b"zid:zsecret").decode()
    assert token_request.headers["authorization"] == f"Basic {expected_auth}"

    assert meeting_request.headers["authorization"] == "Bearer new-access"
    payload = json.loads(meeting_request.content)
    assert payload["type"] == 2
    assert payload["duration"] == 45
    assert payload["start_time"] == "2024-03-10T18:00:00"
    assert payload["timezone"] == "Asia/Seoul"


@pytest.mark.asyncio
async def test_rotated_tokens_are_stored(db, integration):
    service = make_service(db, ZoomAPI())
    await service.create_meeting(integration, [Contact(type=ContactType.ZOOM)], booking(), "UTC", None)

    stored = db.get_integration(integration.id)
    assert stored.access_token == "new-access"
    assert stored.refresh_token == "r2"


@pytest.mark.asyncio
async def test_no_zoom_contact_makes_no_requests(db, integration):
    api = ZoomAPI()
    service = make_service(db, api)

    link = await service.create_meeting(
        integration, [Contact(type=ContactType.GOOGLE_MEET)], booking(), "UTC", None
    )

    assert link is None
    assert api.requests == []


@pytest.mark.asyncio
async def test_token_refresh_failure_raises(db, integration):
    service = make_service(db, ZoomAPI(token_status=401))
    with pytest.raises(httpx.HTTPStatusError):
        await service.create_meeting(integration, [Contact(type=ContactType.ZOOM)], booking(), "UTC", None)


@pytest.mark.asyncio
async def test_find_integration_across_hosts(db, integration):
    service = make_service(db, ZoomAPI())
    found = await service.find_integration([HostProfile(profile_id=5), HostProfile(profile_id=10)])
    assert found.id == integration.id
    assert await service.find_integration([HostProfile(profile_id=5)]) is None


@pytest.mark.asyncio
async def test_aclose_closes_own_client_only(db):
    owned = ZoomConferenceLinkService(db, CONFIG)
    await owned.aclose()
    assert owned._http_client.is_closed

    injected = make_service(db, ZoomAPI())
    await injected.aclose()
    assert not injected._http_client.is_closed
