"""Apple iCloud calendar integration over CalDAV."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

import httpx

from ..config import AppleConfig, RetryConfig
from ..database import Database
from ..models import (
    CalendarIntegration,
    CreatedCalendarEvent,
    Integration,
    IntegrationVendor,
    ScheduledEvent,
)
from ..retry import retry_async
from .base import CalendarIntegrationService, describe_scheduled_event

logger = logging.getLogger(__name__)

PRODID = "-//bookingcore//booking engine//EN"


def _ics_datetime(value: datetime) -> str:
    return value.astimezone(timezone.utc).strftime("%Y%m%dT%H%M%SZ")


def _ics_escape(text: str) -> str:
    return (
        text.replace("\\", "\\\\")
        .replace(";", "\\;")
        .replace(",", "\\,")
        .replace("\n", "\\n")
    )


def to_ics(scheduled_event: ScheduledEvent, uid: str) -> str:
    """Serialize a booking as a single-VEVENT iCalendar object.

    CalDAV calendar object resources must not carry a METHOD property (RFC 4791 4.1).
    """
    lines = [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        f"PRODID:{PRODID}",
        "CALSCALE:GREGORIAN",
        "BEGIN:VEVENT",
        f"UID:{uid}",
        f"DTSTAMP:{_ics_datetime(scheduled_event.created_at)}",
        f"DTSTART:{_ics_datetime(scheduled_event.scheduled_time.start_timestamp)}",
        f"DTEND:{_ics_datetime(scheduled_event.scheduled_time.end_timestamp)}",
        f"SUMMARY:{_ics_escape(scheduled_event.name)}",
    ]
    description = describe_scheduled_event(scheduled_event)
    if description:
        lines.append(f"DESCRIPTION:{_ics_escape(description)}")
    if scheduled_event.conference_links:
        lines.append(f"LOCATION:{_ics_escape(scheduled_event.conference_links[0].link)}")
    if scheduled_event.invitee.email:
        lines.append(f"ATTENDEE;CN={_ics_escape(scheduled_event.invitee.name or scheduled_event.invitee.email)}:mailto:{scheduled_event.invitee.email}")
    lines += ["END:VEVENT", "END:VCALENDAR"]
    return "\r\n".join(lines) + "\r\n"


class AppleCalendarIntegrationService(CalendarIntegrationService):
    """Writes bookings into an iCloud calendar collection with CalDAV PUT.

    The integration's email and access_token are the Apple ID and its
    app-specific password; calendar_id is the calendar collection URL.
    """

    vendor = IntegrationVendor.APPLE

    def __init__(
        self,
        db: Database,
        config: AppleConfig,
        retry: RetryConfig | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        super().__init__(db)
        self.config = config
        self.retry = retry or RetryConfig()
        self._http_client = http_client or httpx.AsyncClient(timeout=30.0)
        self._owns_http_client = http_client is None

    async def aclose(self) -> None:
        if self._owns_http_client:
            await self._http_client.aclose()

    def _event_url(self, calendar_integration: CalendarIntegration, uid: str) -> str:
        collection = calendar_integration.calendar_id
        if not collection.startswith("http"):
            collection = f"{self.config.caldav_url.rstrip('/')}/{collection.lstrip('/')}"
        return f"{collection.rstrip('/')}/{uid}.ics"

    async def _put(
        self, url: str, integration: Integration, ics: str, headers: dict[str, str]
    ) -> httpx.Response:
        async def put() -> httpx.Response:
            response = await self._http_client.put(
                url,
                content=ics.encode("utf-8"),
                headers={"Content-Type": "text/calendar; charset=utf-8", **headers},
                auth=(integration.email, integration.access_token),
            )
            response.raise_for_status()
            return response

        return await retry_async(
            put,
            max_retries=self.retry.max_retries,
            base_delay=self.retry.base_delay,
            label="apple.put_event",
        )

    async def create_calendar_event(
        self,
        integration: Integration,
        calendar_integration: CalendarIntegration,
        timezone: str,
        scheduled_event: ScheduledEvent,
    ) -> CreatedCalendarEvent:
        uid = scheduled_event.uuid
        url = self._event_url(calendar_integration, uid)
        response = await self._put(
            url, integration, to_ics(scheduled_event, uid), {"If-None-Match": "*"}
        )
        logger.info("Created CalDAV event %s", url)
        return CreatedCalendarEvent(
            id=uid,
            ical_uid=uid,
            raw={"url": url, "etag": response.headers.get("etag", "")},
        )

    async def patch_calendar_event(
        self,
        integration: Integration,
        calendar_integration: CalendarIntegration,
        scheduled_event: ScheduledEvent,
        created_event: CreatedCalendarEvent,
    ) -> None:
        # CalDAV has no partial update; replace the whole object
        url = created_event.raw.get("url") or self._event_url(calendar_integration, created_event.ical_uid)
        headers = {}
        if created_event.raw.get("etag"):
            headers["If-Match"] = created_event.raw["etag"]
        await self._put(url, integration, to_ics(scheduled_event, created_event.ical_uid), headers)
        logger.info("Patched CalDAV event %s with conference links", url)
