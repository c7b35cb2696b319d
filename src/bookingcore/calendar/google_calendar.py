"""Google Calendar integration."""

from __future__ import annotations

import logging
import uuid

from googleapiclient.discovery import build

from ..config import GoogleConfig, RetryConfig
from ..database import Database
from ..models import (
    CalendarIntegration,
    ContactType,
    CreatedCalendarEvent,
    Integration,
    IntegrationVendor,
    ScheduledEvent,
)
from ..retry import retry_async
from .base import CalendarIntegrationService, describe_scheduled_event
from .google_auth import get_integration_credentials

logger = logging.getLogger(__name__)


class GoogleCalendarIntegrationService(CalendarIntegrationService):
    """Google Calendar API integration."""

    vendor = IntegrationVendor.GOOGLE

    def __init__(self, db: Database, config: GoogleConfig, retry: RetryConfig | None = None):
        super().__init__(db)
        self.config = config
        self.retry = retry or RetryConfig()

    def _service(self, integration: Integration):
        creds = get_integration_credentials(integration, self.config, on_refresh=self._save_refreshed)
        return build("calendar", "v3", credentials=creds, cache_discovery=False)

    def _save_refreshed(self, integration: Integration, creds) -> None:
        self.db.update_integration_tokens(
            integration.id, creds.token, creds.refresh_token or integration.refresh_token
        )

    async def create_calendar_event(
        self,
        integration: Integration,
        calendar_integration: CalendarIntegration,
        timezone: str,
        scheduled_event: ScheduledEvent,
    ) -> CreatedCalendarEvent:
        """Insert the booking, requesting a Meet conference when the event offers one."""
        event_body: dict = {
            "summary": scheduled_event.name,
            "description": describe_scheduled_event(scheduled_event),
            "start": {
                "dateTime": scheduled_event.scheduled_time.start_timestamp.isoformat(),
                "timeZone": timezone,
            },
            "end": {
                "dateTime": scheduled_event.scheduled_time.end_timestamp.isoformat(),
                "timeZone": timezone,
            },
        }

        if scheduled_event.invitee.email:
            event_body["attendees"] = [{"email": scheduled_event.invitee.email}]

        conference_version = 0
        if any(c.type == ContactType.GOOGLE_MEET for c in scheduled_event.contacts):
            event_body["conferenceData"] = {
                "createRequest": {
                    "requestId": str(uuid.uuid4()),
                    "conferenceSolutionKey": {"type": "hangoutsMeet"},
                }
            }
            conference_version = 1

        service = self._service(integration)
        created = await retry_async(
            service.events()
            .insert(
                calendarId=calendar_integration.calendar_id,
                body=event_body,
                conferenceDataVersion=conference_version,
            )
            .execute,
            max_retries=self.retry.max_retries,
            base_delay=self.retry.base_delay,
            label="google.create_event",
        )

        logger.info(f"Created Google event: {created.get('htmlLink')}")
        return CreatedCalendarEvent(
            id=created.get("id", ""),
            ical_uid=created.get("iCalUID", ""),
            raw=created,
        )

    async def patch_calendar_event(
        self,
        integration: Integration,
        calendar_integration: CalendarIntegration,
        scheduled_event: ScheduledEvent,
        created_event: CreatedCalendarEvent,
    ) -> None:
        patch_body = {
            "description": describe_scheduled_event(scheduled_event),
        }
        if scheduled_event.conference_links:
            patch_body["location"] = scheduled_event.conference_links[0].link

        service = self._service(integration)
        await retry_async(
            service.events()
            .patch(
                calendarId=calendar_integration.calendar_id,
                eventId=created_event.id,
                body=patch_body,
            )
            .execute,
            max_retries=self.retry.max_retries,
            base_delay=self.retry.base_delay,
            label="google.patch_event",
        )
        logger.info("Patched Google event %s with conference links", created_event.id)
