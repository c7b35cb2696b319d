"""Google Meet links, taken from the event the Google calendar provider created."""

from __future__ import annotations

import logging

from ..models import (
    ConferenceLink,
    Contact,
    ContactType,
    CreatedCalendarEvent,
    Integration,
    IntegrationVendor,
    ScheduledEvent,
)
from .base import ConferenceLinkIntegrationService

logger = logging.getLogger(__name__)


def extract_meet_link(raw_event: dict) -> str | None:
    """Video entry point of a Google event's conferenceData."""
    for entry_point in raw_event.get("conferenceData", {}).get("entryPoints", []):
        if entry_point.get("entryPointType") == "video":
            return entry_point.get("uri")
    return raw_event.get("hangoutLink")


class GoogleMeetConferenceLinkService(ConferenceLinkIntegrationService):
    vendor = IntegrationVendor.GOOGLE

    async def create_meeting(
        self,
        integration: Integration,
        contacts: list[Contact],
        scheduled_event: ScheduledEvent,
        timezone: str,
        created_event: CreatedCalendarEvent | None,
    ) -> ConferenceLink | None:
        if not any(c.type == ContactType.GOOGLE_MEET for c in contacts):
            return None
        if created_event is None:
            # Meet conferences only exist on Google calendar events
            logger.info("No Google calendar event for %s, skipping Meet link", scheduled_event.uuid)
            return None

        link = extract_meet_link(created_event.raw)
        if not link:
            logger.warning("Google event %s has no Meet entry point", created_event.id)
            return None
        return ConferenceLink(type=IntegrationVendor.GOOGLE, service_name="Google Meet", link=link)
