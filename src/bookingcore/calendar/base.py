"""Abstract base for calendar integration providers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from ..database import Database
from ..models import (
    CalendarIntegration,
    CreatedCalendarEvent,
    Integration,
    IntegrationVendor,
    ScheduledEvent,
    ScheduledEventSearchOption,
    VendorMirroredScheduledEvent,
)


class CalendarIntegrationService(ABC):
    """One external calendar vendor (Google, Apple CalDAV, ...).

    Writes go to the vendor's API. Reads (search, conflict lookups) go to the
    local mirror of that vendor's events, which the vendor's sync process keeps
    current.
    """

    vendor: IntegrationVendor

    def __init__(self, db: Database):
        self.db = db

    async def aclose(self) -> None:
        """Release clients the provider opened itself."""

    async def find_outbound_integration(self, profile_id: int) -> CalendarIntegration | None:
        """The host's calendar of this vendor with outbound write sync enabled."""
        return self.db.find_outbound_calendar_integration(self.vendor, profile_id)

    def get_integration(self, calendar_integration: CalendarIntegration) -> Integration:
        integration = self.db.get_integration(calendar_integration.integration_id)
        if integration is None:
            raise LookupError(
                f"Integration {calendar_integration.integration_id} of calendar "
                f"integration {calendar_integration.id} not found"
            )
        return integration

    @abstractmethod
    async def create_calendar_event(
        self,
        integration: Integration,
        calendar_integration: CalendarIntegration,
        timezone: str,
        scheduled_event: ScheduledEvent,
    ) -> CreatedCalendarEvent:
        """Create the booking in the host's external calendar."""
        ...

    @abstractmethod
    async def patch_calendar_event(
        self,
        integration: Integration,
        calendar_integration: CalendarIntegration,
        scheduled_event: ScheduledEvent,
        created_event: CreatedCalendarEvent,
    ) -> None:
        """Update a created event with the booking's conference links."""
        ...

    async def search(self, option: ScheduledEventSearchOption) -> list[VendorMirroredScheduledEvent]:
        return self.db.search_mirrored_scheduled_events(self.vendor, option)

    async def find_conflict(
        self, window_start: datetime, window_end: datetime, calendar_integration_id: int
    ) -> VendorMirroredScheduledEvent | None:
        return self.db.find_mirrored_conflict(
            self.vendor, calendar_integration_id, window_start, window_end
        )


def describe_scheduled_event(scheduled_event: ScheduledEvent) -> str:
    """Plain-text event description shared by the calendar providers."""
    lines = []
    if scheduled_event.invitee.name:
        lines.append(f"Invitee: {scheduled_event.invitee.name}")
    if scheduled_event.invitee.email:
        lines.append(f"Email: {scheduled_event.invitee.email}")
    for answer in scheduled_event.invitee_answers:
        if answer.answer:
            lines.append(f"{answer.question}: {answer.answer}")
    for link in scheduled_event.conference_links:
        lines.append(f"{link.service_name}: {link.link}")
    return "\n".join(lines)
