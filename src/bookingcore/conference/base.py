"""Abstract base for conference link providers."""

from __future__ import annotations

from abc import ABC, abstractmethod

from ..database import Database
from ..models import (
    ConferenceLink,
    Contact,
    CreatedCalendarEvent,
    HostProfile,
    Integration,
    IntegrationVendor,
    ScheduledEvent,
)


class ConferenceLinkIntegrationService(ABC):
    """Produces a meeting link for a booking (Google Meet, Zoom, ...)."""

    vendor: IntegrationVendor

    def __init__(self, db: Database):
        self.db = db

    async def aclose(self) -> None:
        """Release clients the provider opened itself."""

    async def find_integration(self, host_profiles: list[HostProfile]) -> Integration | None:
        """The vendor integration owned by any of the booking's hosts, if one exists."""
        return self.db.find_integration(self.vendor, [p.profile_id for p in host_profiles])

    @abstractmethod
    async def create_meeting(
        self,
        integration: Integration,
        contacts: list[Contact],
        scheduled_event: ScheduledEvent,
        timezone: str,
        created_event: CreatedCalendarEvent | None,
    ) -> ConferenceLink | None:
        """Create the meeting. None when the event does not offer this vendor."""
        ...
