"""Booking search across the native store and every calendar provider's mirror."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime, timedelta, timezone

from ..calendar.locator import CalendarIntegrationsServiceLocator
from ..config import SearchConfig
from ..database import Database
from ..errors import CannotFindScheduledEventBody, ScheduledEventNotFound
from ..models import InviteeAnswer, ScheduledEvent, ScheduledEventSearchOption

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ScheduledEventsQueryService:
    """Read path for bookings.

    Results are concatenated per source (native first, then providers in
    priority order) and are not re-sorted across sources.
    """

    def __init__(
        self,
        db: Database,
        calendar_locator: CalendarIntegrationsServiceLocator,
        search_config: SearchConfig | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.db = db
        self.calendar_locator = calendar_locator
        self.search_config = search_config or SearchConfig()
        self.clock = clock

    def with_defaults(self, option: ScheduledEventSearchOption) -> ScheduledEventSearchOption:
        now = self.clock()
        return replace(
            option,
            since=option.since or now,
            until=option.until or now + timedelta(days=self.search_config.default_window_days),
        )

    async def search(self, option: ScheduledEventSearchOption) -> list[ScheduledEvent]:
        option = self.with_defaults(option)

        results: list[ScheduledEvent] = list(self.db.search_scheduled_events(option))
        native_count = len(results)
        for service in self.calendar_locator.ordered():
            results.extend(await service.search(option))

        logger.debug(
            "Search %s - %s: %d native, %d mirrored",
            option.since, option.until, native_count, len(results) - native_count,
        )
        return results

    async def find_one(self, scheduled_event_uuid: str) -> ScheduledEvent:
        """A native booking with its invitee answers and notification info merged in."""
        scheduled_event = self.db.get_scheduled_event_by_uuid(scheduled_event_uuid)
        if scheduled_event is None:
            raise ScheduledEventNotFound(scheduled_event_uuid)

        body = self.db.get_scheduled_event_body(scheduled_event_uuid)
        if body is None:
            raise CannotFindScheduledEventBody(scheduled_event_uuid)

        return merge_body(scheduled_event, body)


def merge_body(scheduled_event: ScheduledEvent, body: dict) -> ScheduledEvent:
    scheduled_event.invitee_answers = [
        InviteeAnswer(**answer) for answer in body.get("invitee_answers", [])
    ]
    scheduled_event.scheduled_notification_info = body.get("scheduled_notification_info", {})
    return scheduled_event
