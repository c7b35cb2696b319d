"""Conflict detection against native bookings and mirrored calendar events."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta

from ..calendar.locator import CalendarIntegrationsServiceLocator
from ..database import Database
from ..models import (
    CalendarIntegration,
    Conflict,
    ScheduledBufferTime,
    ScheduledEvent,
    ScheduledTimeset,
)

logger = logging.getLogger(__name__)

NATIVE = "native"


class ConflictDetector:
    """Finds an existing commitment overlapping a candidate range.

    A conflict is a result, not an error. Store and provider failures propagate.
    """

    def __init__(
        self,
        db: Database,
        calendar_locator: CalendarIntegrationsServiceLocator,
        exclusive_margin: timedelta = timedelta(seconds=1),
    ):
        self.db = db
        self.calendar_locator = calendar_locator
        self.exclusive_margin = exclusive_margin

    def conflict_window(
        self, scheduled_time: ScheduledTimeset, scheduled_buffer_time: ScheduledBufferTime | None
    ) -> tuple[datetime, datetime]:
        """Effective span narrowed at both edges, so back-to-back bookings do not collide."""
        span = ScheduledEvent(
            scheduled_time=scheduled_time,
            scheduled_buffer_time=scheduled_buffer_time or ScheduledBufferTime(),
        ).effective_span()
        return span[0] + self.exclusive_margin, span[1] - self.exclusive_margin

    async def _find_native(
        self, window_start: datetime, window_end: datetime, event_id: int | None
    ) -> ScheduledEvent | None:
        return self.db.find_scheduled_event_conflict(window_start, window_end, event_id)

    async def _find_vendor(
        self, window_start: datetime, window_end: datetime, calendar_integration: CalendarIntegration | None
    ) -> ScheduledEvent | None:
        if calendar_integration is None:
            return None
        service = self.calendar_locator.resolve(calendar_integration.vendor)
        return await service.find_conflict(window_start, window_end, calendar_integration.id)

    async def find_conflict(
        self,
        scheduled_time: ScheduledTimeset,
        scheduled_buffer_time: ScheduledBufferTime | None,
        event_id: int | None,
        calendar_integration: CalendarIntegration | None = None,
    ) -> Conflict | None:
        window_start, window_end = self.conflict_window(scheduled_time, scheduled_buffer_time)

        native, vendor = await asyncio.gather(
            self._find_native(window_start, window_end, event_id),
            self._find_vendor(window_start, window_end, calendar_integration),
            return_exceptions=True,
        )

        if isinstance(native, BaseException):
            raise native
        if native is not None:
            logger.info(
                "Native conflict with %s (%s - %s)",
                native.uuid, native.scheduled_time.start_timestamp, native.scheduled_time.end_timestamp,
            )
            return Conflict(source=NATIVE, scheduled_event=native)

        # No native conflict, so a vendor lookup failure must surface
        if isinstance(vendor, BaseException):
            raise vendor
        if vendor is not None:
            logger.info(
                "%s calendar conflict with %s", calendar_integration.vendor.value, vendor.uuid
            )
            return Conflict(source=calendar_integration.vendor.value, scheduled_event=vendor)
        return None
