"""Exceptions raised by the booking engine.

Store and provider failures (sqlite3.Error, HttpError, httpx.HTTPError) are not
wrapped; they propagate as-is.
"""

from __future__ import annotations


class BookingCoreError(Exception):
    """Base class for engine errors."""


class CannotCreateByInvalidTimeRange(BookingCoreError):
    """The requested range is past, inverted, outside availability or taken."""

    PAST = "past"
    NOT_CONCATENATED = "not_concatenated"
    OUTSIDE_AVAILABILITY = "outside_availability"
    CONFLICT = "conflict"
    RACE_LOST = "race_lost"

    def __init__(self, reason: str = OUTSIDE_AVAILABILITY, message: str | None = None):
        self.reason = reason
        super().__init__(message or f"Cannot create a scheduled event: invalid time range ({reason})")


class UnsupportedVendorError(BookingCoreError):
    """No provider is registered for the requested vendor."""

    def __init__(self, vendor):
        self.vendor = vendor
        super().__init__(f"Unsupported integration vendor: {vendor}")


class EventNotFound(BookingCoreError):
    def __init__(self, team_workspace: str, event_uuid: str):
        super().__init__(f"Event {event_uuid} not found in workspace {team_workspace}")


class ScheduledEventNotFound(BookingCoreError):
    def __init__(self, scheduled_event_uuid: str):
        super().__init__(f"Scheduled event {scheduled_event_uuid} not found")


class CannotFindScheduledEventBody(BookingCoreError):
    def __init__(self, scheduled_event_uuid: str):
        super().__init__(f"Body of scheduled event {scheduled_event_uuid} not found")
