"""Core data models for bookingcore."""

from __future__ import annotations

import uuid as uuid_lib
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any


class ScheduledStatus(str, Enum):
    """Lifecycle of a booking."""

    OPENED = "opened"
    CONFIRMED = "confirmed"
    REMINDED = "reminded"
    CANCELED = "canceled"
    COMPLETED = "completed"


UPCOMING_STATUSES = (ScheduledStatus.OPENED, ScheduledStatus.CONFIRMED, ScheduledStatus.REMINDED)
PAST_STATUSES = (ScheduledStatus.CANCELED, ScheduledStatus.COMPLETED)


class IntegrationVendor(str, Enum):
    GOOGLE = "google"
    APPLE = "apple"
    ZOOM = "zoom"


class ContactType(str, Enum):
    """How the invitee meets the host."""

    GOOGLE_MEET = "google_meet"
    ZOOM = "zoom"
    OFFLINE = "offline"
    PHONE = "phone"
    LINK = "link"


class NotificationTarget(str, Enum):
    HOST = "host"
    INVITEE = "invitee"


class NotificationType(str, Enum):
    EMAIL = "email"
    TEXT = "text"


# --- Availability ---


@dataclass
class TimeRange:
    """Wall-clock range within a day, e.g. 09:00-17:00."""

    start_time: str
    end_time: str


@dataclass
class AvailableTime:
    """Recurring weekly window. day: 0=Sunday .. 6=Saturday."""

    day: int
    time_ranges: list[TimeRange] = field(default_factory=list)


@dataclass
class DateOverride:
    """Replaces the weekly windows for one date. Empty time_ranges = blackout."""

    target_date: date
    time_ranges: list[TimeRange] = field(default_factory=list)


@dataclass
class AvailabilityBody:
    available_times: list[AvailableTime] = field(default_factory=list)
    overrides: list[DateOverride] = field(default_factory=list)


@dataclass
class Availability:
    """A host's availability as supplied by the availability service."""

    timezone: str = "UTC"
    available_times: list[AvailableTime] = field(default_factory=list)
    overrides: list[DateOverride] = field(default_factory=list)

    @property
    def body(self) -> AvailabilityBody:
        return AvailabilityBody(available_times=self.available_times, overrides=self.overrides)


# --- Events, hosts, integrations ---


@dataclass
class Contact:
    type: ContactType
    value: str = ""


@dataclass
class EventDefinition:
    """An event type hosts publish (e.g. "30 min intro call")."""

    id: int
    uuid: str
    team_workspace: str
    name: str = ""
    color: str = ""
    contacts: list[Contact] = field(default_factory=list)
    buffer_before_minutes: int = 0
    buffer_after_minutes: int = 0


@dataclass
class Team:
    id: int
    workspace: str
    name: str = ""


@dataclass
class HostProfile:
    profile_id: int
    name: str = ""
    email: str = ""


@dataclass
class Host:
    workspace: str = ""
    timezone: str = "UTC"


@dataclass
class Integration:
    """OAuth-backed account link for a vendor (Google, Apple, Zoom)."""

    id: int
    vendor: IntegrationVendor
    profile_id: int
    email: str = ""
    access_token: str = ""
    refresh_token: str = ""


@dataclass
class CalendarIntegration:
    """Link between a host profile and one calendar of a vendor integration."""

    id: int
    vendor: IntegrationVendor
    integration_id: int
    profile_id: int
    name: str = ""
    calendar_id: str = "primary"
    outbound_write_sync: bool = False


@dataclass
class CreatedCalendarEvent:
    """What a provider returns after creating an external calendar event."""

    id: str
    ical_uid: str = ""
    raw: dict[str, Any] = field(default_factory=dict)


@dataclass
class ConferenceLink:
    type: IntegrationVendor
    service_name: str
    link: str


# --- Bookings ---


@dataclass
class ScheduledTimeset:
    start_timestamp: datetime
    end_timestamp: datetime


@dataclass
class ScheduledBufferTime:
    start_buffer_timestamp: datetime | None = None
    end_buffer_timestamp: datetime | None = None


@dataclass
class Invitee:
    name: str = ""
    email: str = ""
    phone_number: str = ""


@dataclass
class InviteeAnswer:
    question: str
    answer: str = ""
    required: bool = False


@dataclass
class ScheduledEventNotification:
    """One notification to deliver for a booking."""

    notification_target: NotificationTarget
    notification_type: NotificationType
    reminder_type: str
    reminder_value: str
    remind_at: str = ""


@dataclass
class ScheduledEvent:
    """A booking (native) or a mirrored external event."""

    scheduled_time: ScheduledTimeset
    scheduled_buffer_time: ScheduledBufferTime = field(default_factory=ScheduledBufferTime)
    uuid: str = field(default_factory=lambda: uuid_lib.uuid4().hex)
    id: int | None = None
    event_id: int | None = None
    event_uuid: str = ""
    team_id: int | None = None
    name: str = ""
    color: str = ""
    status: ScheduledStatus = ScheduledStatus.OPENED
    contacts: list[Contact] = field(default_factory=list)
    host: Host = field(default_factory=Host)
    host_profiles: list[HostProfile] = field(default_factory=list)
    invitee: Invitee = field(default_factory=Invitee)
    invitee_answers: list[InviteeAnswer] = field(default_factory=list)
    # {"host": [{"type": "email", "reminders": [{"type": ..., "typeValue": ..., "remindBefore": ...}]}], "invitee": [...]}
    scheduled_notification_info: dict[str, list[dict[str, Any]]] = field(default_factory=dict)
    scheduled_event_notifications: list[ScheduledEventNotification] = field(default_factory=list)
    conference_links: list[ConferenceLink] = field(default_factory=list)
    ical_uid: str = ""
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def effective_span(self) -> tuple[datetime, datetime]:
        """Buffer edges where present, core edges otherwise."""
        start = self.scheduled_buffer_time.start_buffer_timestamp or self.scheduled_time.start_timestamp
        end = self.scheduled_buffer_time.end_buffer_timestamp or self.scheduled_time.end_timestamp
        return start, end


@dataclass
class VendorMirroredScheduledEvent(ScheduledEvent):
    """Local copy of an event held by an external calendar."""

    vendor: IntegrationVendor = IntegrationVendor.GOOGLE
    calendar_integration_id: int | None = None


@dataclass
class ScheduledEventSearchOption:
    team_id: int | None = None
    host_profile_id: int | None = None
    event_uuid: str | None = None
    since: datetime | None = None
    until: datetime | None = None
    status: ScheduledStatus | None = None
    status_group: str = "upcoming"  # "upcoming" | "past"
    page: int | None = None
    take: int | None = None
    order_by_start: str | None = None  # "ASC" | "DESC"


# --- Results ---


@dataclass
class Conflict:
    """An existing commitment overlapping a candidate range."""

    source: str  # "native" or a vendor value
    scheduled_event: ScheduledEvent


@dataclass
class NotificationReport:
    sent: int = 0
    failed: list[ScheduledEventNotification] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.sent + len(self.failed)

    @property
    def all_sent(self) -> bool:
        return not self.failed


@dataclass
class ConfirmedBooking:
    """A confirmed booking plus the outcome of its notifications."""

    scheduled_event: ScheduledEvent
    notifications: NotificationReport = field(default_factory=NotificationReport)
