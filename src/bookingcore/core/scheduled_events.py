"""Booking creation: validate, write to external calendars, persist, notify, confirm."""

from __future__ import annotations

import asyncio
import logging
import uuid as uuid_lib
from collections.abc import Callable
from dataclasses import asdict, replace
from datetime import datetime, timedelta
from typing import Any

from ..calendar.locator import CalendarIntegrationsServiceLocator
from ..conference.base import ConferenceLinkIntegrationService
from ..database import Database
from ..errors import CannotCreateByInvalidTimeRange, EventNotFound, ScheduledEventNotFound
from ..models import (
    Availability,
    AvailabilityBody,
    CalendarIntegration,
    ConferenceLink,
    Contact,
    ConfirmedBooking,
    CreatedCalendarEvent,
    EventDefinition,
    Host,
    HostProfile,
    NotificationTarget,
    NotificationType,
    ScheduledBufferTime,
    ScheduledEvent,
    ScheduledEventNotification,
    ScheduledEventSearchOption,
    ScheduledStatus,
    Team,
)
from ..notifications import BookingNotifier, LogNotificationSender
from .availability import find_unbookable_reason
from .conflicts import ConflictDetector
from .query import ScheduledEventsQueryService, merge_body, utc_now

logger = logging.getLogger(__name__)


def expand_notifications(notification_info: dict[str, list[dict[str, Any]]]) -> list[ScheduledEventNotification]:
    """Flatten {"host": [...], "invitee": [...]} into one notification per reminder.

    Each entry looks like {"type": "email", "reminders": [{"type", "typeValue", "remindBefore"}]}.
    """
    notifications = []
    for target_name, entries in notification_info.items():
        target = NotificationTarget.HOST if target_name == "host" else NotificationTarget.INVITEE
        for entry in entries or []:
            for reminder in entry.get("reminders", []):
                notifications.append(
                    ScheduledEventNotification(
                        notification_target=target,
                        notification_type=NotificationType(entry["type"]),
                        reminder_type=reminder.get("type", ""),
                        reminder_value=reminder.get("typeValue", ""),
                        remind_at=reminder.get("remindBefore", ""),
                    )
                )
    return notifications


def get_patched_scheduled_event(
    event: EventDefinition,
    new_scheduled_event: ScheduledEvent,
    team: Team,
    host_profiles: list[HostProfile],
    team_workspace: str,
    timezone: str,
) -> ScheduledEvent:
    """Apply the event definition's defaults and the host context to a copy of a requested booking."""
    buffer = new_scheduled_event.scheduled_buffer_time
    if buffer.start_buffer_timestamp is None and buffer.end_buffer_timestamp is None and (
        event.buffer_before_minutes or event.buffer_after_minutes
    ):
        buffer = ScheduledBufferTime(
            start_buffer_timestamp=new_scheduled_event.scheduled_time.start_timestamp
            - timedelta(minutes=event.buffer_before_minutes),
            end_buffer_timestamp=new_scheduled_event.scheduled_time.end_timestamp
            + timedelta(minutes=event.buffer_after_minutes),
        )
    else:
        buffer = replace(buffer)

    return replace(
        new_scheduled_event,
        uuid=new_scheduled_event.uuid or uuid_lib.uuid4().hex,
        name=event.name,
        color=event.color,
        contacts=list(event.contacts),
        event_id=event.id,
        event_uuid=event.uuid,
        team_id=team.id,
        status=ScheduledStatus.OPENED,
        host=Host(workspace=team_workspace, timezone=timezone),
        host_profiles=list(host_profiles),
        scheduled_buffer_time=buffer,
        invitee_answers=list(new_scheduled_event.invitee_answers),
        conference_links=list(new_scheduled_event.conference_links),
        scheduled_event_notifications=expand_notifications(new_scheduled_event.scheduled_notification_info),
    )


class GlobalScheduledEventsService:
    """Creates and reads bookings across the native store and calendar providers."""

    def __init__(
        self,
        db: Database,
        calendar_locator: CalendarIntegrationsServiceLocator,
        conference_services: list[ConferenceLinkIntegrationService] | None = None,
        notifier: BookingNotifier | None = None,
        detector: ConflictDetector | None = None,
        query: ScheduledEventsQueryService | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.db = db
        self.calendar_locator = calendar_locator
        self.conference_services = conference_services or []
        self.notifier = notifier or BookingNotifier(LogNotificationSender())
        self.detector = detector or ConflictDetector(db, calendar_locator)
        self.query = query or ScheduledEventsQueryService(db, calendar_locator, clock=clock)
        self.clock = clock

    async def search(self, option: ScheduledEventSearchOption) -> list[ScheduledEvent]:
        return await self.query.search(option)

    async def find_one(self, scheduled_event_uuid: str) -> ScheduledEvent:
        return await self.query.find_one(scheduled_event_uuid)

    async def validate(
        self,
        scheduled_event: ScheduledEvent,
        timezone: str,
        availability_body: AvailabilityBody,
        calendar_integration: CalendarIntegration | None = None,
    ) -> ScheduledEvent:
        """Raise CannotCreateByInvalidTimeRange unless the booking's range is free and available."""
        start = scheduled_event.scheduled_time.start_timestamp
        end = scheduled_event.scheduled_time.end_timestamp

        reason = find_unbookable_reason(
            availability_body.available_times,
            availability_body.overrides,
            timezone,
            start,
            end,
            now=self.clock(),
        )
        if reason is not None:
            logger.info("Rejected %s - %s: %s", start, end, reason)
            raise CannotCreateByInvalidTimeRange(reason)

        conflict = await self.detector.find_conflict(
            scheduled_event.scheduled_time,
            scheduled_event.scheduled_buffer_time,
            scheduled_event.event_id,
            calendar_integration,
        )
        if conflict is not None:
            raise CannotCreateByInvalidTimeRange(
                CannotCreateByInvalidTimeRange.CONFLICT,
                f"Requested time overlaps {conflict.source} event {conflict.scheduled_event.uuid}",
            )
        return scheduled_event

    async def aclose(self) -> None:
        """Close the HTTP clients held by calendar and conference providers."""
        await self.calendar_locator.aclose()
        for service in self.conference_services:
            await service.aclose()

    async def create(
        self,
        team_workspace: str,
        event_uuid: str,
        new_scheduled_event: ScheduledEvent,
        team: Team,
        host_profiles: list[HostProfile],
        host_availability: Availability,
    ) -> ConfirmedBooking:
        if not host_profiles:
            raise ValueError("A booking needs at least one host profile")

        timezone = host_availability.timezone
        main_host = host_profiles[0]
        logger.info(
            "Creating scheduled event for %s/%s, hosts %s",
            team_workspace, event_uuid, [p.profile_id for p in host_profiles],
        )

        event = self.db.get_event_by_workspace_and_uuid(team_workspace, event_uuid)
        if event is None:
            raise EventNotFound(team_workspace, event_uuid)

        scheduled_event = get_patched_scheduled_event(
            event, new_scheduled_event, team, host_profiles, team_workspace, timezone
        )

        calendar_integration = await self.calendar_locator.find_outbound_calendar_integration(
            main_host.profile_id
        )

        await self.validate(scheduled_event, timezone, host_availability.body, calendar_integration)
        logger.info("Validated %s, outbound calendar: %s", scheduled_event.uuid,
                    calendar_integration.vendor.value if calendar_integration else "none")

        # External calendar event
        created_event: CreatedCalendarEvent | None = None
        calendar_service = None
        integration = None
        if calendar_integration is not None:
            calendar_service = self.calendar_locator.resolve(calendar_integration.vendor)
            integration = calendar_service.get_integration(calendar_integration)
            created_event = await calendar_service.create_calendar_event(
                integration, calendar_integration, timezone, scheduled_event
            )
            scheduled_event.ical_uid = created_event.ical_uid

        # Conference links
        links = await asyncio.gather(
            *(
                self._create_conference_link(
                    service, event.contacts, scheduled_event, timezone, created_event, host_profiles
                )
                for service in self.conference_services
            ),
            return_exceptions=True,
        )
        failures = [link for link in links if isinstance(link, BaseException)]
        if failures:
            for failure in failures[1:]:
                logger.error("Conference link creation also failed: %r", failure)
            raise failures[0]
        scheduled_event.conference_links.extend(link for link in links if link is not None)

        if created_event is not None and scheduled_event.conference_links:
            await calendar_service.patch_calendar_event(
                integration, calendar_integration, scheduled_event, created_event
            )

        # Persist, re-checking the slot in the same transaction
        window_start, window_end = self.detector.conflict_window(
            scheduled_event.scheduled_time, scheduled_event.scheduled_buffer_time
        )
        if not self.db.insert_scheduled_event_if_free(scheduled_event, window_start, window_end):
            if created_event is not None:
                logger.error(
                    "Slot for %s was taken during creation; %s calendar event %s must be reconciled",
                    scheduled_event.uuid, calendar_integration.vendor.value, created_event.id,
                )
            raise CannotCreateByInvalidTimeRange(CannotCreateByInvalidTimeRange.RACE_LOST)
        logger.info("Saved scheduled event %s (id=%s)", scheduled_event.uuid, scheduled_event.id)

        body = self.db.save_scheduled_event_body(
            scheduled_event.uuid,
            {
                "invitee_answers": [asdict(answer) for answer in scheduled_event.invitee_answers],
                "scheduled_notification_info": scheduled_event.scheduled_notification_info,
            },
        )
        merge_body(scheduled_event, body)

        report = await self.notifier.send_booking_complete_all(scheduled_event)

        self.db.update_scheduled_event_status(scheduled_event.id, ScheduledStatus.CONFIRMED)
        scheduled_event.status = ScheduledStatus.CONFIRMED
        logger.info(
            "Confirmed %s (%d/%d notifications sent)",
            scheduled_event.uuid, report.sent, report.total,
        )
        return ConfirmedBooking(scheduled_event=scheduled_event, notifications=report)

    async def _create_conference_link(
        self,
        service: ConferenceLinkIntegrationService,
        contacts: list[Contact],
        scheduled_event: ScheduledEvent,
        timezone: str,
        created_event: CreatedCalendarEvent | None,
        host_profiles: list[HostProfile],
    ) -> ConferenceLink | None:
        integration = await service.find_integration(host_profiles)
        if integration is None:
            logger.debug("No %s integration for hosts, skipping conference link", service.vendor.value)
            return None
        return await service.create_meeting(
            integration, contacts, scheduled_event, timezone, created_event
        )

    async def cancel(self, scheduled_event_uuid: str) -> ScheduledEvent:
        """Mark a booking canceled. Its range stops counting as a conflict."""
        scheduled_event = self.db.get_scheduled_event_by_uuid(scheduled_event_uuid)
        if scheduled_event is None:
            raise ScheduledEventNotFound(scheduled_event_uuid)
        self.db.update_scheduled_event_status(scheduled_event.id, ScheduledStatus.CANCELED)
        scheduled_event.status = ScheduledStatus.CANCELED
        logger.info("Canceled scheduled event %s", scheduled_event_uuid)
        return scheduled_event
