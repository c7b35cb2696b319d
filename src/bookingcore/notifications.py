"""Booking-complete notifications for hosts and invitees."""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod

from .models import (
    NotificationReport,
    NotificationTarget,
    ScheduledEvent,
    ScheduledEventNotification,
)

logger = logging.getLogger(__name__)


class NotificationSender(ABC):
    """Delivers one notification. Template rendering and transport live behind it."""

    @abstractmethod
    async def send_booking_complete(
        self, scheduled_event: ScheduledEvent, notification: ScheduledEventNotification
    ) -> bool:
        """Return True if the notification was accepted for delivery."""
        ...


class LogNotificationSender(NotificationSender):
    """Logs each delivery instead of sending it."""

    async def send_booking_complete(
        self, scheduled_event: ScheduledEvent, notification: ScheduledEventNotification
    ) -> bool:
        if notification.notification_target == NotificationTarget.HOST:
            recipients = ", ".join(p.email or str(p.profile_id) for p in scheduled_event.host_profiles)
        else:
            recipients = scheduled_event.invitee.email or scheduled_event.invitee.phone_number
        logger.info(
            "Booking complete %s -> %s (%s) via %s",
            scheduled_event.uuid,
            notification.notification_target.value,
            recipients or "-",
            notification.notification_type.value,
        )
        return True


class BookingNotifier:
    """Sends every notification of a booking concurrently.

    Failures are collected into the report and logged. They never fail the booking.
    """

    def __init__(self, sender: NotificationSender):
        self.sender = sender

    async def send_booking_complete_all(self, scheduled_event: ScheduledEvent) -> NotificationReport:
        notifications = scheduled_event.scheduled_event_notifications
        if not notifications:
            return NotificationReport()

        results = await asyncio.gather(
            *(self.sender.send_booking_complete(scheduled_event, n) for n in notifications),
            return_exceptions=True,
        )

        report = NotificationReport()
        for notification, result in zip(notifications, results):
            if isinstance(result, BaseException):
                logger.error(
                    f"Failed to send {notification.notification_type.value} notification "
                    f"to {notification.notification_target.value} for {scheduled_event.uuid}: {result}"
                )
                report.failed.append(notification)
            elif result is False:
                logger.warning(
                    "Notification to %s for %s was not accepted",
                    notification.notification_target.value, scheduled_event.uuid,
                )
                report.failed.append(notification)
            else:
                report.sent += 1

        if report.failed:
            logger.warning(
                "%d of %d notifications failed for %s",
                len(report.failed), report.total, scheduled_event.uuid,
            )
        return report
