"""Factory for building the calendar provider locator from config."""

from __future__ import annotations

import logging

from ..config import Config
from ..database import Database
from ..errors import UnsupportedVendorError
from ..models import IntegrationVendor
from .apple_calendar import AppleCalendarIntegrationService
from .base import CalendarIntegrationService
from .google_calendar import GoogleCalendarIntegrationService
from .locator import CalendarIntegrationsServiceLocator

logger = logging.getLogger(__name__)


def build_calendar_locator(config: Config, db: Database) -> CalendarIntegrationsServiceLocator:
    """Register one provider per vendor named in calendar.outbound_priority."""
    priority: list[IntegrationVendor] = []
    services: list[CalendarIntegrationService] = []

    for name in config.calendar.outbound_priority:
        if name == IntegrationVendor.GOOGLE.value:
            services.append(GoogleCalendarIntegrationService(db, config.calendar.google, config.retry))
        elif name == IntegrationVendor.APPLE.value:
            services.append(AppleCalendarIntegrationService(db, config.calendar.apple, config.retry))
        else:
            raise UnsupportedVendorError(name)
        priority.append(IntegrationVendor(name))

    logger.info("Calendar providers: %s", ", ".join(v.value for v in priority) or "none")
    return CalendarIntegrationsServiceLocator(services, priority)
