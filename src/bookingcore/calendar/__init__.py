"""Calendar providers."""

from .apple_calendar import AppleCalendarIntegrationService
from .base import CalendarIntegrationService
from .factory import build_calendar_locator
from .google_calendar import GoogleCalendarIntegrationService
from .locator import CalendarIntegrationsServiceLocator

__all__ = [
    "AppleCalendarIntegrationService",
    "CalendarIntegrationService",
    "CalendarIntegrationsServiceLocator",
    "GoogleCalendarIntegrationService",
    "build_calendar_locator",
]
