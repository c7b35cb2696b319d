"""Conference link providers."""

from .base import ConferenceLinkIntegrationService
from .factory import build_conference_services
from .google_meet import GoogleMeetConferenceLinkService
from .zoom import ZoomConferenceLinkService

__all__ = [
    "ConferenceLinkIntegrationService",
    "GoogleMeetConferenceLinkService",
    "ZoomConferenceLinkService",
    "build_conference_services",
]
