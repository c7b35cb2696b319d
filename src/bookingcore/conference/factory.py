"""Factory for building conference link providers from config."""

from __future__ import annotations

import logging

from ..config import Config
from ..database import Database
from ..errors import UnsupportedVendorError
from ..models import IntegrationVendor
from .base import ConferenceLinkIntegrationService
from .google_meet import GoogleMeetConferenceLinkService
from .zoom import ZoomConferenceLinkService

logger = logging.getLogger(__name__)


def build_conference_services(config: Config, db: Database) -> list[ConferenceLinkIntegrationService]:
    """One service per name in conference.providers, in that order."""
    services: list[ConferenceLinkIntegrationService] = []
    for name in config.conference.providers:
        if name == IntegrationVendor.GOOGLE.value:
            services.append(GoogleMeetConferenceLinkService(db))
        elif name == IntegrationVendor.ZOOM.value:
            services.append(ZoomConferenceLinkService(db, config.zoom, config.retry))
        else:
            raise UnsupportedVendorError(name)

    logger.info("Conference providers: %s", ", ".join(s.vendor.value for s in services) or "none")
    return services
