"""Registry of calendar integration providers, keyed by vendor."""

from __future__ import annotations

import logging

from ..errors import UnsupportedVendorError
from ..models import CalendarIntegration, IntegrationVendor
from .base import CalendarIntegrationService

logger = logging.getLogger(__name__)


class CalendarIntegrationsServiceLocator:
    """Resolves the calendar provider for a vendor.

    Iteration order is the configured outbound priority. Providers not named
    in the priority list come after the listed ones, in registration order.
    """

    def __init__(
        self,
        services: list[CalendarIntegrationService] | None = None,
        priority: list[IntegrationVendor] | None = None,
    ):
        self._services: dict[IntegrationVendor, CalendarIntegrationService] = {}
        self.priority = list(priority or [])
        for service in services or []:
            self.register(service)

    def register(self, service: CalendarIntegrationService) -> None:
        if service.vendor in self._services:
            raise ValueError(f"Calendar provider for {service.vendor.value} already registered")
        self._services[service.vendor] = service

    def resolve(self, vendor: IntegrationVendor | str) -> CalendarIntegrationService:
        try:
            vendor = IntegrationVendor(vendor)
        except ValueError:
            raise UnsupportedVendorError(str(vendor)) from None
        service = self._services.get(vendor)
        if service is None:
            raise UnsupportedVendorError(vendor.value)
        return service

    def ordered(self) -> list[CalendarIntegrationService]:
        ordered = [self._services[v] for v in self.priority if v in self._services]
        ordered += [s for s in self._services.values() if s not in ordered]
        return ordered

    async def find_outbound_calendar_integration(
        self, profile_id: int
    ) -> CalendarIntegration | None:
        """First calendar with outbound write sync enabled, in priority order."""
        for service in self.ordered():
            calendar_integration = await service.find_outbound_integration(profile_id)
            if calendar_integration is not None:
                logger.debug(
                    "Outbound calendar for profile %s: %s #%s",
                    profile_id, calendar_integration.vendor.value, calendar_integration.id,
                )
                return calendar_integration
        return None

    async def aclose(self) -> None:
        for service in self.ordered():
            await service.aclose()

    def __len__(self) -> int:
        return len(self._services)
