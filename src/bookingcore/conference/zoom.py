"""Zoom meetings via the Zoom REST API."""

from __future__ import annotations

import logging
import math
from zoneinfo import ZoneInfo

import httpx

from ..config import RetryConfig, ZoomConfig
from ..database import Database
from ..models import (
    ConferenceLink,
    Contact,
    ContactType,
    CreatedCalendarEvent,
    Integration,
    IntegrationVendor,
    ScheduledEvent,
)
from ..retry import retry_async
from .base import ConferenceLinkIntegrationService

logger = logging.getLogger(__name__)

SCHEDULED_MEETING = 2


class ZoomConferenceLinkService(ConferenceLinkIntegrationService):
    """Creates a scheduled Zoom meeting on the host's account.

    Zoom rotates refresh tokens, so every refresh is written back to the store.
    """

    vendor = IntegrationVendor.ZOOM

    def __init__(
        self,
        db: Database,
        config: ZoomConfig,
        retry: RetryConfig | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        super().__init__(db)
        self.config = config
        self.retry = retry or RetryConfig()
        self._http_client = http_client or httpx.AsyncClient(timeout=30.0)
        self._owns_http_client = http_client is None

    async def aclose(self) -> None:
        if self._owns_http_client:
            await self._http_client.aclose()

    async def refresh_access_token(self, integration: Integration) -> str:
        response = await self._http_client.post(
            self.config.token_url,
            data={"grant_type": "refresh_token", "refresh_token": integration.refresh_token},
            auth=(self.config.client_id, self.config.client_secret),
        )
        if response.status_code != 200:
            logger.error("Zoom token refresh failed: %s %s", response.status_code, response.text)
        response.raise_for_status()

        tokens = response.json()
        integration.access_token = tokens["access_token"]
        integration.refresh_token = tokens.get("refresh_token", integration.refresh_token)
        self.db.update_integration_tokens(
            integration.id, integration.access_token, integration.refresh_token
        )
        return integration.access_token

    async def create_meeting(
        self,
        integration: Integration,
        contacts: list[Contact],
        scheduled_event: ScheduledEvent,
        timezone: str,
        created_event: CreatedCalendarEvent | None,
    ) -> ConferenceLink | None:
        if not any(c.type == ContactType.ZOOM for c in contacts):
            return None

        access_token = await self.refresh_access_token(integration)

        start = scheduled_event.scheduled_time.start_timestamp
        end = scheduled_event.scheduled_time.end_timestamp
        payload = {
            "topic": scheduled_event.name or "Meeting",
            "type": SCHEDULED_MEETING,
            # wall-clock time in `timezone`
            "start_time": start.astimezone(ZoneInfo(timezone)).strftime("%Y-%m-%dT%H:%M:%S"),
            "duration": math.ceil((end - start).total_seconds() / 60),
            "timezone": timezone,
        }

        async def create() -> dict:
            response = await self._http_client.post(
                f"{self.config.api_base_url.rstrip('/')}/users/me/meetings",
                json=payload,
                headers={"Authorization": f"Bearer {access_token}"},
            )
            response.raise_for_status()
            return response.json()

        meeting = await retry_async(
            create,
            max_retries=self.retry.max_retries,
            base_delay=self.retry.base_delay,
            label="zoom.create_meeting",
        )
        logger.info("Created Zoom meeting %s for %s", meeting.get("id"), scheduled_event.uuid)
        return ConferenceLink(type=IntegrationVendor.ZOOM, service_name="Zoom", link=meeting["join_url"])

