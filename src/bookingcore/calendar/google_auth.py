"""Google OAuth credentials for a host's calendar integration."""

from __future__ import annotations

import logging
from collections.abc import Callable

from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials

from ..config import GoogleConfig
from ..models import Integration

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/calendar"]


def get_integration_credentials(
    integration: Integration,
    config: GoogleConfig,
    on_refresh: Callable[[Integration, Credentials], None] | None = None,
) -> Credentials:
    """Build (and refresh if needed) credentials from the tokens stored on an integration.

    Args:
        integration: The host's Google integration (tokens issued at sign-up).
        config: OAuth client settings.
        on_refresh: Called with the refreshed credentials so the caller can persist them.

    Returns:
        Valid Google Credentials object.
    """
    creds = Credentials(
        token=integration.access_token or None,
        refresh_token=integration.refresh_token or None,
        token_uri=config.token_uri,
        client_id=config.client_id or None,
        client_secret=config.client_secret or None,
        scopes=SCOPES,
    )

    if not creds.valid and creds.refresh_token:
        logger.info("Refreshing Google token for integration %s", integration.id)
        creds.refresh(Request())
        if on_refresh:
            on_refresh(integration, creds)

    return creds
