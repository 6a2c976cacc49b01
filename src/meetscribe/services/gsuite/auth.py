"""Google OAuth credential resolution for Gmail and Calendar calls.

Each summary request carries its own bearer credential, so services are
built per request from that credential and never cached across requests.
When a request carries no credential the manager falls back to a
configured OAuth refresh token.
"""

from __future__ import annotations

import asyncio
from typing import Any

import structlog
from google.auth.exceptions import RefreshError
from google.auth.transport.requests import Request as GoogleAuthRequest
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

logger = structlog.get_logger(__name__)

GMAIL_SCOPES = [
    "https://www.googleapis.com/auth/gmail.send",
]

CALENDAR_SCOPES = [
    "https://www.googleapis.com/auth/calendar.events",
]


class CredentialRejectedError(Exception):
    """No usable Google credential, or Google refused the one supplied."""


def is_credential_rejection(exc: HttpError) -> bool:
    """True when a Google API error means the credential was refused."""
    return exc.resp is not None and exc.resp.status in (401, 403)


class GSuiteAuthManager:
    """Resolves OAuth credentials and builds Google API service objects.

    Args:
        client_id: OAuth client id for the refresh-token fallback.
        client_secret: OAuth client secret for the refresh-token fallback.
        refresh_token: Long-lived refresh token; empty disables the fallback.
        token_uri: Google token endpoint.
    """

    def __init__(
        self,
        client_id: str = "",
        client_secret: str = "",
        refresh_token: str = "",
        token_uri: str = "https://oauth2.googleapis.com/token",
    ) -> None:
        self._client_id = client_id
        self._client_secret = client_secret
        self._refresh_token = refresh_token
        self._token_uri = token_uri

    @property
    def has_fallback(self) -> bool:
        return bool(self._refresh_token and self._client_id and self._client_secret)

    async def get_credentials(self, access_token: str | None) -> Credentials:
        """Return credentials for one request.

        Args:
            access_token: Bearer token supplied by the caller, if any.

        Returns:
            OAuth credentials usable for Gmail and Calendar calls.

        Raises:
            CredentialRejectedError: If no token is supplied and the
                refresh-token fallback is missing or fails.
        """
        if access_token:
            return Credentials(token=access_token)

        if not self.has_fallback:
            raise CredentialRejectedError("No delivery credential supplied")

        credentials = Credentials(
            token=None,
            refresh_token=self._refresh_token,
            client_id=self._client_id,
            client_secret=self._client_secret,
            token_uri=self._token_uri,
            scopes=GMAIL_SCOPES + CALENDAR_SCOPES,
        )

        logger.info("refreshing_fallback_credential")
        try:
            await asyncio.to_thread(credentials.refresh, GoogleAuthRequest())
        except RefreshError as exc:
            logger.warning("fallback_credential_refresh_failed", error=str(exc))
            raise CredentialRejectedError("Stored refresh token was rejected") from exc

        return credentials

    def get_gmail_service(self, credentials: Credentials) -> Any:
        """Build a Gmail API v1 service bound to ``credentials``."""
        return build("gmail", "v1", credentials=credentials, cache_discovery=False)

    def get_calendar_service(self, credentials: Credentials) -> Any:
        """Build a Calendar API v3 service bound to ``credentials``."""
        return build("calendar", "v3", credentials=credentials, cache_discovery=False)
