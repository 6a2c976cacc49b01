"""Google Calendar service for inserting deadline events.

Each insert builds its service from the request's credentials and runs
in a worker thread so the event loop is not blocked.
"""

from __future__ import annotations

import asyncio

import structlog
from google.oauth2.credentials import Credentials
from googleapiclient.errors import HttpError

from src.meetscribe.services.gsuite.auth import (
    CredentialRejectedError,
    GSuiteAuthManager,
    is_credential_rejection,
)
from src.meetscribe.services.gsuite.models import CalendarEvent, CreatedEventResult

logger = structlog.get_logger(__name__)


class GoogleCalendarService:
    """Google Calendar API v3 service for event creation.

    Args:
        auth_manager: GSuiteAuthManager instance (shared with Gmail).
        calendar_id: Target calendar; ``primary`` is the credential owner's.
    """

    def __init__(self, auth_manager: GSuiteAuthManager, calendar_id: str = "primary") -> None:
        self._auth_manager = auth_manager
        self._calendar_id = calendar_id

    async def create_event(
        self,
        event: CalendarEvent,
        credentials: Credentials,
    ) -> CreatedEventResult:
        """Insert one event.

        Raises:
            CredentialRejectedError: If Google refuses the credential.
            HttpError: For any other Calendar API failure.
        """

        def _insert() -> dict:
            service = self._auth_manager.get_calendar_service(credentials)
            return (
                service.events()
                .insert(calendarId=self._calendar_id, body=event.to_api_body())
                .execute()
            )

        try:
            result = await asyncio.to_thread(_insert)
        except HttpError as exc:
            if is_credential_rejection(exc):
                raise CredentialRejectedError("Calendar rejected the delivery credential") from exc
            raise

        logger.info(
            "calendar_event_created",
            event_id=result.get("id", ""),
            day=event.day.isoformat(),
        )
        return CreatedEventResult(
            event_id=result.get("id", ""),
            html_link=result.get("htmlLink", ""),
        )
