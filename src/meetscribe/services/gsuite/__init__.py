"""GSuite integration services for the Gmail and Calendar APIs.

Provides async-wrapped services for sending the summary email and
inserting deadline events with per-request OAuth credentials.
"""

from src.meetscribe.services.gsuite.auth import CredentialRejectedError, GSuiteAuthManager
from src.meetscribe.services.gsuite.calendar import GoogleCalendarService
from src.meetscribe.services.gsuite.gmail import GmailService
from src.meetscribe.services.gsuite.models import (
    CalendarEvent,
    CreatedEventResult,
    EmailAttachment,
    EmailMessage,
    SentEmailResult,
)

__all__ = [
    "CalendarEvent",
    "CreatedEventResult",
    "CredentialRejectedError",
    "EmailAttachment",
    "EmailMessage",
    "GmailService",
    "GoogleCalendarService",
    "GSuiteAuthManager",
    "SentEmailResult",
]
