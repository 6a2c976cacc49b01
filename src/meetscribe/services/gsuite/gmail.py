"""Async Gmail API service for sending emails with attachments.

All Google API calls are wrapped in asyncio.to_thread() to avoid
blocking the event loop.
"""

from __future__ import annotations

import asyncio
import base64
from email.message import EmailMessage as StdlibEmailMessage

import structlog
from google.oauth2.credentials import Credentials
from googleapiclient.errors import HttpError

from src.meetscribe.services.gsuite.auth import (
    CredentialRejectedError,
    GSuiteAuthManager,
    is_credential_rejection,
)
from src.meetscribe.services.gsuite.models import EmailMessage, SentEmailResult

logger = structlog.get_logger(__name__)


class GmailService:
    """Async wrapper around the Gmail API ``users.messages.send`` call."""

    def __init__(
        self,
        auth_manager: GSuiteAuthManager,
        default_sender: str = "",
    ) -> None:
        self._auth = auth_manager
        self._default_sender = default_sender

    def _build_mime_message(self, email: EmailMessage) -> str:
        """Build an RFC 2822 compliant MIME message.

        Text and HTML bodies become a multipart/alternative part; any
        attachments wrap it in multipart/mixed.

        Args:
            email: The EmailMessage with content, headers and attachments.

        Returns:
            Base64url-encoded raw message string for the Gmail API.
        """
        msg = StdlibEmailMessage()
        msg["To"] = email.to
        msg["Subject"] = email.subject

        sender = email.sender or self._default_sender
        if sender:
            msg["From"] = sender

        if email.body_text:
            msg.set_content(email.body_text)
            msg.add_alternative(email.body_html, subtype="html")
        else:
            msg.set_content(email.body_html, subtype="html")

        for attachment in email.attachments:
            maintype, _, subtype = attachment.content_type.partition("/")
            msg.add_attachment(
                attachment.content,
                maintype=maintype,
                subtype=subtype or "octet-stream",
                filename=attachment.filename,
            )

        return base64.urlsafe_b64encode(msg.as_bytes()).decode()

    async def send_email(
        self,
        email: EmailMessage,
        credentials: Credentials,
    ) -> SentEmailResult:
        """Send an email via Gmail API as the credential's owner.

        Args:
            email: The email message to send.
            credentials: OAuth credentials for the sending account.

        Returns:
            SentEmailResult with message_id, thread_id, and label_ids.

        Raises:
            CredentialRejectedError: If Google refuses the credential.
            HttpError: For any other Gmail API failure.
        """
        raw = self._build_mime_message(email)

        def _send() -> dict:
            service = self._auth.get_gmail_service(credentials)
            return (
                service.users()
                .messages()
                .send(userId="me", body={"raw": raw})
                .execute()
            )

        logger.info(
            "sending_email",
            to=email.to,
            subject=email.subject,
            attachments=len(email.attachments),
        )
        try:
            result = await asyncio.to_thread(_send)
        except HttpError as exc:
            if is_credential_rejection(exc):
                raise CredentialRejectedError("Gmail rejected the delivery credential") from exc
            raise

        return SentEmailResult(
            message_id=result.get("id", ""),
            thread_id=result.get("threadId", ""),
            label_ids=result.get("labelIds", []),
        )
