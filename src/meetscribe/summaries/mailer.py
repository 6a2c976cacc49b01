"""Summary delivery email.

Delivery is mandatory: a missing or refused credential raises
DeliveryCredentialError (401), anything else raises DeliveryError (500).
"""

from __future__ import annotations

from xml.sax.saxutils import escape

import structlog
from google.oauth2.credentials import Credentials

from src.meetscribe.services.gsuite import (
    CredentialRejectedError,
    EmailAttachment,
    EmailMessage,
    GmailService,
    SentEmailResult,
)
from src.meetscribe.summaries.artifact import GeneratedArtifact
from src.meetscribe.summaries.errors import DeliveryCredentialError, DeliveryError
from src.meetscribe.summaries.schemas import PipelineStage

logger = structlog.get_logger(__name__)

EMAIL_SUBJECT = "Your Meeting Summary & Action Items"


def compose_summary_email(
    recipient: str,
    summary: str,
    artifact: GeneratedArtifact,
) -> EmailMessage:
    """Build the delivery email: summary as text, PDF as attachment."""
    body_html = (
        "<p>Hello,</p>"
        "<p>Your meeting summary is attached as a PDF, and any deadlines found "
        "in the meeting have been added to your calendar.</p>"
        f"<p>{escape(summary).replace(chr(10), '<br/>')}</p>"
    )
    return EmailMessage(
        to=recipient,
        subject=EMAIL_SUBJECT,
        body_text=summary,
        body_html=body_html,
        attachments=[
            EmailAttachment(
                filename=artifact.filename,
                content=artifact.content,
                content_type=artifact.content_type,
            )
        ],
    )


class SummaryMailer:
    """Sends the summary email through Gmail with the request's credential."""

    def __init__(self, gmail_service: GmailService) -> None:
        self._gmail = gmail_service

    async def deliver(
        self,
        recipient: str,
        summary: str,
        artifact: GeneratedArtifact,
        credentials: Credentials | None,
    ) -> SentEmailResult:
        if credentials is None:
            raise DeliveryCredentialError(
                "No valid delivery credential was provided",
                stage=PipelineStage.EMAILED,
            )

        email = compose_summary_email(recipient, summary, artifact)
        try:
            return await self._gmail.send_email(email, credentials)
        except CredentialRejectedError as exc:
            raise DeliveryCredentialError(
                "The delivery credential was rejected. Please sign in again.",
                stage=PipelineStage.EMAILED,
            ) from exc
        except Exception as exc:
            logger.error("summary_email_failed", recipient=recipient, error=str(exc))
            raise DeliveryError(
                "Failed to send the summary email",
                stage=PipelineStage.EMAILED,
            ) from exc
