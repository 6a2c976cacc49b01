"""Pydantic schemas for Gmail messages and Calendar events."""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel, Field


class EmailAttachment(BaseModel):
    """A file attached to an outgoing email."""

    filename: str
    content: bytes
    content_type: str = "application/octet-stream"


class EmailMessage(BaseModel):
    """Email message to send via Gmail API."""

    to: str
    subject: str
    body_html: str
    body_text: str | None = None
    sender: str | None = None
    attachments: list[EmailAttachment] = Field(default_factory=list)


class SentEmailResult(BaseModel):
    """Result from sending an email via Gmail API."""

    message_id: str
    thread_id: str
    label_ids: list[str] = Field(default_factory=list)


class CalendarEvent(BaseModel):
    """All-day event to insert via Calendar API."""

    summary: str
    description: str
    day: date

    def to_api_body(self) -> dict:
        """Calendar API v3 event resource; all-day events use ``date`` on both ends."""
        iso = self.day.isoformat()
        return {
            "summary": self.summary,
            "description": self.description,
            "start": {"date": iso},
            "end": {"date": iso},
        }


class CreatedEventResult(BaseModel):
    """Result from inserting a calendar event."""

    event_id: str
    html_link: str = ""
