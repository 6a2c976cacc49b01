"""Pydantic v2 schemas for the summary pipeline.

Defines the request handed to the pipeline, the deadline items extracted
from a transcript, the per-item calendar outcomes and the pipeline result.
"""

from __future__ import annotations

from datetime import date
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


# ── Enums ────────────────────────────────────────────────────────────────────


class SummaryDepth(str, Enum):
    """How thoroughly the transcript is summarized."""

    BRIEF = "brief"
    DETAILED = "detailed"


class PipelineStage(str, Enum):
    """Per-request state machine of the summary pipeline."""

    RECEIVED = "received"
    SUMMARIZED = "summarized"
    DEADLINES_EXTRACTED = "deadlines_extracted"
    CALENDAR_FANNED_OUT = "calendar_fanned_out"
    ARTIFACT_GENERATED = "artifact_generated"
    EMAILED = "emailed"
    RESPONDED = "responded"
    ERROR_RESPONDED = "error_responded"


# ── Request ──────────────────────────────────────────────────────────────────


class SummaryRequest(BaseModel):
    """One summarization invocation. Immutable once constructed."""

    model_config = ConfigDict(frozen=True)

    transcript: str
    recipient: str
    delivery_credential: str | None = None
    depth: SummaryDepth = SummaryDepth.DETAILED


# ── Deadlines ────────────────────────────────────────────────────────────────


class DeadlineItem(BaseModel):
    """An action item with a due date, as emitted by the extraction model.

    Every field is optional because the model output is untrusted; items
    missing a title or due date are skipped by the calendar fan-out.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    summary: str | None = None
    description: str | None = None
    due_date: str | None = Field(None, alias="dueDate")

    @property
    def is_schedulable(self) -> bool:
        return bool(self.summary and self.summary.strip() and self.due_date and self.due_date.strip())

    def due_day(self) -> date:
        """Parse ``due_date`` as an ISO calendar date.

        Raises:
            ValueError: If the due date is missing or not YYYY-MM-DD.
        """
        if not self.due_date:
            raise ValueError("deadline has no due date")
        return date.fromisoformat(self.due_date.strip())


class ParsedDeadlines(BaseModel):
    """Model output parsed into a list of deadline items (possibly empty)."""

    items: list[DeadlineItem] = Field(default_factory=list)


class UnparsedDeadlines(BaseModel):
    """Model output that could not be used; carries why and what was seen."""

    reason: str
    raw: str = ""

    @property
    def items(self) -> list[DeadlineItem]:
        return []


DeadlineExtraction = ParsedDeadlines | UnparsedDeadlines


# ── Side effects ─────────────────────────────────────────────────────────────


class CalendarOutcome(BaseModel):
    """Result of attempting one calendar entry."""

    item: DeadlineItem
    created: bool
    reason: str | None = None
    event_id: str | None = None


class FanoutResult(BaseModel):
    """Per-item calendar outcomes reduced to a success count."""

    outcomes: list[CalendarOutcome] = Field(default_factory=list)

    @property
    def created_count(self) -> int:
        return sum(1 for o in self.outcomes if o.created)


# ── Result ───────────────────────────────────────────────────────────────────


class SummaryResult(BaseModel):
    """Successful pipeline result."""

    request_id: str
    summary: str
    deadlines: list[DeadlineItem] = Field(default_factory=list)
    deadlines_added: int = 0

    @property
    def message(self) -> str:
        return f"Summary sent! {self.deadlines_added} deadline(s) were added to your calendar."
