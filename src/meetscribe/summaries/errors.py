"""Fatal-request errors raised by the summary pipeline.

Each error carries the HTTP status the API layer answers with and the
pipeline stage that was aborted. Degraded conditions (unparseable
deadlines, failed calendar entries) never raise.
"""

from __future__ import annotations

from src.meetscribe.summaries.schemas import PipelineStage


class SummaryPipelineError(Exception):
    """Base class for errors that abort a summary request."""

    status_code = 500

    def __init__(self, message: str, stage: PipelineStage | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.stage = stage


class InvalidSummaryRequestError(SummaryPipelineError):
    """Required input (transcript or recipient) is missing."""

    status_code = 400


class SummarizationError(SummaryPipelineError):
    """The text-generation model failed while producing the summary."""


class DeliveryError(SummaryPipelineError):
    """The summary email could not be composed or sent."""


class DeliveryCredentialError(DeliveryError):
    """The delivery credential is missing, expired or refused."""

    status_code = 401
