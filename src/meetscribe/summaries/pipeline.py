"""SummaryPipeline -- orchestrates one summarization request.

State machine per request:

    received -> summarized -> deadlines_extracted
             -> (calendar_fanned_out || artifact_generated -> emailed)
             -> responded

Summarization and email delivery are fatal on failure; deadline
extraction and individual calendar entries only degrade the result. The
orchestrator is the one place where a stage outcome becomes a fatal
abort, and the generated artifact is always removed before it returns.
"""

from __future__ import annotations

import asyncio
import uuid
from datetime import date

import structlog
from google.oauth2.credentials import Credentials

from src.meetscribe.core.monitoring import summary_requests_total
from src.meetscribe.services.gsuite import CredentialRejectedError, GSuiteAuthManager
from src.meetscribe.summaries.artifact import ArtifactGenerator
from src.meetscribe.summaries.calendar_fanout import CalendarFanout
from src.meetscribe.summaries.deadlines import DeadlineExtractor
from src.meetscribe.summaries.errors import (
    InvalidSummaryRequestError,
    SummaryPipelineError,
)
from src.meetscribe.summaries.mailer import SummaryMailer
from src.meetscribe.summaries.schemas import (
    DeadlineItem,
    FanoutResult,
    ParsedDeadlines,
    PipelineStage,
    SummaryRequest,
    SummaryResult,
)
from src.meetscribe.summaries.summarizer import Summarizer

logger = structlog.get_logger(__name__)


class SummaryPipeline:
    """Turns a finished transcript into a delivered summary.

    Args:
        summarizer: Produces the summary text.
        extractor: Extracts deadline items (best effort).
        auth_manager: Resolves the request's Google credentials.
        calendar_fanout: Creates one calendar entry per deadline.
        artifact_generator: Renders the scoped PDF artifact.
        mailer: Sends the delivery email.
    """

    def __init__(
        self,
        summarizer: Summarizer,
        extractor: DeadlineExtractor,
        auth_manager: GSuiteAuthManager,
        calendar_fanout: CalendarFanout,
        artifact_generator: ArtifactGenerator,
        mailer: SummaryMailer,
    ) -> None:
        self._summarizer = summarizer
        self._extractor = extractor
        self._auth = auth_manager
        self._fanout = calendar_fanout
        self._artifacts = artifact_generator
        self._mailer = mailer

    async def run(
        self,
        request: SummaryRequest,
        today: date | None = None,
        request_id: str | None = None,
    ) -> SummaryResult:
        """Execute every stage for one request.

        Args:
            request: The summary request.
            today: Date relative due dates are resolved against.
            request_id: Identifier for logs and the artifact name.

        Returns:
            SummaryResult with the summary and the calendar success count.

        Raises:
            SummaryPipelineError: A fatal stage failed; ``status_code``
                tells the caller how to answer.
        """
        rid = request_id or uuid.uuid4().hex
        log = logger.bind(request_id=rid)
        stage = PipelineStage.RECEIVED

        try:
            self._validate(request)
            log.info("pipeline_stage", stage=stage.value, depth=request.depth.value)

            summary = await self._summarizer.summarize(request.transcript, request.depth)
            stage = PipelineStage.SUMMARIZED
            log.info("pipeline_stage", stage=stage.value, summary_chars=len(summary))

            extraction = await self._extractor.extract(request.transcript, today or date.today())
            deadlines = extraction.items
            stage = PipelineStage.DEADLINES_EXTRACTED
            log.info(
                "pipeline_stage",
                stage=stage.value,
                deadlines=len(deadlines),
                parsed=isinstance(extraction, ParsedDeadlines),
            )

            credentials = await self._acquire_credentials(request.delivery_credential, log)

            fanout_result, delivery = await asyncio.gather(
                self._fan_out(deadlines, credentials, log),
                self._render_and_deliver(rid, request, summary, deadlines, credentials, log),
                return_exceptions=True,
            )
            if isinstance(fanout_result, BaseException):
                raise fanout_result
            if isinstance(delivery, BaseException):
                raise delivery
            stage = PipelineStage.EMAILED

        except SummaryPipelineError as exc:
            outcome = "invalid" if isinstance(exc, InvalidSummaryRequestError) else "error"
            summary_requests_total.labels(outcome=outcome).inc()
            log.warning(
                "pipeline_stage",
                stage=PipelineStage.ERROR_RESPONDED.value,
                failed_after=stage.value,
                status_code=exc.status_code,
                error=exc.message,
            )
            raise
        except Exception as exc:
            summary_requests_total.labels(outcome="error").inc()
            log.error(
                "pipeline_stage",
                stage=PipelineStage.ERROR_RESPONDED.value,
                failed_after=stage.value,
                error=str(exc),
                exc_info=True,
            )
            raise SummaryPipelineError("Failed to process the meeting summary", stage=stage) from exc

        result = SummaryResult(
            request_id=rid,
            summary=summary,
            deadlines=deadlines,
            deadlines_added=fanout_result.created_count,
        )
        summary_requests_total.labels(outcome="success").inc()
        log.info(
            "pipeline_stage",
            stage=PipelineStage.RESPONDED.value,
            deadlines_added=result.deadlines_added,
        )
        return result

    @staticmethod
    def _validate(request: SummaryRequest) -> None:
        if not request.transcript.strip() or not request.recipient.strip():
            raise InvalidSummaryRequestError(
                "Missing transcript or recipient",
                stage=PipelineStage.RECEIVED,
            )

    async def _acquire_credentials(
        self,
        access_token: str | None,
        log: structlog.stdlib.BoundLogger,
    ) -> Credentials | None:
        try:
            return await self._auth.get_credentials(access_token)
        except CredentialRejectedError as exc:
            log.warning("delivery_credential_unavailable", error=str(exc))
            return None

    async def _fan_out(
        self,
        deadlines: list[DeadlineItem],
        credentials: Credentials | None,
        log: structlog.stdlib.BoundLogger,
    ) -> FanoutResult:
        result = await self._fanout.create_events(deadlines, credentials)
        log.info(
            "pipeline_stage",
            stage=PipelineStage.CALENDAR_FANNED_OUT.value,
            created=result.created_count,
            attempted=len(deadlines),
        )
        return result

    async def _render_and_deliver(
        self,
        rid: str,
        request: SummaryRequest,
        summary: str,
        deadlines: list[DeadlineItem],
        credentials: Credentials | None,
        log: structlog.stdlib.BoundLogger,
    ) -> None:
        async with self._artifacts.generate(rid, summary, deadlines) as artifact:
            log.info(
                "pipeline_stage",
                stage=PipelineStage.ARTIFACT_GENERATED.value,
                artifact_bytes=len(artifact.content),
            )
            sent = await self._mailer.deliver(request.recipient, summary, artifact, credentials)
            log.info(
                "pipeline_stage",
                stage=PipelineStage.EMAILED.value,
                message_id=sent.message_id,
            )
