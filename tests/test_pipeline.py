"""End-to-end tests for the summary pipeline with mocked collaborators.

The text-generation model, Gmail and Calendar are doubles; chunking,
deadline parsing and PDF rendering run for real into a scratch directory.
"""

from __future__ import annotations

import asyncio
import json
from datetime import date
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.meetscribe.services.gsuite import CreatedEventResult, CredentialRejectedError, GSuiteAuthManager, SentEmailResult
from src.meetscribe.summaries import (
    DeliveryCredentialError,
    DeliveryError,
    InvalidSummaryRequestError,
    SummarizationError,
    SummaryDepth,
    SummaryPipeline,
    SummaryRequest,
)
from src.meetscribe.summaries.artifact import ArtifactGenerator
from src.meetscribe.summaries.calendar_fanout import CalendarFanout
from src.meetscribe.summaries.deadlines import DeadlineExtractor
from src.meetscribe.summaries.mailer import EMAIL_SUBJECT, SummaryMailer
from src.meetscribe.summaries.summarizer import Summarizer

TODAY = date(2026, 10, 16)
TRANSCRIPT = "Alice will send the report by next Friday."
DEADLINES_JSON = json.dumps(
    [{"summary": "Send the report", "description": "Alice sends the report.", "dueDate": "2026-10-23"}]
)


# ── Fixtures ─────────────────────────────────────────────────────────────────


@pytest.fixture
def calendar_service():
    service = MagicMock()
    service.create_event = AsyncMock(return_value=CreatedEventResult(event_id="evt-1"))
    return service


@pytest.fixture
def gmail_service():
    service = MagicMock()
    service.send_email = AsyncMock(return_value=SentEmailResult(message_id="msg-1", thread_id="t-1"))
    return service


@pytest.fixture
def llm(scripted_llm):
    return scripted_llm(
        {
            "summary.brief": "Alice will send the report next Friday.",
            "summary.map": "Alice owns the report.",
            "summary.reduce": "Detailed: Alice owns the report, due next Friday.",
            "deadlines": f"```json\n{DEADLINES_JSON}\n```",
        }
    )


@pytest.fixture
def build_pipeline(artifact_dir, calendar_service, gmail_service):
    def _build(llm, auth_manager: GSuiteAuthManager | None = None) -> SummaryPipeline:
        auth = auth_manager or GSuiteAuthManager()
        return SummaryPipeline(
            summarizer=Summarizer(llm),
            extractor=DeadlineExtractor(llm),
            auth_manager=auth,
            calendar_fanout=CalendarFanout(calendar_service),
            artifact_generator=ArtifactGenerator(str(artifact_dir)),
            mailer=SummaryMailer(gmail_service),
        )

    return _build


def _request(**overrides) -> SummaryRequest:
    values = {
        "transcript": TRANSCRIPT,
        "recipient": "alice@example.com",
        "delivery_credential": "ya29.valid",
        "depth": SummaryDepth.BRIEF,
    }
    values.update(overrides)
    return SummaryRequest(**values)


# ── Scenarios ────────────────────────────────────────────────────────────────


class TestSummaryPipeline:
    @pytest.mark.asyncio
    async def test_brief_transcript_with_one_deadline(
        self, build_pipeline, llm, calendar_service, gmail_service, artifact_dir
    ):
        result = await build_pipeline(llm).run(_request(), today=TODAY)

        assert result.summary
        assert result.deadlines_added == 1
        assert result.deadlines[0].due_date == "2026-10-23"
        assert result.message == "Summary sent! 1 deadline(s) were added to your calendar."
        assert llm.stages() == ["summary.brief", "deadlines"]

        event = calendar_service.create_event.await_args.args[0]
        assert event.day == date(2026, 10, 23)

        email = gmail_service.send_email.await_args.args[0]
        assert email.to == "alice@example.com"
        assert email.subject == EMAIL_SUBJECT
        assert email.body_text == result.summary
        assert email.attachments[0].content.startswith(b"%PDF")
        assert list(artifact_dir.iterdir()) == []

    @pytest.mark.asyncio
    async def test_empty_transcript_rejected_before_any_call(
        self, build_pipeline, llm, calendar_service, gmail_service, artifact_dir
    ):
        with pytest.raises(InvalidSummaryRequestError) as exc_info:
            await build_pipeline(llm).run(_request(transcript=""), today=TODAY)

        assert exc_info.value.status_code == 400
        assert llm.calls == []
        calendar_service.create_event.assert_not_awaited()
        gmail_service.send_email.assert_not_awaited()
        assert list(artifact_dir.iterdir()) == []

    @pytest.mark.asyncio
    async def test_missing_recipient_rejected(self, build_pipeline, llm):
        with pytest.raises(InvalidSummaryRequestError):
            await build_pipeline(llm).run(_request(recipient="  "), today=TODAY)
        assert llm.calls == []

    @pytest.mark.asyncio
    async def test_invalid_credential_is_401_after_all_stages(
        self, build_pipeline, llm, calendar_service, gmail_service, artifact_dir
    ):
        calendar_service.create_event.side_effect = CredentialRejectedError("expired")
        gmail_service.send_email.side_effect = CredentialRejectedError("expired")

        with pytest.raises(DeliveryCredentialError) as exc_info:
            await build_pipeline(llm).run(_request(delivery_credential="ya29.expired"), today=TODAY)

        assert exc_info.value.status_code == 401
        assert llm.stages() == ["summary.brief", "deadlines"]
        calendar_service.create_event.assert_awaited_once()
        gmail_service.send_email.assert_awaited_once()
        assert list(artifact_dir.iterdir()) == []

    @pytest.mark.asyncio
    async def test_no_credential_and_no_fallback_is_401(
        self, build_pipeline, llm, calendar_service, gmail_service, artifact_dir
    ):
        with pytest.raises(DeliveryCredentialError):
            await build_pipeline(llm).run(_request(delivery_credential=None), today=TODAY)

        calendar_service.create_event.assert_not_awaited()
        gmail_service.send_email.assert_not_awaited()
        assert list(artifact_dir.iterdir()) == []

    @pytest.mark.asyncio
    async def test_fallback_credential_used_without_bearer(self, build_pipeline, llm, gmail_service):
        auth = MagicMock(spec=GSuiteAuthManager)
        fallback = MagicMock(name="fallback-credentials")
        auth.get_credentials = AsyncMock(return_value=fallback)

        result = await build_pipeline(llm, auth).run(_request(delivery_credential=None), today=TODAY)

        assert result.deadlines_added == 1
        auth.get_credentials.assert_awaited_once_with(None)
        assert gmail_service.send_email.await_args.args[1] is fallback

    @pytest.mark.asyncio
    async def test_summarization_failure_is_fatal(
        self, build_pipeline, scripted_llm, calendar_service, gmail_service, artifact_dir
    ):
        llm = scripted_llm({"summary.brief": RuntimeError("provider down")})

        with pytest.raises(SummarizationError) as exc_info:
            await build_pipeline(llm).run(_request(), today=TODAY)

        assert exc_info.value.status_code == 500
        assert llm.stages() == ["summary.brief"]
        gmail_service.send_email.assert_not_awaited()
        assert list(artifact_dir.iterdir()) == []

    @pytest.mark.asyncio
    async def test_email_failure_is_fatal_even_with_calendar_success(
        self, build_pipeline, llm, calendar_service, gmail_service, artifact_dir
    ):
        gmail_service.send_email.side_effect = RuntimeError("smtp exploded")

        with pytest.raises(DeliveryError) as exc_info:
            await build_pipeline(llm).run(_request(), today=TODAY)

        assert exc_info.value.status_code == 500
        calendar_service.create_event.assert_awaited_once()
        assert list(artifact_dir.iterdir()) == []

    @pytest.mark.asyncio
    async def test_unparseable_deadlines_degrade_to_zero(
        self, build_pipeline, scripted_llm, calendar_service, gmail_service
    ):
        llm = scripted_llm({"deadlines": "No deadlines, sorry!"})

        result = await build_pipeline(llm).run(_request(), today=TODAY)

        assert result.deadlines_added == 0
        assert result.message == "Summary sent! 0 deadline(s) were added to your calendar."
        calendar_service.create_event.assert_not_awaited()
        gmail_service.send_email.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_partial_calendar_failures_reduce_count(self, build_pipeline, scripted_llm, calendar_service):
        items = [{"summary": f"Task {i}", "dueDate": "2026-10-2%d" % i} for i in range(3)]
        llm = scripted_llm({"deadlines": json.dumps(items)})
        calendar_service.create_event.side_effect = [
            CreatedEventResult(event_id="1"),
            RuntimeError("quota"),
            CreatedEventResult(event_id="3"),
        ]

        result = await build_pipeline(llm).run(_request(), today=TODAY)

        assert result.deadlines_added == 2

    @pytest.mark.asyncio
    async def test_detailed_depth_uses_map_reduce(self, build_pipeline, llm):
        result = await build_pipeline(llm).run(_request(depth=SummaryDepth.DETAILED), today=TODAY)

        assert result.summary.startswith("Detailed:")
        assert llm.stages() == ["summary.map", "summary.reduce", "deadlines"]

    @pytest.mark.asyncio
    async def test_concurrent_requests_do_not_collide(self, build_pipeline, llm, gmail_service, artifact_dir):
        pipeline = build_pipeline(llm)

        results = await asyncio.gather(
            pipeline.run(_request(recipient="a@example.com"), today=TODAY),
            pipeline.run(_request(recipient="b@example.com"), today=TODAY),
        )

        assert len({r.request_id for r in results}) == 2
        recipients = sorted(call.args[0].to for call in gmail_service.send_email.await_args_list)
        assert recipients == ["a@example.com", "b@example.com"]
        assert list(artifact_dir.iterdir()) == []

    @pytest.mark.asyncio
    async def test_path_like_request_id_still_delivers(self, build_pipeline, llm, gmail_service, artifact_dir):
        result = await build_pipeline(llm).run(_request(), today=TODAY, request_id="ab/cdefgh")

        assert result.request_id == "ab/cdefgh"
        gmail_service.send_email.assert_awaited_once()
        assert list(artifact_dir.iterdir()) == []
