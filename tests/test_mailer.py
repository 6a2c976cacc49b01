"""Tests for summary email composition and delivery error mapping."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from src.meetscribe.services.gsuite import CredentialRejectedError, SentEmailResult
from src.meetscribe.summaries.artifact import ATTACHMENT_FILENAME, GeneratedArtifact
from src.meetscribe.summaries.errors import DeliveryCredentialError, DeliveryError
from src.meetscribe.summaries.mailer import EMAIL_SUBJECT, SummaryMailer, compose_summary_email


@pytest.fixture
def artifact(tmp_path):
    return GeneratedArtifact(
        path=str(tmp_path / "summary.pdf"),
        content=b"%PDF-1.4 fake",
    )


class TestComposeSummaryEmail:
    def test_subject_body_and_attachment(self, artifact):
        message = compose_summary_email("a@b.com", "Line one\nLine <two>", artifact)

        assert message.to == "a@b.com"
        assert message.subject == EMAIL_SUBJECT
        assert message.body_text == "Line one\nLine <two>"
        assert "Line one<br/>Line &lt;two&gt;" in message.body_html
        assert len(message.attachments) == 1
        assert message.attachments[0].filename == ATTACHMENT_FILENAME
        assert message.attachments[0].content_type == "application/pdf"
        assert message.attachments[0].content == b"%PDF-1.4 fake"


class TestSummaryMailer:
    @pytest.mark.asyncio
    async def test_missing_credentials_is_401(self, artifact):
        gmail = MagicMock()
        gmail.send_email = AsyncMock()
        mailer = SummaryMailer(gmail)

        with pytest.raises(DeliveryCredentialError) as exc_info:
            await mailer.deliver("a@b.com", "s", artifact, None)

        assert exc_info.value.status_code == 401
        gmail.send_email.assert_not_called()

    @pytest.mark.asyncio
    async def test_rejected_credentials_is_401(self, artifact):
        gmail = MagicMock()
        gmail.send_email = AsyncMock(side_effect=CredentialRejectedError("expired"))

        with pytest.raises(DeliveryCredentialError, match="sign in again"):
            await SummaryMailer(gmail).deliver("a@b.com", "s", artifact, MagicMock())

    @pytest.mark.asyncio
    async def test_other_failure_is_500(self, artifact):
        gmail = MagicMock()
        gmail.send_email = AsyncMock(side_effect=OSError("connection reset"))

        with pytest.raises(DeliveryError) as exc_info:
            await SummaryMailer(gmail).deliver("a@b.com", "s", artifact, MagicMock())

        assert not isinstance(exc_info.value, DeliveryCredentialError)
        assert exc_info.value.status_code == 500

    @pytest.mark.asyncio
    async def test_success_returns_sent_result(self, artifact):
        sent = SentEmailResult(message_id="m-1", thread_id="t-1")
        gmail = MagicMock()
        gmail.send_email = AsyncMock(return_value=sent)

        result = await SummaryMailer(gmail).deliver("a@b.com", "s", artifact, MagicMock())

        assert result is sent
