"""Tests for LLM call metrics and the /metrics exposition."""

from __future__ import annotations

import pytest
from prometheus_client import REGISTRY

from src.meetscribe.core.monitoring import get_metrics_response, track_llm_call


def _sample(name: str, labels: dict) -> float:
    return REGISTRY.get_sample_value(name, labels) or 0.0


class TestTrackLLMCall:
    @pytest.mark.asyncio
    async def test_success_records_count_and_tokens(self):
        labels = {"model": "reasoning", "stage": "test.success", "status": "success"}
        before = _sample("meetscribe_llm_requests_total", labels)
        tokens_before = _sample(
            "meetscribe_llm_tokens_used_total", {"model": "reasoning", "token_type": "prompt"}
        )

        async with track_llm_call("reasoning", "test.success") as tracker:
            tracker["prompt_tokens"] = 12

        assert _sample("meetscribe_llm_requests_total", labels) == before + 1
        assert (
            _sample("meetscribe_llm_tokens_used_total", {"model": "reasoning", "token_type": "prompt"})
            == tokens_before + 12
        )

    @pytest.mark.asyncio
    async def test_error_is_recorded_and_reraised(self):
        labels = {"model": "reasoning", "stage": "test.error", "status": "error"}
        before = _sample("meetscribe_llm_requests_total", labels)

        with pytest.raises(ValueError):
            async with track_llm_call("reasoning", "test.error"):
                raise ValueError("provider down")

        assert _sample("meetscribe_llm_requests_total", labels) == before + 1


def test_metrics_response_is_prometheus_text():
    response = get_metrics_response()

    assert response.media_type.startswith("text/plain")
    assert b"meetscribe_llm_requests_total" in response.body
