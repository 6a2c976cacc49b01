"""Observability for the meetscribe service.

Metrics are exported under the ``meetscribe_`` prefix:

- HTTP traffic, labelled by route template rather than raw path
- model calls per pipeline stage (``summary.brief``, ``deadlines``, ...)
- summary request outcomes and per-item calendar outcomes
- uploaded audio segments handled by the speech-to-text endpoint

Sentry is optional and only initialised when a DSN is configured.
"""

from __future__ import annotations

import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from prometheus_client import CONTENT_TYPE_LATEST, REGISTRY, Counter, Histogram, generate_latest
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.routing import Match

NAMESPACE = "meetscribe"

# ── HTTP ─────────────────────────────────────────────────────────────────────

http_requests_total = Counter(
    "http_requests_total",
    "HTTP requests by route and status",
    ["method", "endpoint", "status_code"],
    namespace=NAMESPACE,
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency; summary requests span several model calls",
    ["method", "endpoint"],
    namespace=NAMESPACE,
    buckets=(0.05, 0.25, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 120.0),
)

# ── Model calls ──────────────────────────────────────────────────────────────

llm_requests_total = Counter(
    "llm_requests_total",
    "Model calls by model group, pipeline stage and status",
    ["model", "stage", "status"],
    namespace=NAMESPACE,
)

llm_request_duration_seconds = Histogram(
    "llm_request_duration_seconds",
    "Model call latency by pipeline stage",
    ["model", "stage"],
    namespace=NAMESPACE,
    buckets=(0.25, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0),
)

llm_tokens_used_total = Counter(
    "llm_tokens_used_total",
    "Tokens consumed by model group",
    ["model", "token_type"],
    namespace=NAMESPACE,
)

# ── Summary pipeline ─────────────────────────────────────────────────────────

summary_requests_total = Counter(
    "summary_requests_total",
    "Summary requests by outcome (success, invalid, error)",
    ["outcome"],
    namespace=NAMESPACE,
)

calendar_events_total = Counter(
    "calendar_events_total",
    "Deadline calendar entries by outcome (created, skipped, failed)",
    ["outcome"],
    namespace=NAMESPACE,
)

# ── Audio segments ───────────────────────────────────────────────────────────

transcription_segments_total = Counter(
    "transcription_segments_total",
    "Uploaded audio segments by outcome",
    ["outcome"],
    namespace=NAMESPACE,
)

transcription_segment_bytes = Histogram(
    "transcription_segment_bytes",
    "Size of uploaded audio segments",
    namespace=NAMESPACE,
    buckets=(1_000, 10_000, 100_000, 500_000, 1_000_000, 5_000_000, 25_000_000),
)


def _endpoint_label(request: Request) -> str:
    """Route template for the request (``/api/v1/summarize``), else its path."""
    for route in request.app.router.routes:
        match, _ = route.matches(request.scope)
        if match == Match.FULL:
            return getattr(route, "path", request.url.path)
    return request.url.path


class MetricsMiddleware(BaseHTTPMiddleware):
    """Records request count and latency; /metrics scrapes are not counted."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.url.path == "/metrics":
            return await call_next(request)

        started = time.perf_counter()
        response = await call_next(request)
        elapsed = time.perf_counter() - started

        endpoint = _endpoint_label(request)
        http_requests_total.labels(request.method, endpoint, str(response.status_code)).inc()
        http_request_duration_seconds.labels(request.method, endpoint).observe(elapsed)
        return response


@asynccontextmanager
async def track_llm_call(model: str, stage: str) -> AsyncGenerator[dict[str, Any], None]:
    """Time one model call and count it under its pipeline stage.

    Usage:
        async with track_llm_call("reasoning", "summary.reduce") as tracker:
            response = await router.acompletion(...)
            tracker["prompt_tokens"] = response.usage.prompt_tokens

    Token counts written into ``tracker`` are added to the token counter.
    Exceptions are counted with ``status="error"`` and re-raised.
    """
    tracker: dict[str, Any] = {"prompt_tokens": 0, "completion_tokens": 0}
    started = time.perf_counter()
    status = "success"
    try:
        yield tracker
    except Exception:
        status = "error"
        raise
    finally:
        llm_requests_total.labels(model, stage, status).inc()
        llm_request_duration_seconds.labels(model, stage).observe(time.perf_counter() - started)
        for token_type in ("prompt", "completion"):
            used = tracker.get(f"{token_type}_tokens") or 0
            if used:
                llm_tokens_used_total.labels(model, token_type).inc(used)


def record_segment(outcome: str, size: int) -> None:
    """Count one uploaded audio segment and observe its size."""
    transcription_segments_total.labels(outcome).inc()
    transcription_segment_bytes.observe(size)


def init_sentry(dsn: str, environment: str) -> None:
    """Initialise Sentry error reporting.

    Request bodies are stripped before events leave the process: they hold
    meeting transcripts and OAuth access tokens.
    """
    try:
        import sentry_sdk
        from sentry_sdk.integrations.fastapi import FastApiIntegration
        from sentry_sdk.integrations.starlette import StarletteIntegration
    except ImportError:
        import logging

        logging.getLogger(__name__).warning("sentry-sdk not installed, skipping Sentry init")
        return

    def strip_request_body(event: dict, hint: dict) -> dict:
        request = event.get("request")
        if isinstance(request, dict):
            request.pop("data", None)
            headers = request.get("headers")
            if isinstance(headers, dict):
                headers.pop("Authorization", None)
        return event

    sentry_sdk.init(
        dsn=dsn,
        environment=environment,
        traces_sample_rate=0.1 if environment == "production" else 1.0,
        send_default_pii=False,
        integrations=[StarletteIntegration(), FastApiIntegration()],
        before_send=strip_request_body,
    )


def get_metrics_response() -> Response:
    """Prometheus text exposition of the default registry."""
    return Response(content=generate_latest(REGISTRY), media_type=CONTENT_TYPE_LATEST)
