"""FastAPI application factory.

Creates the app with logging middleware, metrics middleware, CORS, Sentry,
a lifespan that wires the summary pipeline and transcription services
onto app.state, and the v1 API router.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.requests import Request
from fastapi.responses import Response

from src.meetscribe.api.middleware.logging import LoggingMiddleware, configure_structlog
from src.meetscribe.api.v1.router import router as v1_router
from src.meetscribe.config import Settings, get_settings
from src.meetscribe.core.monitoring import MetricsMiddleware, get_metrics_response, init_sentry
from src.meetscribe.services.gsuite import GmailService, GoogleCalendarService, GSuiteAuthManager
from src.meetscribe.services.llm import get_llm_service
from src.meetscribe.services.transcription import SegmentTranscriber
from src.meetscribe.summaries import SummaryPipeline
from src.meetscribe.summaries.artifact import ArtifactGenerator
from src.meetscribe.summaries.calendar_fanout import CalendarFanout
from src.meetscribe.summaries.deadlines import DeadlineExtractor
from src.meetscribe.summaries.mailer import SummaryMailer
from src.meetscribe.summaries.summarizer import Summarizer


def build_summary_pipeline(settings: Settings, llm_service: object) -> SummaryPipeline:
    """Wire the pipeline stages from settings."""
    auth_manager = GSuiteAuthManager(
        client_id=settings.GMAIL_CLIENT_ID,
        client_secret=settings.GMAIL_CLIENT_SECRET,
        refresh_token=settings.GMAIL_REFRESH_TOKEN,
        token_uri=settings.GOOGLE_TOKEN_URI,
    )
    return SummaryPipeline(
        summarizer=Summarizer(
            llm_service,
            chunk_size=settings.SUMMARY_CHUNK_SIZE,
            chunk_overlap=settings.SUMMARY_CHUNK_OVERLAP,
            temperature=settings.SUMMARY_TEMPERATURE,
        ),
        extractor=DeadlineExtractor(llm_service, temperature=settings.SUMMARY_TEMPERATURE),
        auth_manager=auth_manager,
        calendar_fanout=CalendarFanout(GoogleCalendarService(auth_manager)),
        artifact_generator=ArtifactGenerator(settings.get_artifact_dir()),
        mailer=SummaryMailer(GmailService(auth_manager, default_sender=settings.GMAIL_SENDER)),
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan: logging, Sentry and pipeline services."""
    log = structlog.get_logger(__name__)
    settings = get_settings()
    configure_structlog()

    if settings.SENTRY_DSN:
        init_sentry(dsn=settings.SENTRY_DSN, environment=settings.ENVIRONMENT.value)

    llm_service = get_llm_service()
    app.state.llm_service = llm_service
    app.state.summary_pipeline = build_summary_pipeline(settings, llm_service)
    app.state.segment_transcriber = SegmentTranscriber(llm_service, settings.get_upload_dir())

    log.info(
        "meetscribe.services_initialized",
        llm_configured=llm_service.router is not None,
        gmail_fallback=bool(settings.GMAIL_REFRESH_TOKEN),
    )

    yield

    log.info("meetscribe.shutdown")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Meetscribe API",
        version="0.1.0",
        description="Meeting transcript summarization with deadline extraction and delivery",
        lifespan=lifespan,
    )

    # Middleware is added in reverse order (last added = outermost)

    # CORS middleware
    if settings.CORS_ALLOWED_ORIGINS == "*":
        origins = ["*"]
    else:
        origins = [o.strip() for o in settings.CORS_ALLOWED_ORIGINS.split(",")]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=origins != ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Logging middleware (logs every request with timing)
    app.add_middleware(LoggingMiddleware)

    # Metrics middleware (outermost -- records Prometheus metrics for all requests)
    app.add_middleware(MetricsMiddleware)

    app.include_router(v1_router)

    # Prometheus metrics endpoint (infrastructure route, outside v1 router)
    @app.get("/metrics", include_in_schema=False)
    async def metrics(request: Request) -> Response:
        """Prometheus metrics endpoint."""
        return get_metrics_response()

    return app


# Module-level app for uvicorn
app = create_app()
