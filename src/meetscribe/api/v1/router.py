"""V1 API router -- aggregates all v1 endpoint routers."""

from __future__ import annotations

from fastapi import APIRouter

from src.meetscribe.api.v1 import health, summary, transcribe

router = APIRouter()

router.include_router(health.router)
router.include_router(summary.router)
router.include_router(transcribe.router)
