"""V1 API router -- aggregates all v1 endpoint routers."""

from __future__ import annotations

from fastapi import APIRouter

from src.firefeed.api.v1 import feed, transcripts

router = APIRouter(prefix="/api/v1")

router.include_router(transcripts.router)
router.include_router(feed.router)
