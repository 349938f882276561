"""REST endpoints for meeting transcripts.

Every endpoint is a pass-through to the Fireflies GraphQL API with light
reshaping: newest-first ordering for lists, speaker grouping for the view,
and the camelCase summary projection. Nothing is cached or stored; each
request refetches.

Errors raised by the gateway propagate to the FirefliesError handler
registered in ``create_app``, which answers ``{"error": "<reason>"}``.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Path, Query

from src.firefeed.api.deps import require_gateway
from src.firefeed.transcripts.exceptions import TranscriptNotFoundError
from src.firefeed.transcripts.gateway import FirefliesGateway
from src.firefeed.transcripts.grouping import group_by_speaker
from src.firefeed.transcripts.merge import newest_first
from src.firefeed.transcripts.schemas import (
    GroupingMode,
    LatestTranscript,
    Transcript,
    TranscriptSummary,
    TranscriptView,
)
from src.firefeed.transcripts.summary import project_summary

router = APIRouter(prefix="/transcripts", tags=["transcripts"])

MAX_PAGE_SIZE = 50


async def build_transcript_view(
    gateway: FirefliesGateway,
    transcript_id: str,
    mode: GroupingMode,
) -> TranscriptView:
    """Fetch a transcript and group its utterances into speaker turns."""
    transcript = await gateway.get_transcript(transcript_id)
    return TranscriptView(
        id=transcript.id,
        title=transcript.title,
        date=transcript.date,
        mode=mode,
        turns=group_by_speaker(transcript.utterances, mode),
    )


@router.get("", response_model=list[Transcript])
async def list_transcripts(
    count: int = Query(5, ge=1, le=MAX_PAGE_SIZE, description="Transcripts to fetch"),
    skip: int = Query(0, ge=0, description="Transcripts to skip from the newest"),
    gateway: FirefliesGateway = Depends(require_gateway),
) -> list[Transcript]:
    """List transcripts, newest first. An empty account yields an empty list."""
    transcripts = await gateway.list_transcripts(limit=count, skip=skip)
    return newest_first(transcripts)


@router.get("/latest", response_model=LatestTranscript)
async def get_latest_transcript(
    gateway: FirefliesGateway = Depends(require_gateway),
) -> LatestTranscript:
    """Most recent transcript with its display-shaped summary."""
    return await gateway.get_latest_summary()


@router.get("/at/{position}", response_model=Transcript)
async def get_transcript_at(
    position: int = Path(..., ge=0, description="0-based position, newest first"),
    gateway: FirefliesGateway = Depends(require_gateway),
) -> Transcript:
    """Single transcript by position in the newest-first listing."""
    transcripts = await gateway.list_transcripts(limit=1, skip=position)
    if not transcripts:
        raise TranscriptNotFoundError()
    return transcripts[0]


@router.get("/{transcript_id}", response_model=Transcript)
async def get_transcript(
    transcript_id: str,
    gateway: FirefliesGateway = Depends(require_gateway),
) -> Transcript:
    return await gateway.get_transcript(transcript_id)


@router.get("/{transcript_id}/summary", response_model=TranscriptSummary)
async def get_transcript_summary(
    transcript_id: str,
    gateway: FirefliesGateway = Depends(require_gateway),
) -> TranscriptSummary:
    record = await gateway.get_summary(transcript_id)
    return project_summary(record)


@router.get("/{transcript_id}/view", response_model=TranscriptView)
async def get_transcript_view(
    transcript_id: str,
    mode: GroupingMode = Query(GroupingMode.ITEMIZED),
    gateway: FirefliesGateway = Depends(require_gateway),
) -> TranscriptView:
    """Transcript grouped into speaker turns for display."""
    return await build_transcript_view(gateway, transcript_id, mode)
