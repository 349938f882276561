"""Public page routes.

``/transcript/{id}`` is the link target of every RSS item. It serves the
speaker-grouped view model of the transcript.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from src.firefeed.api.deps import require_gateway
from src.firefeed.api.v1.transcripts import build_transcript_view
from src.firefeed.transcripts.gateway import FirefliesGateway
from src.firefeed.transcripts.schemas import GroupingMode, TranscriptView

router = APIRouter(tags=["pages"])


@router.get("/transcript/{transcript_id}", response_model=TranscriptView)
async def transcript_page(
    transcript_id: str,
    mode: GroupingMode = Query(GroupingMode.ITEMIZED),
    gateway: FirefliesGateway = Depends(require_gateway),
) -> TranscriptView:
    return await build_transcript_view(gateway, transcript_id, mode)
