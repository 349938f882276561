"""RSS feed endpoint.

Serves the latest transcripts as an RSS 2.0 document with a cache hint.
Errors are answered in plain text rather than JSON since feed readers
expect a non-JSON body.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import Response

from src.firefeed.api.deps import get_app_settings, require_gateway
from src.firefeed.api.errors import error_text
from src.firefeed.config import Settings
from src.firefeed.feeds.rss import FeedChannel, build_rss_feed
from src.firefeed.transcripts.exceptions import FirefliesError, TranscriptNotFoundError
from src.firefeed.transcripts.merge import newest_first

router = APIRouter(tags=["feed"])


@router.get("/rss", response_class=Response)
async def rss_feed(
    request: Request,
    settings: Settings = Depends(get_app_settings),
) -> Response:
    """RSS feed of the most recent transcripts, newest first.

    Returns 500 if the API key is not configured, 404 when there are no
    transcripts, and the mapped upstream status for Fireflies failures.
    """
    try:
        gateway = require_gateway(request)
        transcripts = await gateway.list_transcripts(limit=settings.FEED_ITEM_LIMIT)
    except FirefliesError as exc:
        return error_text(request, exc)

    if not transcripts:
        return error_text(request, TranscriptNotFoundError())

    document = build_rss_feed(
        newest_first(transcripts),
        settings.BASE_URL,
        channel=FeedChannel.from_settings(settings),
        limit=settings.FEED_ITEM_LIMIT,
    )
    return Response(
        content=document,
        media_type="application/xml",
        headers={"Cache-Control": f"public, max-age={settings.FEED_CACHE_MAX_AGE}"},
    )
