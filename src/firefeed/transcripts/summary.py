"""Summary parsing and projection.

``parse_summary`` turns the upstream ``transcript.summary`` payload into a
SummaryRecord, refusing a null summary. ``project_summary`` is the pure 1:1
rename into the display shape served by the API.
"""

from __future__ import annotations

from typing import Any

from src.firefeed.transcripts.exceptions import SummaryNotFoundError
from src.firefeed.transcripts.schemas import SummaryRecord, TranscriptSummary


def parse_summary(payload: dict[str, Any] | None, transcript_id: str) -> SummaryRecord:
    """Parse the ``summary`` object of a transcript.

    Raises:
        SummaryNotFoundError: The summary is absent or null.
    """
    if not payload:
        raise SummaryNotFoundError(transcript_id)
    return SummaryRecord.model_validate(payload)


def project_summary(record: SummaryRecord) -> TranscriptSummary:
    """Map an upstream summary record into its display shape.

    Keys are renamed (action_items -> actionItems, shorthand_bullet ->
    shorthandBullet, bullet_gist -> bulletGist, short_summary ->
    shortSummary) when serialized. A missing outline stays None.
    """
    return TranscriptSummary(
        keywords=list(record.keywords),
        action_items=record.action_items,
        outline=record.outline,
        shorthand_bullet=record.shorthand_bullet,
        overview=record.overview,
        bullet_gist=record.bullet_gist,
        gist=record.gist,
        short_summary=record.short_summary,
    )
