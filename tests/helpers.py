"""Test helpers: Transcript factory, in-memory gateway double and settings builder."""

from __future__ import annotations

from src.firefeed.config import Settings
from src.firefeed.transcripts.exceptions import (
    FirefliesError,
    SummaryNotFoundError,
    TranscriptNotFoundError,
)
from src.firefeed.transcripts.schemas import (
    LatestTranscript,
    SummaryRecord,
    Transcript,
    Utterance,
)
from src.firefeed.transcripts.summary import project_summary

BASE_URL = "https://feed.example.com"


def make_transcript(
    transcript_id: str,
    date: int = 1_700_000_000_000,
    title: str | None = None,
    utterances: list[tuple[str, str]] | None = None,
) -> Transcript:
    """Build a Transcript from (speaker, text) pairs."""
    return Transcript(
        id=transcript_id,
        title=title if title is not None else f"Meeting {transcript_id}",
        date=date,
        utterances=[Utterance(speaker=s, text=t) for s, t in (utterances or [])],
    )


class InMemoryGateway:
    """In-memory FirefliesGateway for testing without the network.

    ``transcripts`` are kept in upstream order (newest first). Setting
    ``error`` makes every call raise it.
    """

    def __init__(
        self,
        transcripts: list[Transcript] | None = None,
        summaries: dict[str, SummaryRecord] | None = None,
    ) -> None:
        self.transcripts = list(transcripts or [])
        self.summaries = dict(summaries or {})
        self.error: FirefliesError | None = None
        self.calls: list[tuple[str, dict]] = []

    def _record(self, name: str, **kwargs) -> None:
        self.calls.append((name, kwargs))
        if self.error is not None:
            raise self.error

    async def list_transcripts(self, limit: int = 10, skip: int = 0) -> list[Transcript]:
        self._record("list_transcripts", limit=limit, skip=skip)
        return self.transcripts[skip : skip + limit]

    async def get_transcript(self, transcript_id: str) -> Transcript:
        self._record("get_transcript", transcript_id=transcript_id)
        for transcript in self.transcripts:
            if transcript.id == transcript_id:
                return transcript
        raise TranscriptNotFoundError(transcript_id)

    async def get_latest_transcript(self) -> Transcript:
        self._record("get_latest_transcript")
        if not self.transcripts:
            raise TranscriptNotFoundError()
        return self.transcripts[0]

    async def get_summary(self, transcript_id: str) -> SummaryRecord:
        self._record("get_summary", transcript_id=transcript_id)
        if transcript_id not in self.summaries:
            raise SummaryNotFoundError(transcript_id)
        return self.summaries[transcript_id]

    async def get_latest_summary(self) -> LatestTranscript:
        latest = await self.get_latest_transcript()
        record = await self.get_summary(latest.id)
        return LatestTranscript(
            id=latest.id,
            title=latest.title,
            created_at=latest.date,
            summary=project_summary(record),
        )


def make_settings(**overrides) -> Settings:
    """Settings isolated from the developer's environment and .env file."""
    defaults = {
        "FIREFLIES_API_KEY": "test-key-1234567890",
        "BASE_URL": BASE_URL,
    }
    defaults.update(overrides)
    return Settings(_env_file=None, **defaults)
