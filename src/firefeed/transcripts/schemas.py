"""Pydantic v2 schemas for the transcript domain.

Defines the value objects parsed from Fireflies GraphQL responses
(utterances, transcripts, summaries) and the display-shaped records served
by the API. Every model is frozen: objects are rebuilt per request and never
mutated after creation.

Upstream field names are kept on the wire via aliases (``speaker_name``,
``sentences``) so JSON produced by this service matches the shape Fireflies
returns, while Python code works with descriptive attribute names.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


# ── Enums ────────────────────────────────────────────────────────────────────


class GroupingMode(str, Enum):
    """Output mode of the speaker-grouping transform."""

    ITEMIZED = "itemized"
    JOINED = "joined"


# ── Transcript Models ────────────────────────────────────────────────────────


class Utterance(BaseModel):
    """One speaker's contiguous spoken segment."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    speaker: str = Field(default="", alias="speaker_name")
    text: str = ""

    @field_validator("speaker", "text", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value


class Transcript(BaseModel):
    """A recorded meeting: metadata plus its ordered utterances.

    ``date`` is the upstream timestamp in epoch milliseconds.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    title: str = ""
    date: int = 0
    utterances: list[Utterance] = Field(default_factory=list, alias="sentences")

    @field_validator("title", mode="before")
    @classmethod
    def _title_none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("date", mode="before")
    @classmethod
    def _coerce_millis(cls, value: Any) -> Any:
        # Fireflies sends epoch millis as a JSON number, occasionally as a float
        if value is None:
            return 0
        if isinstance(value, float):
            return int(value)
        return value

    @field_validator("utterances", mode="before")
    @classmethod
    def _sentences_none_to_empty(cls, value: Any) -> Any:
        return [] if value is None else value


class SpeakerTurn(BaseModel):
    """One or more consecutive utterances by the same speaker, one text each."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    speaker: str
    texts: list[str] = Field(default_factory=list)

    @property
    def text(self) -> str:
        """All texts of the turn joined with a single space."""
        return " ".join(self.texts)


class JoinedSpeakerTurn(BaseModel):
    """A speaker turn whose texts are merged into one space-joined string."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    speaker: str
    text: str


class TranscriptView(BaseModel):
    """Page model for a single transcript rendered as speaker turns.

    ``turns`` holds SpeakerTurn entries in itemized mode and
    JoinedSpeakerTurn entries in joined mode.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    date: int
    mode: GroupingMode
    turns: list[SpeakerTurn | JoinedSpeakerTurn] = Field(default_factory=list)


# ── Summary Models ───────────────────────────────────────────────────────────


class SummaryRecord(BaseModel):
    """Summary fields exactly as Fireflies names them (snake_case)."""

    model_config = ConfigDict(frozen=True)

    keywords: list[str] = Field(default_factory=list)
    action_items: str = ""
    outline: str | None = None
    shorthand_bullet: str = ""
    overview: str = ""
    bullet_gist: str = ""
    gist: str = ""
    short_summary: str = ""

    @field_validator("keywords", mode="before")
    @classmethod
    def _unique_keywords(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, (list, tuple, set)):
            # Set semantics, first-seen order kept for stable display
            return list(dict.fromkeys(str(v) for v in value))
        return value

    @field_validator(
        "action_items",
        "shorthand_bullet",
        "overview",
        "bullet_gist",
        "gist",
        "short_summary",
        mode="before",
    )
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value


class TranscriptSummary(BaseModel):
    """Display-shaped summary, serialized with camelCase keys."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    keywords: list[str] = Field(default_factory=list)
    action_items: str = ""
    outline: str | None = None
    shorthand_bullet: str = ""
    overview: str = ""
    bullet_gist: str = ""
    gist: str = ""
    short_summary: str = ""


class LatestTranscript(BaseModel):
    """Most recent transcript with its display-shaped summary."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    created_at: int
    summary: TranscriptSummary
