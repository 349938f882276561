"""Speaker grouping for transcript display.

Collapses a flat, ordered sequence of utterances into speaker turns.
Grouping is adjacency-only: a new turn starts whenever the speaker differs
from the immediately preceding utterance, so the same speaker separated by
someone else produces two turns.

Also holds the flattened ``"speaker: text"`` helpers. The flattened string is
a presentation convenience only; structured (speaker, text) pairs remain the
data model, and ``parse_flattened_line`` is lossy for speaker names that
themselves contain a colon.
"""

from __future__ import annotations

from collections.abc import Iterable

from src.firefeed.transcripts.schemas import (
    GroupingMode,
    JoinedSpeakerTurn,
    SpeakerTurn,
    Utterance,
)


def group_by_speaker(
    utterances: Iterable[Utterance],
    mode: GroupingMode = GroupingMode.ITEMIZED,
) -> list[SpeakerTurn] | list[JoinedSpeakerTurn]:
    """Group consecutive utterances by the same speaker.

    Args:
        utterances: Utterances in chronological order.
        mode: ``ITEMIZED`` keeps one text entry per utterance, ``JOINED``
            yields JoinedSpeakerTurn entries whose texts are merged with a
            single space.

    Returns:
        Speaker turns in order. Empty input yields an empty list.
    """
    groups: list[tuple[str, list[str]]] = []
    for utterance in utterances:
        if not groups or groups[-1][0] != utterance.speaker:
            groups.append((utterance.speaker, [utterance.text]))
        else:
            groups[-1][1].append(utterance.text)

    if mode == GroupingMode.JOINED:
        return [JoinedSpeakerTurn(speaker=speaker, text=" ".join(texts)) for speaker, texts in groups]
    return [SpeakerTurn(speaker=speaker, texts=texts) for speaker, texts in groups]


def format_utterance(utterance: Utterance) -> str:
    """Render an utterance as ``"speaker: text"``."""
    return f"{utterance.speaker}: {utterance.text}"


def flatten_transcript(utterances: Iterable[Utterance], separator: str = "\n") -> str:
    """Render utterances as ``"speaker: text"`` lines joined by ``separator``."""
    return separator.join(format_utterance(u) for u in utterances)


def parse_flattened_line(line: str) -> Utterance:
    """Split a legacy ``"speaker: text"`` line on its first colon.

    Lines without a colon become an utterance with an empty text.
    """
    speaker, _, text = line.partition(":")
    return Utterance(speaker=speaker.strip(), text=text.strip())
