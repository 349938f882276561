"""Merge policy for incrementally fetched transcript batches."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from src.firefeed.transcripts.schemas import Transcript


def new_transcripts(held: Iterable[Transcript], fetched: Iterable[Transcript]) -> list[Transcript]:
    """Return fetched transcripts whose id is not already held, deduplicated."""
    seen = {t.id for t in held}
    unseen: list[Transcript] = []
    for transcript in fetched:
        if transcript.id in seen:
            continue
        seen.add(transcript.id)
        unseen.append(transcript)
    return unseen


def merge_transcripts(held: Sequence[Transcript], fetched: Iterable[Transcript]) -> list[Transcript]:
    """Prepend unseen fetched transcripts to the held list.

    Held order is preserved and the result holds each id once, keeping the
    first occurrence. ``[1, 2]`` merged with ``[2, 3]`` gives ``[3, 1, 2]``.
    """
    merged: list[Transcript] = []
    seen: set[str] = set()
    for transcript in [*new_transcripts(held, fetched), *held]:
        if transcript.id in seen:
            continue
        seen.add(transcript.id)
        merged.append(transcript)
    return merged


def newest_first(transcripts: Iterable[Transcript]) -> list[Transcript]:
    """Sort transcripts by timestamp, most recent first (stable for ties)."""
    return sorted(transcripts, key=lambda t: t.date, reverse=True)
