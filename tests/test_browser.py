"""Unit tests for the merge policy and the incremental TranscriptBrowser.

The browser gets an AsyncMock sleep so the retry policy runs without real
timers. Concurrency tests block the source on an asyncio.Event to hold a
load in flight.
"""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, call

import pytest

from src.firefeed.transcripts.browser import (
    EXHAUSTED_MESSAGE,
    RATE_LIMITED_MESSAGE,
    LoadStatus,
    TranscriptBrowser,
)
from src.firefeed.transcripts.exceptions import GraphQLError, RateLimitError
from src.firefeed.transcripts.merge import merge_transcripts, new_transcripts, newest_first
from tests.helpers import InMemoryGateway, make_transcript


def _ids(transcripts) -> list[str]:
    return [t.id for t in transcripts]


# ── Merge Policy ─────────────────────────────────────────────────────────────


class TestMergePolicy:
    def test_new_item_prepended_duplicate_dropped(self):
        held = [make_transcript("1"), make_transcript("2")]
        fetched = [make_transcript("2"), make_transcript("3")]

        assert _ids(merge_transcripts(held, fetched)) == ["3", "1", "2"]

    def test_held_order_preserved(self):
        held = [make_transcript(i) for i in ("5", "4", "9")]

        assert _ids(merge_transcripts(held, [make_transcript("1")])) == ["1", "5", "4", "9"]

    def test_duplicates_within_batch_keep_first(self):
        fetched = [make_transcript("a", title="first"), make_transcript("a", title="second")]

        merged = merge_transcripts([], fetched)

        assert _ids(merged) == ["a"]
        assert merged[0].title == "first"

    def test_nothing_new_leaves_list_unchanged(self):
        held = [make_transcript("1"), make_transcript("2")]

        assert _ids(merge_transcripts(held, [make_transcript("2")])) == ["1", "2"]
        assert new_transcripts(held, [make_transcript("1")]) == []

    def test_newest_first_sorts_by_date(self):
        transcripts = [
            make_transcript("old", date=1_000),
            make_transcript("new", date=3_000),
            make_transcript("mid", date=2_000),
        ]

        assert _ids(newest_first(transcripts)) == ["new", "mid", "old"]


# ── TranscriptBrowser ────────────────────────────────────────────────────────


@pytest.fixture
def sleep() -> AsyncMock:
    return AsyncMock()


def _browser(source, sleep, **kwargs) -> TranscriptBrowser:
    kwargs.setdefault("batch_size", 2)
    kwargs.setdefault("max_attempts", 3)
    return TranscriptBrowser(source, retry_delay=2.0, sleep=sleep, **kwargs)


class TestTranscriptBrowser:
    @pytest.mark.asyncio
    async def test_load_initial(self, sleep):
        source = InMemoryGateway([make_transcript(i) for i in ("a", "b", "c")])
        browser = _browser(source, sleep)

        loaded = await browser.load_initial()

        assert _ids(loaded) == ["a", "b"]
        assert source.calls == [("list_transcripts", {"limit": 2, "skip": 0})]

    @pytest.mark.asyncio
    async def test_load_more_adds_new_transcripts(self, sleep):
        source = InMemoryGateway([make_transcript(i) for i in ("b", "c")])
        browser = _browser(source, sleep)
        await browser.load_initial()
        source.transcripts = [make_transcript("a"), *source.transcripts]

        result = await browser.load_more()

        assert result.status == LoadStatus.ADDED
        assert result.added_ids == ["a"]
        assert result.attempts == 1
        assert _ids(browser.transcripts) == ["a", "b", "c"]
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_retries_with_increasing_skip_then_finds_older(self, sleep):
        source = InMemoryGateway([make_transcript(i) for i in ("a", "b", "c", "d", "e")])
        browser = _browser(source, sleep)
        await browser.load_initial()

        result = await browser.load_more()

        # skip 0 -> a, b already held; skip 2 -> c, d are new
        assert result.status == LoadStatus.ADDED
        assert result.added_ids == ["c", "d"]
        assert result.attempts == 2
        assert _ids(browser.transcripts) == ["c", "d", "a", "b"]
        assert [c[1]["skip"] for c in source.calls[1:]] == [0, 2]
        sleep.assert_awaited_once_with(2.0)
        assert browser.skip == 0

    @pytest.mark.asyncio
    async def test_exhaustion_reports_try_later(self, sleep):
        source = InMemoryGateway([make_transcript(i) for i in ("a", "b")])
        browser = _browser(source, sleep, max_attempts=3)
        await browser.load_initial()

        result = await browser.load_more()

        assert result.status == LoadStatus.EXHAUSTED
        assert result.message == EXHAUSTED_MESSAGE
        assert result.attempts == 3
        assert [c[1]["skip"] for c in source.calls[1:]] == [0, 2, 4]
        # Delay between attempts, none after the last one
        assert sleep.await_args_list == [call(2.0), call(2.0)]
        assert _ids(browser.transcripts) == ["a", "b"]

    @pytest.mark.asyncio
    async def test_rate_limit_stops_loop(self, sleep):
        source = InMemoryGateway([make_transcript("a")])
        browser = _browser(source, sleep)
        await browser.load_initial()
        source.error = RateLimitError("Too many requests")

        result = await browser.load_more()

        assert result.status == LoadStatus.RATE_LIMITED
        assert result.message == RATE_LIMITED_MESSAGE
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_other_errors_propagate(self, sleep):
        source = InMemoryGateway([make_transcript("a")])
        browser = _browser(source, sleep)
        source.error = GraphQLError("boom")

        with pytest.raises(GraphQLError):
            await browser.load_more()

        assert not browser.busy

    @pytest.mark.asyncio
    async def test_second_call_while_in_flight_is_noop(self, sleep):
        release = asyncio.Event()
        source = InMemoryGateway([make_transcript("a")])
        original = source.list_transcripts

        async def blocking_list(limit: int = 10, skip: int = 0):
            await release.wait()
            return await original(limit=limit, skip=skip)

        source.list_transcripts = blocking_list
        browser = _browser(source, sleep)

        first = asyncio.create_task(browser.load_more())
        await asyncio.sleep(0)
        assert browser.busy

        second = await browser.load_more()
        assert second.status == LoadStatus.BUSY

        release.set()
        result = await first

        assert result.status == LoadStatus.ADDED
        assert len(source.calls) == 1
        assert not browser.busy

    @pytest.mark.asyncio
    async def test_close_cancels_pending_retry(self):
        sleeping = asyncio.Event()

        async def slow_sleep(delay: float) -> None:
            sleeping.set()
            await asyncio.Event().wait()

        source = InMemoryGateway([make_transcript("a")])
        browser = TranscriptBrowser(source, batch_size=1, max_attempts=5, sleep=slow_sleep)
        await browser.load_initial()

        task = asyncio.create_task(browser.load_more())
        await sleeping.wait()
        await browser.close()
        result = await task

        assert result.status == LoadStatus.CLOSED
        # initial load + one attempt; no attempt fired after close
        assert len(source.calls) == 2
        assert browser.closed

        after = await browser.load_more()
        assert after.status == LoadStatus.CLOSED
        assert len(source.calls) == 2

    def test_rejects_invalid_policy(self):
        with pytest.raises(ValueError):
            TranscriptBrowser(InMemoryGateway(), batch_size=0)
        with pytest.raises(ValueError):
            TranscriptBrowser(InMemoryGateway(), max_attempts=0)
