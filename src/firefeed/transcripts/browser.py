"""Incremental transcript browsing with a bounded retry policy.

TranscriptBrowser holds an ordered list of transcripts and pulls in newer
ones on demand. When a fetched batch contains no unseen ids it looks further
back (increasing ``skip`` by one batch) after a fixed delay, up to
``max_attempts`` fetches, and then reports exhaustion instead of failing.

The sleep function is injected so the policy can be tested without real
timers. Only one ``load_more`` runs at a time; a second call while one is in
flight is a no-op. ``close`` cancels the in-flight attempt and prevents any
further ones.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol

import structlog

from src.firefeed.transcripts.exceptions import RateLimitError
from src.firefeed.transcripts.merge import merge_transcripts, new_transcripts
from src.firefeed.transcripts.schemas import Transcript

logger = structlog.get_logger(__name__)

DEFAULT_BATCH_SIZE = 5
DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_RETRY_DELAY = 2.0

EXHAUSTED_MESSAGE = "No new transcripts found. Try again later."
RATE_LIMITED_MESSAGE = "Rate limit reached. Please wait a moment before trying again."


class TranscriptSource(Protocol):
    """Anything that can list transcripts by page (the gateway, an API client)."""

    async def list_transcripts(self, limit: int = ..., skip: int = ...) -> list[Transcript]: ...


class LoadStatus(str, Enum):
    ADDED = "added"
    EXHAUSTED = "exhausted"
    RATE_LIMITED = "rate_limited"
    BUSY = "busy"
    CLOSED = "closed"


@dataclass(frozen=True)
class LoadResult:
    """Outcome of one ``load_more`` call."""

    status: LoadStatus
    added_ids: list[str] = field(default_factory=list)
    attempts: int = 0
    message: str = ""


class TranscriptBrowser:
    """Keeps a newest-first transcript list and loads unseen transcripts.

    Args:
        source: Object exposing ``async list_transcripts(limit, skip)``.
        batch_size: Transcripts requested per fetch; also the skip step.
        max_attempts: Fetches per ``load_more`` before giving up.
        retry_delay: Seconds to wait between attempts.
        sleep: Awaitable sleep, ``asyncio.sleep`` by default.
    """

    def __init__(
        self,
        source: TranscriptSource,
        *,
        batch_size: int = DEFAULT_BATCH_SIZE,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        retry_delay: float = DEFAULT_RETRY_DELAY,
        sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
    ) -> None:
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self._source = source
        self._batch_size = batch_size
        self._max_attempts = max_attempts
        self._retry_delay = retry_delay
        self._sleep = sleep
        self._transcripts: list[Transcript] = []
        self._skip = 0
        self._in_flight: asyncio.Task[LoadResult] | None = None
        self._closed = False

    @property
    def transcripts(self) -> list[Transcript]:
        """Snapshot of the held transcripts, newest first."""
        return list(self._transcripts)

    @property
    def skip(self) -> int:
        """Offset the next fetch will start from."""
        return self._skip

    @property
    def busy(self) -> bool:
        return self._in_flight is not None and not self._in_flight.done()

    @property
    def closed(self) -> bool:
        return self._closed

    async def load_initial(self) -> list[Transcript]:
        """Replace the held list with the first batch."""
        batch = await self._source.list_transcripts(limit=self._batch_size, skip=0)
        self._transcripts = merge_transcripts([], batch)
        self._skip = 0
        logger.info("browser.initial_loaded", count=len(self._transcripts))
        return self.transcripts

    async def load_more(self) -> LoadResult:
        """Fetch until unseen transcripts arrive or the attempt budget runs out.

        Returns BUSY without fetching if a previous call is still running,
        CLOSED after ``close()``. Errors other than rate limiting propagate.
        """
        if self._closed:
            return LoadResult(LoadStatus.CLOSED, message="Browser closed")
        if self.busy:
            logger.debug("browser.load_more_ignored", reason="in_flight")
            return LoadResult(LoadStatus.BUSY, message="A load is already in progress")

        task = asyncio.ensure_future(self._load_more())
        self._in_flight = task
        try:
            return await asyncio.shield(task)
        except asyncio.CancelledError:
            if self._closed:
                return LoadResult(LoadStatus.CLOSED, message="Browser closed")
            task.cancel()
            raise
        finally:
            if task.done():
                self._in_flight = None

    async def close(self) -> None:
        """Stop any in-flight load; later calls return CLOSED."""
        self._closed = True
        task = self._in_flight
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                logger.info("browser.load_cancelled")
        self._in_flight = None

    async def _load_more(self) -> LoadResult:
        for attempt in range(1, self._max_attempts + 1):
            try:
                batch = await self._source.list_transcripts(
                    limit=self._batch_size,
                    skip=self._skip,
                )
            except RateLimitError as exc:
                logger.warning("browser.rate_limited", attempt=attempt, message=exc.message)
                return LoadResult(LoadStatus.RATE_LIMITED, attempts=attempt, message=RATE_LIMITED_MESSAGE)

            unseen = new_transcripts(self._transcripts, batch)
            if unseen:
                self._transcripts = merge_transcripts(self._transcripts, unseen)
                self._skip = 0
                logger.info("browser.transcripts_added", count=len(unseen), attempt=attempt)
                return LoadResult(
                    LoadStatus.ADDED,
                    added_ids=[t.id for t in unseen],
                    attempts=attempt,
                )

            self._skip += self._batch_size
            logger.info("browser.no_new_transcripts", attempt=attempt, next_skip=self._skip)
            if attempt < self._max_attempts:
                await self._sleep(self._retry_delay)

        return LoadResult(LoadStatus.EXHAUSTED, attempts=self._max_attempts, message=EXHAUSTED_MESSAGE)
