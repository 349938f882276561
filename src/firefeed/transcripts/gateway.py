"""Async gateway to the Fireflies.ai GraphQL API.

FirefliesGateway issues a fixed set of GraphQL queries over HTTPS with a
bearer token and returns parsed schema objects. It does not implement a
general GraphQL client: each operation owns its query string.

Transport failures (connect errors, timeouts) are retried with tenacity
(3 attempts, exponential backoff 1-10s). GraphQL ``errors[]`` responses and
HTTP error statuses are never retried here; they are mapped onto the
exceptions in ``transcripts.exceptions`` and surfaced to the caller.
Logging is best-effort: a failing logger never turns into a failed call.
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)
from tenacity.wait import wait_base

from src.firefeed.core.monitoring import track_fireflies_call
from src.firefeed.transcripts.exceptions import (
    RateLimitError,
    TranscriptNotFoundError,
    UpstreamHTTPError,
    graphql_error_from_payload,
)
from src.firefeed.transcripts.schemas import LatestTranscript, SummaryRecord, Transcript
from src.firefeed.transcripts.summary import parse_summary, project_summary

logger = structlog.get_logger(__name__)

DEFAULT_API_URL = "https://api.fireflies.ai/graphql"

_TRANSIENT_ERRORS = (httpx.ConnectError, httpx.TimeoutException)


def _log(level: str, event: str, **fields: Any) -> None:
    """Emit a structlog event; a failing logger never fails the call."""
    try:
        getattr(logger, level)(event, **fields)
    except Exception:  # noqa: BLE001
        return


# ── Queries ──────────────────────────────────────────────────────────────────

LIST_TRANSCRIPTS_QUERY = """
query GetTranscripts($limit: Int, $skip: Int) {
  transcripts(limit: $limit, skip: $skip) {
    id
    title
    date
    sentences {
      speaker_name
      text
    }
  }
}
"""

GET_TRANSCRIPT_QUERY = """
query GetTranscript($id: String!) {
  transcript(id: $id) {
    id
    title
    date
    sentences {
      speaker_name
      text
    }
  }
}
"""

LATEST_TRANSCRIPT_QUERY = """
query GetLatestTranscript {
  transcripts(limit: 1) {
    id
    title
    date
  }
}
"""

GET_SUMMARY_QUERY = """
query GetTranscriptSummary($transcriptId: String!) {
  transcript(id: $transcriptId) {
    summary {
      keywords
      action_items
      outline
      shorthand_bullet
      overview
      bullet_gist
      gist
      short_summary
    }
  }
}
"""


class FirefliesGateway:
    """Async client for the Fireflies GraphQL API.

    Opens a fresh httpx.AsyncClient per call so no connection state is
    shared between requests.

    Args:
        api_key: Fireflies API token, sent as ``Authorization: Bearer``.
        api_url: GraphQL endpoint URL.
        timeout: Per-call timeout in seconds.
        max_attempts: Attempts for transient transport failures.
        retry_wait: tenacity wait strategy between transport retries.
    """

    def __init__(
        self,
        api_key: str,
        api_url: str = DEFAULT_API_URL,
        timeout: float = 30.0,
        max_attempts: int = 3,
        retry_wait: wait_base | None = None,
    ) -> None:
        self._api_url = api_url
        self._timeout = timeout
        self._max_attempts = max_attempts
        self._retry_wait = retry_wait or wait_exponential(multiplier=1, min=1, max=10)
        self._headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }
        self._key_prefix = api_key[:8]

    def _client(self) -> httpx.AsyncClient:
        """Create a new httpx client with auth headers and timeout."""
        return httpx.AsyncClient(headers=self._headers, timeout=self._timeout)

    async def _send(self, body: dict[str, Any]) -> httpx.Response:
        """POST the GraphQL body, retrying transient transport failures."""
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self._max_attempts),
            wait=self._retry_wait,
            retry=retry_if_exception_type(_TRANSIENT_ERRORS),
            reraise=True,
        ):
            with attempt:
                async with self._client() as client:
                    return await client.post(self._api_url, json=body)
        raise AssertionError("unreachable")  # pragma: no cover

    async def execute(
        self,
        operation: str,
        query: str,
        variables: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Run one GraphQL query and return its ``data`` object.

        Args:
            operation: Short operation name used in logs and metrics.
            query: GraphQL query document.
            variables: Query variables.

        Returns:
            The ``data`` object of the response (empty dict if absent).

        Raises:
            RateLimitError: ``too_many_requests`` code or HTTP 429.
            GraphQLError: Any other GraphQL ``errors[]`` entry.
            UpstreamHTTPError: HTTP error status or transport failure.
        """
        async with track_fireflies_call(operation):
            _log(
                "debug",
                "fireflies.request",
                operation=operation,
                api_key_prefix=self._key_prefix,
                variables=variables or {},
            )
            try:
                response = await self._send({"query": query, "variables": variables or {}})
            except httpx.RequestError as exc:
                _log("error", "fireflies.transport_error", operation=operation, error=str(exc))
                raise UpstreamHTTPError(f"Failed to reach Fireflies API: {exc}") from exc

            payload = _json_or_none(response)

            if response.status_code >= 400:
                raise _http_error(response.status_code, payload, operation)

            if not isinstance(payload, dict):
                _log("error", "fireflies.invalid_response", operation=operation)
                raise UpstreamHTTPError("Invalid response from Fireflies API")

            if payload.get("errors"):
                error = graphql_error_from_payload(payload["errors"])
                _log(
                    "warning",
                    "fireflies.graphql_error",
                    operation=operation,
                    code=error.code,
                    message=error.message,
                )
                raise error

            _log("info", "fireflies.response", operation=operation, status=response.status_code)
            return payload.get("data") or {}

    # ── Operations ───────────────────────────────────────────────────────────

    async def list_transcripts(self, limit: int = 10, skip: int = 0) -> list[Transcript]:
        """List transcripts as Fireflies orders them (most recent first)."""
        data = await self.execute(
            "list_transcripts",
            LIST_TRANSCRIPTS_QUERY,
            {"limit": limit, "skip": skip},
        )
        return [Transcript.model_validate(item) for item in data.get("transcripts") or []]

    async def get_transcript(self, transcript_id: str) -> Transcript:
        """Fetch one transcript with all its sentences.

        Raises:
            TranscriptNotFoundError: Upstream returned null for the id.
        """
        data = await self.execute("get_transcript", GET_TRANSCRIPT_QUERY, {"id": transcript_id})
        item = data.get("transcript")
        if not item:
            raise TranscriptNotFoundError(transcript_id)
        return Transcript.model_validate(item)

    async def get_latest_transcript(self) -> Transcript:
        """Fetch metadata (no sentences) of the most recent transcript.

        Raises:
            TranscriptNotFoundError: The account has no transcripts.
        """
        data = await self.execute("get_latest_transcript", LATEST_TRANSCRIPT_QUERY)
        items = data.get("transcripts") or []
        if not items:
            raise TranscriptNotFoundError()
        return Transcript.model_validate(items[0])

    async def get_summary(self, transcript_id: str) -> SummaryRecord:
        """Fetch the upstream summary record for a transcript.

        Raises:
            SummaryNotFoundError: The transcript or its summary is null.
        """
        data = await self.execute(
            "get_summary",
            GET_SUMMARY_QUERY,
            {"transcriptId": transcript_id},
        )
        transcript = data.get("transcript") or {}
        return parse_summary(transcript.get("summary"), transcript_id)

    async def get_latest_summary(self) -> LatestTranscript:
        """Fetch the latest transcript, then its summary.

        Two sequential calls: the summary query needs the id from the first.
        """
        latest = await self.get_latest_transcript()
        record = await self.get_summary(latest.id)
        return LatestTranscript(
            id=latest.id,
            title=latest.title,
            created_at=latest.date,
            summary=project_summary(record),
        )


# ── Response Helpers ─────────────────────────────────────────────────────────


def _json_or_none(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None


def _http_error(status_code: int, payload: Any, operation: str) -> Exception:
    """Map an HTTP error status onto the error taxonomy."""
    errors = payload.get("errors") if isinstance(payload, dict) else None
    _log("warning", "fireflies.http_error", operation=operation, status=status_code)

    if errors:
        error = graphql_error_from_payload(errors)
        if isinstance(error, RateLimitError):
            return error
        if status_code == 429:
            return RateLimitError(error.message)
        return UpstreamHTTPError(error.message, status_code)

    if status_code == 429:
        return RateLimitError("Rate limit exceeded. Please try again later.")
    return UpstreamHTTPError(f"Fireflies API returned HTTP {status_code}", status_code)
