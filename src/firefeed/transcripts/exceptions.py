"""Error taxonomy for Fireflies access.

Every failure carries a short human-readable message and the HTTP status the
API layer should answer with. The gateway raises these; routes let them
propagate to the exception handler registered in ``create_app``.
"""

from __future__ import annotations

NOT_CONFIGURED_MESSAGE = "Fireflies API key not configured"
RATE_LIMIT_CODE = "too_many_requests"


class FirefliesError(Exception):
    """Base class for all transcript access failures."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ConfigurationError(FirefliesError):
    """Required configuration (the API key) is missing. Never retried."""

    status_code = 500

    def __init__(self, message: str = NOT_CONFIGURED_MESSAGE) -> None:
        super().__init__(message)


class GraphQLError(FirefliesError):
    """The upstream answered with a GraphQL ``errors[]`` array."""

    status_code = 400

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.code = code


class RateLimitError(GraphQLError):
    """Upstream rate limit, either a ``too_many_requests`` code or HTTP 429."""

    status_code = 429

    def __init__(self, message: str, code: str | None = RATE_LIMIT_CODE) -> None:
        super().__init__(message, code)


class UpstreamHTTPError(FirefliesError):
    """Transport-level failure; forwards the upstream status when known."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.upstream_status = status_code
        self.status_code = status_code if status_code and status_code >= 400 else 500


class TranscriptNotFoundError(FirefliesError):
    """A required single-transcript lookup yielded nothing."""

    status_code = 404

    def __init__(self, transcript_id: str | None = None) -> None:
        message = (
            f"Transcript {transcript_id} not found"
            if transcript_id
            else "No transcripts found"
        )
        super().__init__(message)
        self.transcript_id = transcript_id


class SummaryNotFoundError(FirefliesError):
    """The upstream summary for a transcript is null."""

    status_code = 404

    def __init__(self, transcript_id: str) -> None:
        super().__init__(f"Summary not found for transcript {transcript_id}")
        self.transcript_id = transcript_id


def graphql_error_from_payload(errors: list[dict]) -> GraphQLError:
    """Build the exception for a GraphQL ``errors[]`` array.

    The first entry decides: its ``extensions.code`` selects rate limiting,
    its ``message`` is preserved verbatim.
    """
    first = errors[0] if errors else {}
    if not isinstance(first, dict):
        return GraphQLError(str(first))
    message = first.get("message") or "Unknown GraphQL error"
    code = (first.get("extensions") or {}).get("code")
    if code == RATE_LIMIT_CODE:
        return RateLimitError(message, code)
    return GraphQLError(message, code)
