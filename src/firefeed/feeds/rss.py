"""RSS 2.0 feed builder for meeting transcripts.

Builds the XML document as a string. All free text (titles, utterances) is
wrapped in CDATA sections; any ``]]>`` inside the text is split across two
sections so the document stays well-formed whatever the transcript says.
Attribute and element values built from URLs are XML-escaped.

Item order follows the input order. Callers sort newest-first beforehand.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime, timezone
from email.utils import format_datetime
from typing import TYPE_CHECKING
from xml.sax.saxutils import escape, quoteattr

from src.firefeed.transcripts.grouping import flatten_transcript
from src.firefeed.transcripts.schemas import Transcript

if TYPE_CHECKING:
    from src.firefeed.config import Settings

DEFAULT_ITEM_LIMIT = 10
SUMMARY_UTTERANCES = 3
SUMMARY_DELIMITER = " | "
CONTENT_DELIMITER = "\n\n"

# Characters XML 1.0 forbids even inside CDATA, plus lone surrogates UTF-8 cannot encode
_INVALID_XML_CHARS = re.compile("[\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff]")


@dataclass(frozen=True)
class FeedChannel:
    """Channel-level metadata of the feed."""

    title: str = "Mars Project Transcripts"
    description: str = "Latest transcripts from Mars Project meetings"
    language: str = "en-us"
    author: str = "Mars Project Team"
    category: str = "Meeting Transcript"
    self_path: str = "/api/v1/rss"

    @classmethod
    def from_settings(cls, settings: Settings) -> FeedChannel:
        return cls(
            title=settings.FEED_TITLE,
            description=settings.FEED_DESCRIPTION,
            language=settings.FEED_LANGUAGE,
            author=settings.FEED_AUTHOR,
            category=settings.FEED_CATEGORY,
        )


def _clean(text: str) -> str:
    return _INVALID_XML_CHARS.sub("", text)


def _text(text: str) -> str:
    """Escape text for an element body outside CDATA."""
    return escape(_clean(text))


def cdata(text: str) -> str:
    """Wrap text in a CDATA section, splitting any embedded ``]]>``."""
    cleaned = _clean(text)
    return "<![CDATA[" + cleaned.replace("]]>", "]]]]><![CDATA[>") + "]]>"


def rfc2822(value: datetime) -> str:
    """Format a datetime as an RFC 2822 date in GMT."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return format_datetime(value.astimezone(timezone.utc), usegmt=True)


def millis_to_rfc2822(timestamp_ms: int) -> str:
    """Format an epoch-milliseconds timestamp as an RFC 2822 date in GMT."""
    return rfc2822(datetime.fromtimestamp(timestamp_ms / 1000, tz=timezone.utc))


def transcript_link(base_url: str, transcript_id: str) -> str:
    return f"{base_url.rstrip('/')}/transcript/{transcript_id}"


def _render_item(transcript: Transcript, base_url: str, channel: FeedChannel) -> str:
    link = transcript_link(base_url, transcript.id)
    summary = flatten_transcript(transcript.utterances[:SUMMARY_UTTERANCES], SUMMARY_DELIMITER)
    full_text = flatten_transcript(transcript.utterances, CONTENT_DELIMITER)
    description = f'{summary}... <a href="{link}">Read full transcript</a>'

    return (
        "    <item>\n"
        f"      <title>{cdata(transcript.title)}</title>\n"
        f"      <link>{_text(link)}</link>\n"
        f'      <guid isPermaLink="true">{_text(link)}</guid>\n'
        f"      <pubDate>{millis_to_rfc2822(transcript.date)}</pubDate>\n"
        f"      <description>{cdata(description)}</description>\n"
        f"      <content:encoded>{cdata(full_text)}</content:encoded>\n"
        f"      <author>{cdata(channel.author)}</author>\n"
        f"      <category>{cdata(channel.category)}</category>\n"
        "    </item>\n"
    )


def build_rss_feed(
    transcripts: Sequence[Transcript],
    base_url: str,
    *,
    channel: FeedChannel | None = None,
    limit: int = DEFAULT_ITEM_LIMIT,
    now: datetime | None = None,
) -> str:
    """Build an RSS 2.0 document for the given transcripts.

    Args:
        transcripts: Transcripts in the order items should appear.
        base_url: Public base URL; item links are ``{base_url}/transcript/{id}``.
        channel: Channel metadata, defaults to FeedChannel().
        limit: Maximum number of items.
        now: Build time for ``lastBuildDate``, defaults to the current UTC time.

    Returns:
        The XML document. An empty input yields a channel with no items.
    """
    channel = channel or FeedChannel()
    base = base_url.rstrip("/")
    build_date = rfc2822(now or datetime.now(timezone.utc))
    items = "".join(_render_item(t, base, channel) for t in transcripts[: max(limit, 0)])

    return (
        '<?xml version="1.0" encoding="UTF-8" ?>\n'
        '<rss version="2.0" xmlns:atom="http://www.w3.org/2005/Atom" '
        'xmlns:content="http://purl.org/rss/1.0/modules/content/">\n'
        "  <channel>\n"
        f"    <title>{cdata(channel.title)}</title>\n"
        f"    <link>{_text(base)}</link>\n"
        f"    <description>{cdata(channel.description)}</description>\n"
        f"    <language>{_text(channel.language)}</language>\n"
        f"    <lastBuildDate>{build_date}</lastBuildDate>\n"
        f"    <atom:link href={quoteattr(_clean(base + channel.self_path))} "
        'rel="self" type="application/rss+xml" />\n'
        f"{items}"
        "  </channel>\n"
        "</rss>\n"
    )
