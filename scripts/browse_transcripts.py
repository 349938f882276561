#!/usr/bin/env python3
"""CLI script to browse Fireflies transcripts incrementally.

Usage:
    python scripts/browse_transcripts.py
    python scripts/browse_transcripts.py --rounds 3 --batch-size 5 --attempts 3 --delay 2

Loads the newest batch, then calls "load more" ``--rounds`` times. When a
batch holds nothing new the browser looks further back after ``--delay``
seconds, up to ``--attempts`` fetches per round.

Reads FIREFLIES_API_KEY from the environment or the project .env file.
"""

from __future__ import annotations

import argparse
import asyncio
import os
import sys
from datetime import datetime, timezone

# Ensure project root is on sys.path so we can import src.firefeed
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from dotenv import load_dotenv  # noqa: E402

# Load .env from project root
load_dotenv(os.path.join(os.path.dirname(__file__), "..", ".env"))


def _print_transcripts(transcripts) -> None:
    for transcript in transcripts:
        created = datetime.fromtimestamp(transcript.date / 1000, tz=timezone.utc)
        print(f"  {created:%Y-%m-%d %H:%M}  {transcript.id}  {transcript.title}")


async def browse(rounds: int, batch_size: int, attempts: int, delay: float) -> int:
    """Run the browser and print the list after each round. Returns exit code."""
    from src.firefeed.api.middleware.logging import configure_structlog
    from src.firefeed.config import get_settings
    from src.firefeed.main import build_gateway
    from src.firefeed.transcripts.browser import LoadStatus, TranscriptBrowser
    from src.firefeed.transcripts.exceptions import FirefliesError

    settings = get_settings()
    configure_structlog(settings)

    gateway = build_gateway(settings)
    if gateway is None:
        print("Fireflies API key not configured (set FIREFLIES_API_KEY)", file=sys.stderr)
        return 1

    browser = TranscriptBrowser(
        gateway,
        batch_size=batch_size,
        max_attempts=attempts,
        retry_delay=delay,
    )
    try:
        transcripts = await browser.load_initial()
        print(f"Loaded {len(transcripts)} transcripts:")
        _print_transcripts(transcripts)

        for round_number in range(1, rounds + 1):
            result = await browser.load_more()
            print(f"\nRound {round_number}: {result.status.value} after {result.attempts} attempt(s)")
            if result.status != LoadStatus.ADDED:
                print(f"  {result.message}")
                break
            _print_transcripts(browser.transcripts)
    except FirefliesError as exc:
        print(f"Error: {exc.message}", file=sys.stderr)
        return 1
    finally:
        await browser.close()

    return 0


def main() -> None:
    parser = argparse.ArgumentParser(description="Browse Fireflies transcripts incrementally")
    parser.add_argument("--rounds", type=int, default=1, help="Number of 'load more' rounds")
    parser.add_argument("--batch-size", type=int, default=5, help="Transcripts per fetch")
    parser.add_argument("--attempts", type=int, default=3, help="Fetches per round before giving up")
    parser.add_argument("--delay", type=float, default=2.0, help="Seconds between attempts")
    args = parser.parse_args()

    if args.batch_size < 1 or args.attempts < 1:
        parser.error("--batch-size and --attempts must be at least 1")

    sys.exit(asyncio.run(browse(args.rounds, args.batch_size, args.attempts, args.delay)))


if __name__ == "__main__":
    main()
