"""Syndication output for transcripts (RSS 2.0)."""
