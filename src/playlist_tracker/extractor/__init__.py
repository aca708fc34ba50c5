"""Metadata extractors built on top of yt-dlp."""

from playlist_tracker.extractor.base import (
    Extraction,
    Extractor,
    ItemRange,
    RawItem,
    check_url_support,
    parse_json_lines,
)
from playlist_tracker.extractor.process import (
    YtDlpProcessExtractor,
    resolve_ytdlp_command,
)

__all__ = [
    "Extraction",
    "Extractor",
    "ItemRange",
    "RawItem",
    "YtDlpProcessExtractor",
    "check_url_support",
    "parse_json_lines",
    "resolve_ytdlp_command",
]
