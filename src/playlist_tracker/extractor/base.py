"""Extractor interface and line-delimited JSON parsing."""

from __future__ import annotations

import json
import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Protocol

logger = logging.getLogger(__name__)


RawItem = Dict[str, Any]


@dataclass(frozen=True)
class ItemRange:
    """A 1-based inclusive window of playlist positions."""

    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start < 1 or self.end < self.start:
            raise ValueError(f"Invalid item range: {self.start}-{self.end}")

    @property
    def size(self) -> int:
        return self.end - self.start + 1

    def to_cli(self) -> str:
        return f"{self.start}-{self.end}"


@dataclass
class Extraction:
    """Items produced by one extractor invocation."""

    items: List[RawItem] = field(default_factory=list)
    line_count: int = 0
    item_offsets: List[int] = field(default_factory=list)
    timed_out: bool = False
    output_capped: bool = False
    playlist_title: Optional[str] = None
    playlist_id: Optional[str] = None
    playlist_count: Optional[int] = None

    def offsets(self) -> List[int]:
        """0-based output line offset of each item within this window."""

        if len(self.item_offsets) == len(self.items):
            return list(self.item_offsets)
        return list(range(len(self.items)))

    @property
    def complete(self) -> bool:
        """True when the process ran to completion within its limits."""

        return not (self.timed_out or self.output_capped)


class Extractor(Protocol):
    """Anything that can turn a URL into raw video items."""

    def extract(
        self,
        url: str,
        *,
        timeout: float,
        items: Optional[ItemRange] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> Extraction:
        ...


def parse_json_lines(lines: Iterable[str]) -> Extraction:
    """Parse line-delimited JSON, skipping lines that are not objects."""

    extraction = Extraction()
    for number, line in enumerate(lines, start=1):
        stripped = line.strip()
        if not stripped:
            continue
        extraction.line_count += 1
        try:
            item = json.loads(stripped)
        except ValueError as exc:
            logger.warning("Skipping malformed output line %d: %s", number, exc)
            continue
        if not isinstance(item, dict):
            logger.warning(
                "Skipping output line %d: expected object, got %s",
                number,
                type(item).__name__,
            )
            continue
        extraction.items.append(item)
        extraction.item_offsets.append(extraction.line_count - 1)
        _absorb_playlist_fields(extraction, item)
    return extraction


def _absorb_playlist_fields(extraction: Extraction, item: RawItem) -> None:
    if extraction.playlist_title is None:
        title = item.get("playlist_title") or item.get("playlist")
        if isinstance(title, str) and title.strip():
            extraction.playlist_title = title.strip()
    if extraction.playlist_id is None:
        playlist_id = item.get("playlist_id")
        if isinstance(playlist_id, str) and playlist_id:
            extraction.playlist_id = playlist_id
    if extraction.playlist_count is None:
        count = item.get("playlist_count") or item.get("n_entries")
        if isinstance(count, int) and count >= 0:
            extraction.playlist_count = count


def check_url_support(url: str) -> Dict[str, Any]:
    """Check if a URL looks supported by yt-dlp without network calls."""

    from yt_dlp.extractor import gen_extractors

    generic_match = None
    for extractor in gen_extractors():
        try:
            if extractor.suitable(url):
                if extractor.IE_NAME == "generic":
                    generic_match = extractor.IE_NAME
                    continue
                return {"supported": True, "extractor": extractor.IE_NAME}
        except Exception:
            logger.debug("Extractor %s failed suitability check", extractor)
            continue

    if generic_match is not None:
        return {"supported": True, "extractor": generic_match}

    return {"supported": False, "extractor": None}
