"""Map raw extractor items onto :class:`VideoRecord`."""

from __future__ import annotations

import math
from typing import Any, Mapping, Optional, Tuple

from playlist_tracker.config import DEFAULT_PLACEHOLDER_THUMBNAIL
from playlist_tracker.models import VideoRecord
from playlist_tracker.urls import canonical_watch_url, extract_video_id, is_http_url


DEFAULT_MAX_THUMBNAIL_WIDTH = 1280


def normalize(
    raw: Mapping[str, Any],
    *,
    max_thumbnail_width: int = DEFAULT_MAX_THUMBNAIL_WIDTH,
    placeholder_template: str = DEFAULT_PLACEHOLDER_THUMBNAIL,
) -> Optional[VideoRecord]:
    """Build a VideoRecord, or return None when no video id can be found."""

    video_id = resolve_video_id(raw)
    if not video_id:
        return None

    title = raw.get("title")
    if not isinstance(title, str):
        title = ""

    return VideoRecord(
        id=video_id,
        title=title.strip(),
        duration_seconds=normalize_duration(raw.get("duration")),
        thumbnail_url=select_thumbnail(
            raw,
            video_id,
            max_width=max_thumbnail_width,
            placeholder_template=placeholder_template,
        ),
        source_url=resolve_source_url(raw, video_id),
    )


def resolve_video_id(raw: Mapping[str, Any]) -> Optional[str]:
    """Return the item's video id, falling back to parsing its URLs."""

    video_id = raw.get("id")
    if isinstance(video_id, str) and video_id.strip():
        return video_id.strip()

    for key in ("url", "webpage_url"):
        candidate = raw.get(key)
        if isinstance(candidate, str):
            parsed = extract_video_id(candidate)
            if parsed:
                return parsed
    return None


def normalize_duration(value: Any) -> Optional[int]:
    """Whole seconds, or None when the duration is unknown."""

    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if math.isnan(value) or math.isinf(value) or value < 0:
        return None
    return int(round(value))


def _thumbnail_rank(thumbnail: Mapping[str, Any]) -> Tuple[int, int, int, float]:
    width = thumbnail.get("width")
    height = thumbnail.get("height")
    preference = thumbnail.get("preference")
    sized = isinstance(width, int) and isinstance(height, int)
    return (
        1 if sized else 0,
        width if isinstance(width, int) else 0,
        height if isinstance(height, int) else 0,
        float(preference) if isinstance(preference, (int, float)) else 0.0,
    )


def select_thumbnail(
    raw: Mapping[str, Any],
    video_id: str,
    *,
    max_width: int = DEFAULT_MAX_THUMBNAIL_WIDTH,
    placeholder_template: str = DEFAULT_PLACEHOLDER_THUMBNAIL,
) -> str:
    """Pick the largest thumbnail no wider than ``max_width``.

    Thumbnails without dimensions rank below sized ones. When nothing
    usable is present a placeholder built from the video id is returned.
    """

    candidates = []
    thumbnails = raw.get("thumbnails")
    if isinstance(thumbnails, list):
        for thumbnail in thumbnails:
            if not isinstance(thumbnail, Mapping):
                continue
            url = thumbnail.get("url")
            if not isinstance(url, str) or not is_http_url(url):
                continue
            width = thumbnail.get("width")
            if isinstance(width, int) and width > max_width:
                continue
            candidates.append(thumbnail)

    if candidates:
        return max(candidates, key=_thumbnail_rank)["url"]

    fallback = raw.get("thumbnail")
    if isinstance(fallback, str) and is_http_url(fallback):
        return fallback

    return placeholder_template.format(id=video_id)


def resolve_source_url(raw: Mapping[str, Any], video_id: str) -> str:
    for key in ("webpage_url", "url"):
        candidate = raw.get(key)
        if isinstance(candidate, str) and is_http_url(candidate):
            return candidate
    return canonical_watch_url(video_id)
