"""URL validation and YouTube reference detection."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional
from urllib.parse import parse_qs, urlparse, urlunparse


INTENT_SINGLE = "single"
INTENT_PLAYLIST = "playlist"

_YOUTUBE_HOSTS = (
    "youtube.com",
    "youtube-nocookie.com",
    "youtu.be",
)
_VIDEO_ID_RE = re.compile(r"^[A-Za-z0-9_-]{6,}$")
_PATH_VIDEO_PREFIXES = ("shorts", "embed", "live", "v", "e")
_CHANNEL_PREFIXES = ("channel", "c", "user")


@dataclass(frozen=True)
class UrlInfo:
    """What a URL refers to, as far as can be told without network calls."""

    url: str
    intent: str
    video_id: Optional[str] = None
    playlist_id: Optional[str] = None
    listing_url: Optional[str] = None

    @property
    def extraction_url(self) -> str:
        """URL handed to the extractor; differs from ``url`` for channel roots."""

        return self.listing_url or self.url


def is_http_url(url: str) -> bool:
    """Return True for syntactically valid absolute http(s) URLs."""

    if not isinstance(url, str) or not url.strip():
        return False
    if any(ch.isspace() for ch in url.strip()):
        return False
    try:
        parsed = urlparse(url.strip())
    except ValueError:
        return False
    if parsed.scheme not in ("http", "https"):
        return False
    return bool(parsed.hostname)


def normalize_host(url: str) -> str:
    """Lower-cased host without credentials, port or ``www.``/``m.`` prefix."""

    host = (urlparse(url).hostname or "").lower()
    for prefix in ("www.", "m.", "music."):
        if host.startswith(prefix):
            host = host[len(prefix):]
    return host


def is_youtube_host(url: str) -> bool:
    host = normalize_host(url)
    return any(host == base or host.endswith("." + base) for base in _YOUTUBE_HOSTS)


def _valid_video_id(candidate: Optional[str]) -> Optional[str]:
    if candidate and _VIDEO_ID_RE.match(candidate):
        return candidate
    return None


def extract_video_id(url: str) -> Optional[str]:
    """Best-effort video id extraction from a YouTube URL."""

    if not is_youtube_host(url):
        return None
    parsed = urlparse(url)
    host = normalize_host(url)
    segments = [segment for segment in parsed.path.split("/") if segment]

    if host == "youtu.be":
        return _valid_video_id(segments[0]) if segments else None

    if segments and segments[0] == "watch":
        return _valid_video_id(parse_qs(parsed.query).get("v", [None])[0])

    if len(segments) >= 2 and segments[0] in _PATH_VIDEO_PREFIXES:
        return _valid_video_id(segments[1])

    return None


def extract_playlist_id(url: str) -> Optional[str]:
    """Return the ``list`` query parameter of a YouTube URL, if any."""

    if not is_youtube_host(url):
        return None
    playlist_id = parse_qs(urlparse(url).query).get("list", [None])[0]
    return playlist_id or None


def classify_url(url: str) -> Optional[UrlInfo]:
    """Classify a URL as a single video or playlist reference.

    Returns None when the URL is not recognized as a YouTube video or
    playlist reference. Channel and other listing pages (``/@name``,
    ``/channel/...``) are treated as playlists; a bare channel root is
    listed through its ``/videos`` tab so the listing yields videos rather
    than channel tabs.
    """

    if not is_http_url(url) or not is_youtube_host(url):
        return None

    url = url.strip()
    video_id = extract_video_id(url)
    playlist_id = extract_playlist_id(url)

    if playlist_id:
        return UrlInfo(
            url=url,
            intent=INTENT_PLAYLIST,
            video_id=video_id,
            playlist_id=playlist_id,
        )
    if video_id:
        return UrlInfo(url=url, intent=INTENT_SINGLE, video_id=video_id)

    segments = [s for s in urlparse(url).path.split("/") if s]
    if normalize_host(url) == "youtu.be" or not segments:
        return None
    if segments[0] in ("watch", "results", "feed") + _PATH_VIDEO_PREFIXES:
        return None
    return UrlInfo(
        url=url,
        intent=INTENT_PLAYLIST,
        listing_url=channel_videos_url(url, segments),
    )


def channel_videos_url(url: str, segments: List[str]) -> Optional[str]:
    """Return the ``/videos`` tab URL when ``url`` is a bare channel root."""

    is_handle_root = len(segments) == 1 and segments[0].startswith("@")
    is_channel_root = len(segments) == 2 and segments[0] in _CHANNEL_PREFIXES
    if not (is_handle_root or is_channel_root):
        return None
    parsed = urlparse(url)
    path = "/" + "/".join(segments + ["videos"])
    return urlunparse(parsed._replace(path=path))


def canonical_watch_url(video_id: str) -> str:
    return f"https://www.youtube.com/watch?v={video_id}"
