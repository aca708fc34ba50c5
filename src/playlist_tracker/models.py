"""Value types produced by the resolver."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple


KIND_PLAYLIST = "playlist"
KIND_SINGLE = "single"


@dataclass(frozen=True)
class VideoRecord:
    """A normalized video entry."""

    id: str
    title: str
    source_url: str
    duration_seconds: Optional[int] = None
    thumbnail_url: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("VideoRecord.id must be non-empty.")

    def to_dict(self) -> Dict[str, Any]:
        """Return the JSON payload shape used by the browser client."""

        return {
            "id": self.id,
            "title": self.title,
            "durationSeconds": self.duration_seconds,
            "thumbnailUrl": self.thumbnail_url,
            "sourceUrl": self.source_url,
        }


@dataclass(frozen=True)
class PlaylistResult:
    """The assembled response for one resolved URL."""

    kind: str
    requested_url: str
    videos: Tuple[VideoRecord, ...] = ()
    title: Optional[str] = None
    truncated: bool = False
    playlist_id: Optional[str] = None

    def __post_init__(self) -> None:
        if self.kind not in (KIND_PLAYLIST, KIND_SINGLE):
            raise ValueError(f"Unknown result kind: {self.kind}")

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-serializable payload."""

        return {
            "kind": self.kind,
            "title": self.title,
            "playlistId": self.playlist_id,
            "requestedUrl": self.requested_url,
            "truncated": self.truncated,
            "videoCount": len(self.videos),
            "videos": [video.to_dict() for video in self.videos],
        }
