"""Turn a YouTube URL into a size-bounded :class:`PlaylistResult`."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, replace
from typing import Callable, Iterable, Optional, Tuple

from playlist_tracker.config import DEFAULT_PLACEHOLDER_THUMBNAIL, Settings
from playlist_tracker.errors import (
    REASON_EMPTY_RESULT,
    REASON_INVALID_URL,
    REASON_TIMEOUT,
    ExtractionCancelledError,
    ExtractionError,
    ResolutionError,
)
from playlist_tracker.extractor.base import (
    Extraction,
    Extractor,
    ItemRange,
    RawItem,
)
from playlist_tracker.models import (
    KIND_PLAYLIST,
    KIND_SINGLE,
    PlaylistResult,
    VideoRecord,
)
from playlist_tracker.normalizer import DEFAULT_MAX_THUMBNAIL_WIDTH, normalize
from playlist_tracker.urls import INTENT_SINGLE, UrlInfo, classify_url

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _ResolveProgress:
    """Accumulated state threaded through the chunk loop."""

    videos: Tuple[VideoRecord, ...] = ()
    next_start: int = 1
    lines_seen: int = 0
    chunks_run: int = 0
    truncated: bool = False
    finished: bool = False
    playlist_title: Optional[str] = None
    playlist_id: Optional[str] = None
    playlist_count: Optional[int] = None


class PlaylistResolver:
    """Resolve playlist and single-video URLs through an :class:`Extractor`.

    Playlists are listed one window of ``chunk_size`` items per extractor
    call, sequentially, within a total time budget. Only a failure of the
    first window is reported as an error; later failures and timeouts
    mark the result as truncated.
    """

    def __init__(
        self,
        extractor: Extractor,
        *,
        max_playlist_size: int = 200,
        default_max_items: Optional[int] = None,
        chunk_size: int = 50,
        chunk_timeout: float = 45.0,
        total_timeout: float = 120.0,
        max_thumbnail_width: int = DEFAULT_MAX_THUMBNAIL_WIDTH,
        placeholder_template: str = DEFAULT_PLACEHOLDER_THUMBNAIL,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if chunk_size < 1:
            raise ValueError("chunk_size must be at least 1.")
        if max_playlist_size < 1:
            raise ValueError("max_playlist_size must be at least 1.")
        self._extractor = extractor
        self._max_playlist_size = max_playlist_size
        self._default_max_items = default_max_items or max_playlist_size
        self._chunk_size = chunk_size
        self._chunk_timeout = chunk_timeout
        self._total_timeout = total_timeout
        self._max_thumbnail_width = max_thumbnail_width
        self._placeholder_template = placeholder_template
        self._clock = clock

    @classmethod
    def from_settings(cls, settings: Settings, extractor: Extractor) -> "PlaylistResolver":
        return cls(
            extractor,
            max_playlist_size=settings.max_playlist_size,
            default_max_items=settings.default_max_items,
            chunk_size=settings.chunk_size,
            chunk_timeout=settings.chunk_timeout_seconds,
            total_timeout=settings.total_timeout_seconds,
            max_thumbnail_width=settings.max_thumbnail_width,
            placeholder_template=settings.placeholder_thumbnail_template,
        )

    def effective_max_items(self, requested: Optional[int]) -> int:
        """Clamp a requested limit to ``[1, max_playlist_size]``."""

        if requested is None or requested < 1:
            requested = self._default_max_items
        return min(requested, self._max_playlist_size)

    def resolve(
        self,
        url: str,
        max_items: Optional[int] = None,
        *,
        cancel_event: Optional[threading.Event] = None,
    ) -> PlaylistResult:
        """Resolve ``url`` into a PlaylistResult.

        Raises ResolutionError when nothing usable could be produced and
        ExtractionCancelledError when ``cancel_event`` is set mid-flight.
        """

        info = classify_url(url)
        if info is None:
            raise ResolutionError(
                REASON_INVALID_URL,
                f"Not a YouTube video or playlist URL: {url}",
            )

        limit = self.effective_max_items(max_items)
        deadline = self._clock() + self._total_timeout

        if info.intent == INTENT_SINGLE:
            return self._resolve_single(info, deadline, cancel_event)
        return self._resolve_playlist(info, limit, deadline, cancel_event)

    def _resolve_single(
        self,
        info: UrlInfo,
        deadline: float,
        cancel_event: Optional[threading.Event],
    ) -> PlaylistResult:
        timeout = min(self._chunk_timeout, max(deadline - self._clock(), 0.0))
        try:
            extraction = self._extractor.extract(
                info.extraction_url,
                timeout=timeout,
                cancel_event=cancel_event,
            )
        except ExtractionError as exc:
            raise ResolutionError.from_extraction(exc) from exc

        for record in self._normalize_all(extraction.items):
            return self._single_result(info, record)

        raise ResolutionError(
            REASON_EMPTY_RESULT,
            f"No usable video found at {info.url}",
        )

    def _single_result(self, info: UrlInfo, record: VideoRecord) -> PlaylistResult:
        return PlaylistResult(
            kind=KIND_SINGLE,
            requested_url=info.url,
            title=record.title or None,
            videos=(record,),
            truncated=False,
        )

    def _resolve_playlist(
        self,
        info: UrlInfo,
        limit: int,
        deadline: float,
        cancel_event: Optional[threading.Event],
    ) -> PlaylistResult:
        progress = _ResolveProgress(playlist_id=info.playlist_id)

        while not progress.finished:
            if cancel_event is not None and cancel_event.is_set():
                raise ExtractionCancelledError("Canceled by caller.")

            remaining = deadline - self._clock()
            first = progress.chunks_run == 0
            if remaining <= 0 and not first:
                logger.warning(
                    "Time budget exhausted for %s after %d videos; skipping "
                    "remaining chunks",
                    info.url,
                    len(progress.videos),
                )
                progress = replace(progress, truncated=True, finished=True)
                break

            window = ItemRange(
                progress.next_start,
                min(progress.next_start + self._chunk_size - 1, limit + 1),
            )
            timeout = min(self._chunk_timeout, max(remaining, 0.0))

            try:
                extraction = self._extractor.extract(
                    info.extraction_url,
                    timeout=timeout,
                    items=window,
                    cancel_event=cancel_event,
                )
            except ExtractionError as exc:
                if first:
                    raise ResolutionError.from_extraction(exc) from exc
                progress = self._absorb_chunk_failure(
                    progress, window, limit, exc, info.url
                )
                continue

            if first and _looks_like_single_video(extraction):
                records = self._normalize_all(extraction.items)
                if records:
                    return self._single_result(info, records[0])

            progress = self._fold_chunk(progress, extraction, window, limit)

            if first and not progress.videos:
                reason = REASON_EMPTY_RESULT
                if extraction.timed_out:
                    reason = REASON_TIMEOUT
                raise ResolutionError(
                    reason,
                    f"First chunk of {info.url} produced no usable videos.",
                )

        return PlaylistResult(
            kind=KIND_PLAYLIST,
            requested_url=info.url,
            title=progress.playlist_title,
            videos=progress.videos,
            truncated=progress.truncated,
            playlist_id=progress.playlist_id,
        )

    def _fold_chunk(
        self,
        progress: _ResolveProgress,
        extraction: Extraction,
        window: ItemRange,
        limit: int,
    ) -> _ResolveProgress:
        allowed = limit - window.start + 1
        in_limit = [
            raw
            for offset, raw in zip(extraction.offsets(), extraction.items)
            if offset < allowed
        ]
        records = self._normalize_all(in_limit)
        videos = progress.videos + tuple(records)
        lines_seen = progress.lines_seen + extraction.line_count
        past_limit = extraction.line_count > allowed
        playlist_count = progress.playlist_count or extraction.playlist_count
        truncated = progress.truncated
        finished = False

        if extraction.timed_out:
            logger.warning(
                "Chunk %s of %s timed out with %d items",
                window.to_cli(),
                extraction.playlist_id or progress.playlist_id,
                len(records),
            )
            truncated = True
        if extraction.output_capped:
            truncated = True
            finished = True

        if past_limit or len(videos) > limit or lines_seen > limit:
            videos = videos[:limit]
            truncated = True
            finished = True
        elif extraction.complete and extraction.line_count < window.size:
            finished = True
        elif window.end > limit:
            finished = True

        next_start = window.end + 1
        if playlist_count is not None and next_start > playlist_count:
            finished = True

        return replace(
            progress,
            videos=videos,
            next_start=next_start,
            lines_seen=lines_seen,
            chunks_run=progress.chunks_run + 1,
            truncated=truncated,
            finished=finished,
            playlist_title=progress.playlist_title or extraction.playlist_title,
            playlist_id=progress.playlist_id or extraction.playlist_id,
            playlist_count=playlist_count,
        )

    @staticmethod
    def _absorb_chunk_failure(
        progress: _ResolveProgress,
        window: ItemRange,
        limit: int,
        exc: ExtractionError,
        url: str,
    ) -> _ResolveProgress:
        if exc.reason == REASON_EMPTY_RESULT:
            return replace(
                progress,
                chunks_run=progress.chunks_run + 1,
                finished=True,
            )

        logger.warning(
            "Chunk %s of %s failed (%s); continuing: %s",
            window.to_cli(),
            url,
            exc.reason,
            exc,
        )
        return replace(
            progress,
            next_start=window.end + 1,
            chunks_run=progress.chunks_run + 1,
            truncated=True,
            finished=exc.reason == REASON_INVALID_URL or window.end > limit,
        )

    def _normalize_all(self, raw_items: Iterable[RawItem]) -> list:
        records = []
        for raw in raw_items:
            record = normalize(
                raw,
                max_thumbnail_width=self._max_thumbnail_width,
                placeholder_template=self._placeholder_template,
            )
            if record is None:
                logger.debug("Dropping item without a video id: %r", raw.get("title"))
                continue
            records.append(record)
        return records


def _looks_like_single_video(extraction: Extraction) -> bool:
    return (
        len(extraction.items) == 1
        and extraction.line_count == 1
        and not extraction.playlist_title
    )
