"""FastAPI surface for playlist resolution."""

from __future__ import annotations

import asyncio
import logging
import threading
from typing import Any, Dict, Optional

from fastapi import FastAPI, Query, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from playlist_tracker import __version__
from playlist_tracker.auth import AuthManager
from playlist_tracker.config import Settings
from playlist_tracker.errors import (
    REASON_EMPTY_RESULT,
    REASON_INVALID_URL,
    ExtractionCancelledError,
    PlaylistTrackerError,
    ResolutionError,
)
from playlist_tracker.extractor import YtDlpProcessExtractor, resolve_ytdlp_command
from playlist_tracker.logging_config import configure_logging
from playlist_tracker.resolver import PlaylistResolver
from playlist_tracker.urls import is_http_url

logger = logging.getLogger(__name__)


STATUS_CLIENT_CLOSED = 499
RETRY_AFTER_SECONDS = 30
DISCONNECT_POLL_SECONDS = 0.5

_STATUS_BY_REASON = {
    REASON_INVALID_URL: 400,
    REASON_EMPTY_RESULT: 404,
}


class ResolveRequest(BaseModel):
    """Inbound payload for ``POST /api/playlist``."""

    model_config = ConfigDict(populate_by_name=True)

    url: str
    max_items: Optional[int] = Field(default=None, ge=1, alias="maxItems")


def error_response(exc: PlaylistTrackerError) -> JSONResponse:
    """Map a domain error onto an HTTP response."""

    status_code = _STATUS_BY_REASON.get(exc.reason, 503)
    headers = None
    if exc.retryable:
        headers = {"Retry-After": str(RETRY_AFTER_SECONDS)}
    return JSONResponse(exc.to_dict(), status_code=status_code, headers=headers)


async def _resolve_until_disconnect(
    request: Request,
    resolver: PlaylistResolver,
    url: str,
    max_items: Optional[int],
) -> Dict[str, Any]:
    """Run the blocking resolver in the threadpool, canceling on disconnect."""

    cancel_event = threading.Event()
    task = asyncio.ensure_future(
        run_in_threadpool(
            resolver.resolve,
            url,
            max_items,
            cancel_event=cancel_event,
        )
    )
    while True:
        done, _ = await asyncio.wait({task}, timeout=DISCONNECT_POLL_SECONDS)
        if done:
            break
        if await request.is_disconnected():
            logger.info("Client disconnected; canceling resolution of %s", url)
            cancel_event.set()
    return task.result().to_dict()


async def handle_resolve(
    request: Request,
    url: str,
    max_items: Optional[int],
) -> JSONResponse:
    resolver: PlaylistResolver = request.app.state.resolver

    if not is_http_url(url):
        return error_response(
            ResolutionError(REASON_INVALID_URL, "url must be an absolute http(s) URL.")
        )

    try:
        payload = await _resolve_until_disconnect(request, resolver, url.strip(), max_items)
    except ExtractionCancelledError:
        return JSONResponse(
            {"error": "canceled", "detail": "Client closed request.", "retryable": True},
            status_code=STATUS_CLIENT_CLOSED,
        )
    except PlaylistTrackerError as exc:
        logger.info("Resolution of %s failed: %s (%s)", url, exc.reason, exc)
        return error_response(exc)

    logger.info(
        "Resolved %s: kind=%s videos=%d truncated=%s",
        url,
        payload["kind"],
        payload["videoCount"],
        payload["truncated"],
    )
    return JSONResponse(payload)


def create_app(
    settings: Optional[Settings] = None,
    resolver: Optional[PlaylistResolver] = None,
) -> FastAPI:
    """Create the HTTP application.

    A custom ``resolver`` replaces the yt-dlp backed one, which is how the
    tests run without network access.
    """

    settings = settings or Settings()
    extractor: Optional[YtDlpProcessExtractor] = None
    if resolver is None:
        extractor = YtDlpProcessExtractor(
            command=resolve_ytdlp_command(settings.ytdlp_path),
            auth_manager=AuthManager(settings.cookies_dir),
            max_output_bytes=settings.max_output_bytes,
        )
        resolver = PlaylistResolver.from_settings(settings, extractor)

    app = FastAPI(
        title="Playlist Tracker",
        version=__version__,
        description="Resolve YouTube playlists into watch-trackable video lists",
    )
    app.state.settings = settings
    app.state.resolver = resolver
    app.state.extractor = extractor

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    @app.get("/health")
    async def health() -> Dict[str, Any]:
        """Process liveness plus whether yt-dlp can be found."""

        extractor_status: Dict[str, Any] = {"configured": extractor is not None}
        if extractor is not None:
            extractor_status["command"] = extractor.command
            extractor_status["available"] = extractor.executable_available()
        return {
            "status": "ok",
            "version": __version__,
            "extractor": extractor_status,
        }

    @app.post("/api/playlist")
    async def resolve_playlist(request: Request, body: ResolveRequest) -> JSONResponse:
        return await handle_resolve(request, body.url, body.max_items)

    @app.get("/api/playlist")
    async def resolve_playlist_query(
        request: Request,
        url: str,
        max_items: Optional[int] = Query(default=None, ge=1, alias="maxItems"),
    ) -> JSONResponse:
        return await handle_resolve(request, url, max_items)

    return app


def run() -> None:
    """Serve the HTTP API with uvicorn."""

    import uvicorn

    settings = Settings()
    configure_logging(settings.log_level)
    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
