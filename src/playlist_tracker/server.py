"""FastMCP server entrypoint for playlist_tracker."""

from __future__ import annotations

from typing import Any, Dict, Optional

from playlist_tracker.auth import AuthManager
from playlist_tracker.config import Settings
from playlist_tracker.errors import PlaylistTrackerError
from playlist_tracker.extractor import (
    YtDlpProcessExtractor,
    check_url_support as ytdlp_check_url_support,
    resolve_ytdlp_command,
)
from playlist_tracker.logging_config import configure_logging
from playlist_tracker.resolver import PlaylistResolver


def create_server(
    settings: Optional[Settings] = None,
    resolver: Optional[PlaylistResolver] = None,
) -> Any:
    """Create and configure the FastMCP server instance."""

    try:
        from mcp.server.fastmcp import FastMCP
    except ImportError as exc:  # pragma: no cover
        raise ImportError(
            "mcp is required. Install with `pip install playlist-tracker`."
        ) from exc

    settings = settings or Settings()
    if resolver is None:
        extractor = YtDlpProcessExtractor(
            command=resolve_ytdlp_command(settings.ytdlp_path),
            auth_manager=AuthManager(settings.cookies_dir),
            max_output_bytes=settings.max_output_bytes,
        )
        resolver = PlaylistResolver.from_settings(settings, extractor)

    mcp = FastMCP("playlist-tracker")

    @mcp.tool()
    def check_url_support(url: str) -> Dict[str, Any]:
        """Check whether a URL is supported by yt-dlp extractors."""

        return ytdlp_check_url_support(url)

    @mcp.tool()
    def resolve_playlist(url: str, max_items: Optional[int] = None) -> Dict[str, Any]:
        """Resolve a YouTube playlist or video URL into a list of videos.

        The result has ``kind`` ("playlist" or "single"), ``title``,
        ``videos`` in playlist order, and ``truncated`` when the list was
        cut short by the size limit or the time budget.
        """

        try:
            return resolver.resolve(url, max_items).to_dict()
        except PlaylistTrackerError as exc:
            return exc.to_dict()

    return mcp


def run() -> None:
    """Run the MCP server with stdio transport."""

    settings = Settings()
    configure_logging(settings.log_level)
    mcp = create_server(settings)
    mcp.run()
