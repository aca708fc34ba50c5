"""Credential helpers for the yt-dlp command line."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from playlist_tracker.urls import is_youtube_host


YOUTUBE_COOKIE_FILE = "youtube_cookies.txt"
YOUTUBE_NETRC_FILE = "youtube.netrc"


class AuthManager:
    """Build yt-dlp CLI arguments for cookies and login credentials.

    Private and age-restricted playlists need either an exported cookie
    file or a netrc file with a ``machine youtube`` entry. Only file paths
    reach the command line; secrets never appear in the process table.
    """

    def __init__(self, cookies_dir: Path) -> None:
        self._cookies_dir = cookies_dir.expanduser()

    @property
    def cookies_dir(self) -> Path:
        """Directory holding exported cookie and netrc files."""

        return self._cookies_dir

    def get_cookiefile(self, url: str) -> Optional[Path]:
        """Return the YouTube cookie file path if it exists."""

        return self._youtube_file(url, YOUTUBE_COOKIE_FILE)

    def get_netrc_file(self, url: str) -> Optional[Path]:
        """Return the YouTube netrc file path if it exists."""

        return self._youtube_file(url, YOUTUBE_NETRC_FILE)

    def build_cli_args(self, url: str) -> List[str]:
        """Return ``--cookies``/``--netrc-location`` arguments."""

        args: List[str] = []
        cookiefile = self.get_cookiefile(url)
        if cookiefile:
            args += ["--cookies", str(cookiefile)]

        netrc_file = self.get_netrc_file(url)
        if netrc_file:
            args += ["--netrc", "--netrc-location", str(netrc_file)]

        return args

    def _youtube_file(self, url: str, filename: str) -> Optional[Path]:
        if not is_youtube_host(url):
            return None
        candidate = self._cookies_dir / filename
        if candidate.is_file():
            return candidate
        return None
