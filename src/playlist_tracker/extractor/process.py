"""yt-dlp command line adapter with deadlines and bounded output."""

from __future__ import annotations

import collections
import importlib.util
import logging
import os
import shutil
import signal
import subprocess
import sys
import threading
import time
from pathlib import Path
from typing import IO, Callable, Deque, List, Optional, Sequence

from playlist_tracker.auth import AuthManager
from playlist_tracker.errors import (
    REASON_EMPTY_RESULT,
    REASON_INVALID_URL,
    REASON_PROCESS_FAILURE,
    REASON_TIMEOUT,
    ExtractionCancelledError,
    ExtractionError,
)
from playlist_tracker.extractor.base import Extraction, ItemRange, parse_json_lines
from playlist_tracker.urls import classify_url

logger = logging.getLogger(__name__)


_INVALID_URL_SIGNALS = (
    "unsupported url",
    "is not a valid url",
    "incomplete youtube id",
    "invalid url",
)
_STDERR_TAIL_LINES = 20


def resolve_ytdlp_command(explicit: Optional[Path] = None) -> List[str]:
    """Resolve the command prefix used to invoke yt-dlp.

    Priority:
    1) explicit path from configuration
    2) yt-dlp on PATH
    3) the installed yt_dlp package run with the current interpreter
    """

    if explicit is not None:
        return [str(explicit.expanduser())]

    which_path = shutil.which("yt-dlp")
    if which_path:
        return [which_path]

    return [sys.executable, "-m", "yt_dlp"]


class _StreamCollector(threading.Thread):
    """Drain a pipe into decoded lines, stopping at a byte limit."""

    def __init__(
        self,
        stream: IO[bytes],
        *,
        max_bytes: Optional[int] = None,
        tail_lines: Optional[int] = None,
    ) -> None:
        super().__init__(daemon=True)
        self._stream = stream
        self._max_bytes = max_bytes
        self.lines: Deque[str] = collections.deque(maxlen=tail_lines)
        self.bytes_read = 0
        self.overflowed = False

    def run(self) -> None:
        try:
            for raw_line in iter(self._stream.readline, b""):
                self.bytes_read += len(raw_line)
                if self._max_bytes is not None and self.bytes_read > self._max_bytes:
                    self.overflowed = True
                    break
                self.lines.append(raw_line.decode("utf-8", errors="replace"))
        except (OSError, ValueError):
            # Pipe closed underneath us after the process was killed.
            pass
        finally:
            try:
                self._stream.close()
            except OSError:
                pass


class YtDlpProcessExtractor:
    """Run yt-dlp as a subprocess and parse its line-delimited JSON."""

    def __init__(
        self,
        *,
        command: Optional[Sequence[str]] = None,
        auth_manager: Optional[AuthManager] = None,
        max_output_bytes: int = 16 * 1024 * 1024,
        terminate_grace_seconds: float = 2.0,
        poll_interval: float = 0.05,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._command = list(command) if command else resolve_ytdlp_command()
        self._auth_manager = auth_manager
        self._max_output_bytes = max_output_bytes
        self._terminate_grace = terminate_grace_seconds
        self._poll_interval = poll_interval
        self._clock = clock

    @property
    def command(self) -> List[str]:
        """Command prefix used for every invocation."""

        return list(self._command)

    def executable_available(self) -> bool:
        """Return True if the configured yt-dlp command looks runnable."""

        if self._command[1:3] == ["-m", "yt_dlp"]:
            return importlib.util.find_spec("yt_dlp") is not None

        executable = self._command[0]
        if os.path.sep in executable:
            return os.access(executable, os.X_OK)
        return shutil.which(executable) is not None

    def extract(
        self,
        url: str,
        *,
        timeout: float,
        items: Optional[ItemRange] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> Extraction:
        """Run a flattened listing, falling back to single-video mode.

        The fallback only applies when the window starts at the first item;
        an empty later window means the playlist has no more entries.
        """

        if classify_url(url) is None:
            raise ExtractionError(
                REASON_INVALID_URL,
                f"Not a YouTube video or playlist URL: {url}",
            )

        deadline = self._clock() + timeout
        extraction = self._run(self._flat_args(url, items), deadline, cancel_event)
        if extraction.line_count:
            if not extraction.items and (items is None or items.start == 1):
                if extraction.timed_out:
                    raise ExtractionError(
                        REASON_TIMEOUT,
                        "yt-dlp hit its deadline before producing a parsable item.",
                    )
                raise ExtractionError(
                    REASON_EMPTY_RESULT,
                    "yt-dlp output contained no parsable items.",
                )
            return extraction

        if items is not None and items.start > 1:
            return extraction

        logger.info("Flattened listing empty for %s; retrying as single video", url)
        extraction = self._run(self._single_args(url), deadline, cancel_event)
        if not extraction.items:
            raise ExtractionError(
                REASON_EMPTY_RESULT,
                f"Nothing resolvable at {url}",
            )
        return extraction

    def _flat_args(self, url: str, items: Optional[ItemRange]) -> List[str]:
        args = self.command + [
            "--flat-playlist",
            "--dump-json",
            "--ignore-errors",
            "--no-warnings",
        ]
        if items is not None:
            args += ["--playlist-items", items.to_cli()]
        args += self._auth_args(url)
        args += ["--", url]
        return args

    def _single_args(self, url: str) -> List[str]:
        args = self.command + ["--no-playlist", "--dump-json", "--no-warnings"]
        args += self._auth_args(url)
        args += ["--", url]
        return args

    def _auth_args(self, url: str) -> List[str]:
        if self._auth_manager is None:
            return []
        return self._auth_manager.build_cli_args(url)

    def _run(
        self,
        args: List[str],
        deadline: float,
        cancel_event: Optional[threading.Event],
    ) -> Extraction:
        if cancel_event is not None and cancel_event.is_set():
            raise ExtractionCancelledError("Canceled before start.")
        if self._clock() >= deadline:
            raise ExtractionError(REASON_TIMEOUT, "No time left to run yt-dlp.")

        try:
            proc = subprocess.Popen(
                args,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                **_new_process_group_kwargs(),
            )
        except OSError as exc:
            raise ExtractionError(
                REASON_PROCESS_FAILURE,
                f"Could not start yt-dlp: {exc}",
            ) from exc

        stdout = _StreamCollector(proc.stdout, max_bytes=self._max_output_bytes)
        stderr = _StreamCollector(proc.stderr, tail_lines=_STDERR_TAIL_LINES)
        stdout.start()
        stderr.start()

        timed_out = False
        try:
            while True:
                try:
                    proc.wait(timeout=self._poll_interval)
                    break
                except subprocess.TimeoutExpired:
                    pass
                if cancel_event is not None and cancel_event.is_set():
                    self._terminate(proc)
                    raise ExtractionCancelledError("Canceled by caller.")
                if stdout.overflowed:
                    logger.warning(
                        "yt-dlp output exceeded %d bytes; stopping process %d",
                        self._max_output_bytes,
                        proc.pid,
                    )
                    self._terminate(proc)
                    break
                if self._clock() >= deadline:
                    logger.warning("yt-dlp process %d hit its deadline", proc.pid)
                    timed_out = True
                    self._terminate(proc)
                    break
        finally:
            if proc.poll() is None:
                self._terminate(proc)
            stdout.join(timeout=self._terminate_grace)
            stderr.join(timeout=self._terminate_grace)

        extraction = parse_json_lines(list(stdout.lines))
        extraction.timed_out = timed_out
        extraction.output_capped = stdout.overflowed

        if timed_out and extraction.line_count == 0:
            raise ExtractionError(
                REASON_TIMEOUT,
                "yt-dlp produced no output before the deadline.",
            )

        returncode = proc.returncode
        if returncode and extraction.complete and not extraction.items:
            raise self._failure_from_stderr(returncode, list(stderr.lines))
        if returncode and extraction.complete:
            logger.warning(
                "yt-dlp exited with %d after producing %d items",
                returncode,
                len(extraction.items),
            )
        return extraction

    @staticmethod
    def _failure_from_stderr(returncode: int, stderr_lines: List[str]) -> ExtractionError:
        message = "".join(stderr_lines).strip()
        lowered = message.lower()
        if any(signal_text in lowered for signal_text in _INVALID_URL_SIGNALS):
            return ExtractionError(REASON_INVALID_URL, message)
        detail = message.splitlines()[-1] if message else "no error output"
        return ExtractionError(
            REASON_PROCESS_FAILURE,
            f"yt-dlp exited with status {returncode}: {detail}",
        )

    def _terminate(self, proc: subprocess.Popen) -> None:
        if proc.poll() is not None:
            return
        _signal_process(proc, signal.SIGTERM)
        try:
            proc.wait(timeout=self._terminate_grace)
        except subprocess.TimeoutExpired:
            logger.warning("yt-dlp process %d ignored SIGTERM; killing", proc.pid)
            _signal_process(proc, getattr(signal, "SIGKILL", signal.SIGTERM))
            proc.wait()


def _new_process_group_kwargs() -> dict:
    if os.name == "posix":
        return {"start_new_session": True}
    return {}


def _signal_process(proc: subprocess.Popen, sig: int) -> None:
    """Signal the whole process group so helper children die too."""

    if os.name == "posix":
        try:
            os.killpg(proc.pid, sig)
        except ProcessLookupError:
            pass
        return
    if sig == signal.SIGTERM:
        proc.terminate()
    else:
        proc.kill()
