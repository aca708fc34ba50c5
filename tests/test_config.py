import os
import unittest
from unittest import mock

from playlist_tracker.config import Settings
from playlist_tracker.errors import (
    REASON_TIMEOUT,
    ExtractionError,
    ResolutionError,
)


class TestSettings(unittest.TestCase):
    def test_environment_overrides(self):
        env = {
            "PLAYLIST_TRACKER_CHUNK_SIZE": "25",
            "PLAYLIST_TRACKER_MAX_PLAYLIST_SIZE": "100",
            "PLAYLIST_TRACKER_LOG_LEVEL": "debug",
        }
        with mock.patch.dict(os.environ, env):
            settings = Settings(_env_file=None)
        self.assertEqual(settings.chunk_size, 25)
        self.assertEqual(settings.max_playlist_size, 100)
        self.assertEqual(settings.log_level, "DEBUG")


class TestErrors(unittest.TestCase):
    def test_resolution_error_from_extraction(self):
        error = ResolutionError.from_extraction(
            ExtractionError(REASON_TIMEOUT, "slow")
        )
        self.assertEqual(error.reason, REASON_TIMEOUT)
        self.assertEqual(
            error.to_dict(),
            {"error": REASON_TIMEOUT, "detail": "slow", "retryable": True},
        )

    def test_unknown_reason_is_rejected(self):
        with self.assertRaises(ValueError):
            ExtractionError("bogus")
