import logging
import unittest

from playlist_tracker.config import Settings
from playlist_tracker.logging_config import build_logging_config, configure_logging
from playlist_tracker.server import create_server


class StubResolver:
    def resolve(self, url, max_items=None, *, cancel_event=None):
        raise AssertionError("not called")


class TestCreateServer(unittest.TestCase):
    def test_create_server_uses_given_resolver(self):
        server = create_server(Settings(_env_file=None), resolver=StubResolver())
        self.assertEqual(server.name, "playlist-tracker")


class TestLoggingConfig(unittest.TestCase):
    def test_level_is_applied_to_package_logger(self):
        config = build_logging_config("WARNING")
        self.assertEqual(config["loggers"]["playlist_tracker"]["level"], "WARNING")

        logger = configure_logging("DEBUG")
        self.assertEqual(logger.name, "playlist_tracker")
        self.assertEqual(logger.level, logging.DEBUG)
        self.assertTrue(
            logging.getLogger("playlist_tracker.resolver").isEnabledFor(logging.DEBUG)
        )
