import unittest

from playlist_tracker.urls import (
    INTENT_PLAYLIST,
    INTENT_SINGLE,
    classify_url,
    extract_playlist_id,
    extract_video_id,
    is_http_url,
)


class TestIsHttpUrl(unittest.TestCase):
    def test_accepts_http_and_https(self):
        self.assertTrue(is_http_url("https://www.youtube.com/watch?v=abc123"))
        self.assertTrue(is_http_url("http://youtu.be/abc123"))

    def test_rejects_other_inputs(self):
        self.assertFalse(is_http_url(""))
        self.assertFalse(is_http_url("youtube.com/watch?v=abc123"))
        self.assertFalse(is_http_url("javascript:alert(1)"))
        self.assertFalse(is_http_url("https://"))
        self.assertFalse(is_http_url("https://you tube.com/x"))
        self.assertFalse(is_http_url(None))


class TestExtractIds(unittest.TestCase):
    def test_video_id_forms(self):
        self.assertEqual(extract_video_id("https://youtube.com/watch?v=abc123"), "abc123")
        self.assertEqual(extract_video_id("https://m.youtube.com/watch?v=abc123&t=5"), "abc123")
        self.assertEqual(extract_video_id("https://youtu.be/abc123?si=x"), "abc123")
        self.assertEqual(extract_video_id("https://www.youtube.com/shorts/abc123"), "abc123")
        self.assertEqual(extract_video_id("https://www.youtube.com/embed/abc123"), "abc123")
        self.assertIsNone(extract_video_id("https://example.com/watch?v=abc123"))

    def test_playlist_id(self):
        self.assertEqual(
            extract_playlist_id("https://www.youtube.com/playlist?list=PL123"),
            "PL123",
        )
        self.assertIsNone(extract_playlist_id("https://www.youtube.com/watch?v=abc123"))


class TestClassifyUrl(unittest.TestCase):
    def test_watch_url_is_single(self):
        info = classify_url("https://youtube.com/watch?v=abc123")
        self.assertEqual(info.intent, INTENT_SINGLE)
        self.assertEqual(info.video_id, "abc123")

    def test_watch_url_with_list_is_playlist_candidate(self):
        info = classify_url("https://www.youtube.com/watch?v=abc123&list=PL9")
        self.assertEqual(info.intent, INTENT_PLAYLIST)
        self.assertEqual(info.video_id, "abc123")
        self.assertEqual(info.playlist_id, "PL9")

    def test_channel_page_is_playlist(self):
        info = classify_url("https://www.youtube.com/@somechannel/videos")
        self.assertEqual(info.intent, INTENT_PLAYLIST)
        self.assertIsNone(info.listing_url)
        self.assertEqual(info.extraction_url, info.url)

    def test_bare_channel_roots_list_the_videos_tab(self):
        cases = {
            "https://www.youtube.com/@somechannel": "https://www.youtube.com/@somechannel/videos",
            "https://www.youtube.com/channel/UCabc": "https://www.youtube.com/channel/UCabc/videos",
            "https://youtube.com/user/someone": "https://youtube.com/user/someone/videos",
        }
        for url, expected in cases.items():
            with self.subTest(url=url):
                info = classify_url(url)
                self.assertEqual(info.intent, INTENT_PLAYLIST)
                self.assertEqual(info.url, url)
                self.assertEqual(info.extraction_url, expected)

    def test_unrecognized(self):
        self.assertIsNone(classify_url("https://example.com/playlist?list=PL9"))
        self.assertIsNone(classify_url("https://www.youtube.com/"))
        self.assertIsNone(classify_url("https://www.youtube.com/watch"))
        self.assertIsNone(classify_url("not a url"))
