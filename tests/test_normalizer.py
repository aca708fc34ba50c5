import unittest

from playlist_tracker.normalizer import (
    normalize,
    normalize_duration,
    select_thumbnail,
)


class TestNormalize(unittest.TestCase):
    def test_full_item(self):
        record = normalize(
            {
                "id": "abc123",
                "title": "  A title ",
                "duration": 212.6,
                "webpage_url": "https://www.youtube.com/watch?v=abc123",
                "thumbnails": [
                    {"url": "https://i.ytimg.com/vi/abc123/default.jpg", "width": 120, "height": 90},
                ],
            }
        )
        self.assertEqual(record.id, "abc123")
        self.assertEqual(record.title, "A title")
        self.assertEqual(record.duration_seconds, 213)
        self.assertEqual(record.source_url, "https://www.youtube.com/watch?v=abc123")
        self.assertEqual(
            record.thumbnail_url,
            "https://i.ytimg.com/vi/abc123/default.jpg",
        )

    def test_missing_id_is_dropped(self):
        self.assertIsNone(normalize({"title": "No id", "duration": 10}))
        self.assertIsNone(normalize({"id": "   ", "title": "Blank id"}))

    def test_id_recovered_from_url(self):
        record = normalize({"url": "https://youtu.be/xyz789abc", "title": "t"})
        self.assertEqual(record.id, "xyz789abc")
        self.assertEqual(record.source_url, "https://youtu.be/xyz789abc")

    def test_missing_title_becomes_empty_string(self):
        record = normalize({"id": "abc123"})
        self.assertEqual(record.title, "")
        self.assertEqual(
            record.source_url,
            "https://www.youtube.com/watch?v=abc123",
        )

    def test_relative_url_falls_back_to_canonical_watch_url(self):
        record = normalize({"id": "abc123", "url": "abc123"})
        self.assertEqual(
            record.source_url,
            "https://www.youtube.com/watch?v=abc123",
        )


class TestNormalizeDuration(unittest.TestCase):
    def test_unknown_durations_stay_unknown(self):
        self.assertIsNone(normalize_duration(None))
        self.assertIsNone(normalize_duration("120"))
        self.assertIsNone(normalize_duration(-1))
        self.assertIsNone(normalize_duration(True))
        self.assertIsNone(normalize_duration(float("nan")))

    def test_zero_is_preserved(self):
        self.assertEqual(normalize_duration(0), 0)

    def test_float_is_rounded(self):
        self.assertEqual(normalize_duration(59.4), 59)


class TestSelectThumbnail(unittest.TestCase):
    THUMBNAILS = [
        {"url": "https://i.ytimg.com/vi/abc/default.jpg", "width": 120, "height": 90},
        {"url": "https://i.ytimg.com/vi/abc/hqdefault.jpg", "width": 480, "height": 360},
        {"url": "https://i.ytimg.com/vi/abc/maxresdefault.jpg", "width": 1920, "height": 1080},
        {"url": "https://i.ytimg.com/vi/abc/unsized.jpg"},
    ]

    def test_largest_under_limit_wins(self):
        url = select_thumbnail({"thumbnails": self.THUMBNAILS}, "abc", max_width=1280)
        self.assertEqual(url, "https://i.ytimg.com/vi/abc/hqdefault.jpg")

    def test_higher_limit_allows_larger(self):
        url = select_thumbnail({"thumbnails": self.THUMBNAILS}, "abc", max_width=4000)
        self.assertEqual(url, "https://i.ytimg.com/vi/abc/maxresdefault.jpg")

    def test_unsized_thumbnail_used_when_alone(self):
        url = select_thumbnail(
            {"thumbnails": [{"url": "https://i.ytimg.com/vi/abc/unsized.jpg"}]},
            "abc",
        )
        self.assertEqual(url, "https://i.ytimg.com/vi/abc/unsized.jpg")

    def test_top_level_thumbnail_fallback(self):
        url = select_thumbnail(
            {"thumbnail": "https://i.ytimg.com/vi/abc/sddefault.jpg"},
            "abc",
        )
        self.assertEqual(url, "https://i.ytimg.com/vi/abc/sddefault.jpg")

    def test_placeholder_is_deterministic(self):
        first = select_thumbnail({}, "abc123")
        second = select_thumbnail({"thumbnails": "garbage"}, "abc123")
        self.assertEqual(first, "https://i.ytimg.com/vi/abc123/hqdefault.jpg")
        self.assertEqual(first, second)

    def test_custom_placeholder_template(self):
        url = select_thumbnail(
            {},
            "abc123",
            placeholder_template="/static/placeholder.svg?v={id}",
        )
        self.assertEqual(url, "/static/placeholder.svg?v=abc123")
