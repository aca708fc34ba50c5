import unittest

from playlist_tracker.extractor import ItemRange, parse_json_lines


class TestParseJsonLines(unittest.TestCase):
    def test_skips_blank_and_malformed_lines(self):
        extraction = parse_json_lines(
            [
                '{"id": "a", "playlist_title": "Mix", "playlist_count": 3}\n',
                "\n",
                "garbage\n",
                '"a string"\n',
                '{"id": "b"}\n',
            ]
        )
        self.assertEqual([item["id"] for item in extraction.items], ["a", "b"])
        self.assertEqual(extraction.line_count, 4)
        self.assertEqual(extraction.playlist_title, "Mix")
        self.assertEqual(extraction.playlist_count, 3)
        self.assertTrue(extraction.complete)
        self.assertEqual(extraction.item_offsets, [0, 3])


class TestItemRange(unittest.TestCase):
    def test_cli_form_and_size(self):
        window = ItemRange(11, 20)
        self.assertEqual(window.to_cli(), "11-20")
        self.assertEqual(window.size, 10)

    def test_rejects_inverted_range(self):
        with self.assertRaises(ValueError):
            ItemRange(5, 4)
        with self.assertRaises(ValueError):
            ItemRange(0, 4)
