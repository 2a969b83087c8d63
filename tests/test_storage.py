import os
import sys
import json
import shutil
import tempfile
import unittest
from unittest.mock import patch

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from exceptions import SnapshotCorruptError, SnapshotNotFoundError, StorageError
from models import Article
from storage import ensure_dir, save_snapshot, load_snapshot, get_file_summary, write_json


def sample_articles():
    return [
        Article(
            item_id="3",
            resolved_id="3",
            given_url="https://example.com/3",
            resolved_title="Third ünïcode",
            favorite=1,
            excerpt="Summary",
            has_image=1,
            words_count=300,
            time_added=1700000300,
        ),
        Article(item_id="1", given_title="First", time_added=1700000100),
        Article(item_id="2", status=1, time_added=1700000200),
    ]


class TestStorage(unittest.TestCase):
    def setUp(self):
        self.tmpdir = tempfile.mkdtemp()
        self.snapshot_path = os.path.join(self.tmpdir, "getpkt", "articles.json")

    def tearDown(self):
        shutil.rmtree(self.tmpdir)

    def test_ensure_dir(self):
        new_dir = os.path.join(self.tmpdir, "subdir")
        ensure_dir(new_dir)
        self.assertTrue(os.path.isdir(new_dir))

    def test_round_trip_keeps_order(self):
        articles = sample_articles()
        save_snapshot(articles, self.snapshot_path)
        self.assertEqual(load_snapshot(self.snapshot_path), articles)

    def test_snapshot_is_indented_json(self):
        save_snapshot(sample_articles(), self.snapshot_path)
        with open(self.snapshot_path, "r", encoding="utf-8") as f:
            content = f.read()
        self.assertIn('\n  {\n    "item_id": "3"', content)
        self.assertIn("ünïcode", content)

    def test_save_overwrites_previous(self):
        save_snapshot(sample_articles(), self.snapshot_path)
        save_snapshot([Article(item_id="9", time_added=1)], self.snapshot_path)
        loaded = load_snapshot(self.snapshot_path)
        self.assertEqual([a.item_id for a in loaded], ["9"])

    def test_save_leaves_no_temp_files(self):
        save_snapshot(sample_articles(), self.snapshot_path)
        self.assertEqual(os.listdir(os.path.dirname(self.snapshot_path)), ["articles.json"])

    def test_failed_write_keeps_old_snapshot(self):
        save_snapshot(sample_articles(), self.snapshot_path)
        with patch("storage.os.replace", side_effect=OSError("disk full")):
            with self.assertRaises(StorageError):
                save_snapshot([], self.snapshot_path)
        self.assertEqual(len(load_snapshot(self.snapshot_path)), 3)
        self.assertEqual(os.listdir(os.path.dirname(self.snapshot_path)), ["articles.json"])

    def test_empty_snapshot(self):
        save_snapshot([], self.snapshot_path)
        self.assertEqual(load_snapshot(self.snapshot_path), [])

    def test_load_missing(self):
        with self.assertRaises(SnapshotNotFoundError):
            load_snapshot(os.path.join(self.tmpdir, "missing.json"))

    def test_load_directory(self):
        with self.assertRaises(SnapshotNotFoundError):
            load_snapshot(self.tmpdir)

    def test_load_invalid_json(self):
        ensure_dir(os.path.dirname(self.snapshot_path))
        with open(self.snapshot_path, "w", encoding="utf-8") as f:
            f.write("[{not json")
        with self.assertRaises(SnapshotCorruptError):
            load_snapshot(self.snapshot_path)

    def test_load_wrong_shape(self):
        write_json({"list": []}, self.snapshot_path)
        with self.assertRaises(SnapshotCorruptError):
            load_snapshot(self.snapshot_path)

    def test_load_bad_timestamp(self):
        write_json([{"item_id": "1", "time_added": "soon"}], self.snapshot_path)
        with self.assertRaises(SnapshotCorruptError):
            load_snapshot(self.snapshot_path)

    def test_get_file_summary(self):
        save_snapshot(sample_articles(), self.snapshot_path)
        summary = get_file_summary(self.snapshot_path)
        self.assertEqual(summary["article_count"], 3)
        self.assertTrue(summary["size_bytes"] > 0)

    def test_get_file_summary_missing(self):
        summary = get_file_summary(os.path.join(self.tmpdir, "nope.json"))
        self.assertIn("error", summary)

    def test_written_file_is_private(self):
        write_json({"consumer_key": "k"}, self.snapshot_path)
        mode = os.stat(self.snapshot_path).st_mode & 0o777
        self.assertEqual(mode, 0o600)

    def test_write_json_content(self):
        write_json({"foo": "bar", "num": 42}, self.snapshot_path)
        with open(self.snapshot_path, "r", encoding="utf-8") as f:
            self.assertEqual(json.load(f), {"foo": "bar", "num": 42})


if __name__ == "__main__":
    unittest.main()
