import os
import tempfile
import time
import unittest
from pathlib import Path

from cmdtrail.date_utils import cutoff_from_days, file_updated_at, is_recent

_NS = 1_000_000_000


class CutoffTests(unittest.TestCase):
    def test_no_window_means_no_cutoff(self) -> None:
        self.assertIsNone(cutoff_from_days(None))

    def test_cutoff_is_days_before_now(self) -> None:
        now_ns = 1_700_000_000 * _NS
        self.assertEqual(cutoff_from_days(2, now_ns=now_ns), now_ns - 2 * 86_400 * _NS)
        self.assertEqual(cutoff_from_days(0, now_ns=now_ns), now_ns)

    def test_cutoff_clamps_at_epoch(self) -> None:
        self.assertEqual(cutoff_from_days(10_000_000, now_ns=5 * _NS), 0)


class IsRecentTests(unittest.TestCase):
    def _file(self) -> Path:
        tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(tmpdir.cleanup)
        path = Path(tmpdir.name) / "session.jsonl"
        path.write_text("{}\n", encoding="utf-8")
        return path

    def test_mtime_equal_to_cutoff_is_included(self) -> None:
        path = self._file()
        now_ns = (time.time_ns() // _NS) * _NS
        cutoff = cutoff_from_days(3, now_ns=now_ns)
        os.utime(path, ns=(cutoff, cutoff))

        self.assertTrue(is_recent(path, cutoff))

    def test_one_millisecond_before_cutoff_is_excluded(self) -> None:
        path = self._file()
        now_ns = (time.time_ns() // _NS) * _NS
        cutoff = cutoff_from_days(3, now_ns=now_ns)
        older = cutoff - 1_000_000
        os.utime(path, ns=(older, older))

        self.assertFalse(is_recent(path, cutoff))

    def test_no_cutoff_includes_everything(self) -> None:
        path = self._file()
        os.utime(path, (0, 0))
        self.assertTrue(is_recent(path, None))

    def test_unreadable_metadata_is_not_recent(self) -> None:
        missing = Path(tempfile.gettempdir()) / "cmdtrail-missing" / "nope.jsonl"
        self.assertFalse(is_recent(missing, 0))

    def test_file_updated_at(self) -> None:
        path = self._file()
        os.utime(path, (1_700_000_000, 1_700_000_000))

        self.assertEqual(file_updated_at(path), "2023-11-14T22:13:20Z")
        self.assertEqual(file_updated_at(path.parent / "missing"), "")


if __name__ == "__main__":
    unittest.main()
