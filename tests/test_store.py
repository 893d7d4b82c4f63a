"""
Unit tests for the flat-file cache.

Storage contract:
- subjects.json / timetable.json hold JSON lists
- teachers.json holds a JSON object of plain strings
- Missing or invalid files raise CacheError
- Writes leave no temp files behind
"""

import json
import tempfile
import unittest
from pathlib import Path

from untis_bot.cache import CacheStore
from untis_bot.errors import CacheError


class TestCacheStore(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.dir = Path(self._tmp.name)
        self.store = CacheStore(self.dir)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_save_writes_pretty_json(self) -> None:
        subjects = [{"id": 5, "name": "MA1", "longName": "Mathe Übung"}]
        self.store.save_subjects(subjects)

        text = (self.dir / "subjects.json").read_text(encoding="utf-8")
        self.assertIn("Mathe Übung", text)
        self.assertIn('\n  {', text)
        self.assertEqual(self.store.load_subjects(), subjects)

    def test_save_replaces_and_leaves_no_temp_files(self) -> None:
        self.store.save_timetable([{"startTime": 750}])
        self.store.save_timetable([])

        self.assertEqual(self.store.load_timetable(), [])
        self.assertEqual([p.name for p in self.dir.iterdir()], ["timetable.json"])

    def test_creates_missing_directory(self) -> None:
        store = CacheStore(self.dir / "nested" / "cache")
        store.save_subjects([])
        self.assertTrue((self.dir / "nested" / "cache" / "subjects.json").exists())

    def test_missing_file_raises(self) -> None:
        with self.assertRaises(CacheError):
            self.store.load_teachers()

    def test_corrupt_file_raises(self) -> None:
        (self.dir / "timetable.json").write_text("[{", encoding="utf-8")
        with self.assertRaises(CacheError):
            self.store.load_timetable()

    def test_wrong_top_level_type_raises(self) -> None:
        (self.dir / "subjects.json").write_text('{"result": []}', encoding="utf-8")
        with self.assertRaises(CacheError):
            self.store.load_subjects()

    def test_teachers_are_plain_strings(self) -> None:
        self.store.save_teachers({"MA1": "Mr. Smith"})
        data = json.loads((self.dir / "teachers.json").read_text(encoding="utf-8"))
        self.assertEqual(data, {"MA1": "Mr. Smith"})
        self.assertEqual(self.store.load_teachers(), {"MA1": "Mr. Smith"})

    def test_non_string_teacher_raises(self) -> None:
        (self.dir / "teachers.json").write_text('{"MA1": 3}', encoding="utf-8")
        with self.assertRaises(CacheError):
            self.store.load_teachers()


if __name__ == "__main__":
    unittest.main()
