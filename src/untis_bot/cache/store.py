"""
Flat-file cache for WebUntis payloads.

Three JSON files live in the cache directory:

    subjects.json   - result of getSubjects, written on every fetch
    timetable.json  - result of getTimetable, written on every fetch
    teachers.json   - subject code -> teacher name, maintained by hand

Writes go through a temp file and ``os.replace`` so a crash mid-write
never leaves a truncated file behind.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from untis_bot.config import get_settings
from untis_bot.errors import CacheError

logger = logging.getLogger(__name__)

SUBJECTS_FILE = "subjects.json"
TIMETABLE_FILE = "timetable.json"
TEACHERS_FILE = "teachers.json"


class CacheStore:
    """
    Reads and writes the cache files.

    The store only checks the top-level JSON type; record validation
    happens when the composer builds models from the data.
    """

    def __init__(self, directory: Optional[Union[str, Path]] = None):
        """
        Initialize the store.

        Args:
            directory: Cache directory, defaults to the ``cache_dir`` setting
        """
        if directory is None:
            directory = get_settings().cache_dir
        self.directory = Path(directory)

    def path(self, name: str) -> Path:
        return self.directory / name

    def _write(self, name: str, data: Any) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        target = self.path(name)

        fd, tmp_name = tempfile.mkstemp(
            dir=self.directory, prefix=f".{name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(data, fh, indent=2, ensure_ascii=False)
                fh.write("\n")
            os.replace(tmp_name, target)
        except OSError as e:
            Path(tmp_name).unlink(missing_ok=True)
            raise CacheError(f"Could not write {target}: {e}") from e

        logger.debug(f"Wrote {target}")

    def _read(self, name: str, expected: type) -> Any:
        target = self.path(name)
        try:
            data = json.loads(target.read_text(encoding="utf-8"))
        except FileNotFoundError as e:
            raise CacheError(f"Cache file {target} does not exist") from e
        except (OSError, ValueError) as e:
            raise CacheError(f"Could not read {target}: {e}") from e

        if not isinstance(data, expected):
            raise CacheError(
                f"Cache file {target} must contain a JSON {expected.__name__}"
            )
        return data

    def save_subjects(self, subjects: List[Dict[str, Any]]) -> None:
        self._write(SUBJECTS_FILE, subjects)

    def save_timetable(self, timetable: List[Dict[str, Any]]) -> None:
        self._write(TIMETABLE_FILE, timetable)

    def save_teachers(self, teachers: Dict[str, str]) -> None:
        """Write the teacher lookup. Not part of the fetch cycle."""
        self._write(TEACHERS_FILE, teachers)

    def load_subjects(self) -> List[Dict[str, Any]]:
        return self._read(SUBJECTS_FILE, list)

    def load_timetable(self) -> List[Dict[str, Any]]:
        return self._read(TIMETABLE_FILE, list)

    def load_teachers(self) -> Dict[str, str]:
        """
        Load the subject code -> teacher name lookup.

        Raises:
            CacheError: If the file is missing, invalid, or maps to non-strings
        """
        teachers = self._read(TEACHERS_FILE, dict)
        for key, value in teachers.items():
            if not isinstance(value, str):
                raise CacheError(
                    f"Teacher for '{key}' in {self.path(TEACHERS_FILE)} is not a string"
                )
        return teachers
