"""
Message composition for Telegram notifications.

Cross-references timetable entries with subjects and the teacher lookup
and renders the German cancellation message.
"""

import logging
from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Tuple

from pydantic import ValidationError

from untis_bot.errors import LookupFault
from untis_bot.models import AnnouncementMode, Cancellation, Subject, TimetableEntry

logger = logging.getLogger(__name__)

# Lesson start time (as WebUntis encodes it) -> period number
PERIOD_TABLE: Dict[int, int] = {
    750: 1,
    840: 2,
    940: 3,
    1030: 4,
    1130: 5,
    1220: 6,
    1335: 7,
    1415: 8,
    1505: 9,
    1545: 10,
    1625: 11,
    1705: 12,
}


class MessageComposer:
    """
    Builds cancellation messages.

    Lookups are first-match-wins. An entry whose period, subject or
    teacher cannot be resolved is reported as a LookupFault and skipped;
    the remaining entries still make it into the message.
    """

    @staticmethod
    def _find_subject(subject_id: int, subjects: Iterable[Subject]) -> Optional[Subject]:
        for subject in subjects:
            if subject.id == subject_id:
                return subject
        return None

    @classmethod
    def resolve(
        cls,
        entry: TimetableEntry,
        subjects: List[Subject],
        teachers: Dict[str, str],
    ) -> Cancellation:
        """
        Resolve one cancelled entry into a Cancellation.

        Raises:
            LookupFault: If period, subject or teacher is unknown
        """
        if not entry.subject_ids:
            raise LookupFault("entry has no subject", entry)

        period = PERIOD_TABLE.get(entry.start_time)
        if period is None:
            raise LookupFault(f"unknown start time {entry.start_time}", entry)

        subject = cls._find_subject(entry.subject_ids[0], subjects)
        if subject is None:
            raise LookupFault(f"unknown subject id {entry.subject_ids[0]}", entry)

        teacher = teachers.get(subject.name)
        if not teacher or not teacher.strip():
            raise LookupFault(f"no teacher for subject {subject.name}", entry)

        return Cancellation(subject=subject.name, period=period, teacher=teacher)

    @classmethod
    def find_cancellations(
        cls,
        entries: Iterable[TimetableEntry],
        subjects: List[Subject],
        teachers: Dict[str, str],
        class_id: int,
        on_date: Optional[date] = None,
    ) -> Tuple[List[Cancellation], List[LookupFault]]:
        """
        Collect cancelled lessons of a class.

        Args:
            entries: Timetable entries in WebUntis order
            subjects: Known subjects
            teachers: Subject code -> teacher name
            class_id: Class whose lessons are relevant
            on_date: If given, entries dated on another day are ignored

        Returns:
            tuple: (cancellations in input order, lookup faults)
        """
        cancellations: List[Cancellation] = []
        faults: List[LookupFault] = []

        for entry in entries:
            if class_id not in entry.class_ids or not entry.is_cancelled:
                continue
            if on_date is not None and entry.date is not None and entry.lesson_date != on_date:
                continue

            try:
                cancellations.append(cls.resolve(entry, subjects, teachers))
            except LookupFault as fault:
                logger.warning(f"Skipping cancelled lesson: {fault.reason}")
                faults.append(fault)

        return cancellations, faults

    @staticmethod
    def render(mode: AnnouncementMode, cancellations: Iterable[Cancellation]) -> str:
        """Render header and lines; empty string for AnnouncementMode.NONE."""
        if mode is AnnouncementMode.NONE:
            return ""
        return mode.header + "".join(c.line for c in cancellations)

    @classmethod
    def compose(
        cls,
        entries: Iterable[TimetableEntry],
        subjects: List[Subject],
        teachers: Dict[str, str],
        mode: AnnouncementMode,
        class_id: int,
        on_date: Optional[date] = None,
    ) -> str:
        """
        Compose the cancellation message.

        Returns:
            str: Header plus one line per cancelled lesson, or "" if the
            mode says nothing should be announced
        """
        if mode is AnnouncementMode.NONE:
            return ""
        cancellations, _ = cls.find_cancellations(
            entries, subjects, teachers, class_id, on_date
        )
        return cls.render(mode, cancellations)

    @staticmethod
    def parse_subjects(raw: Iterable[Dict[str, Any]]) -> List[Subject]:
        """Build Subject models, dropping records without id or name."""
        subjects = []
        for record in raw:
            try:
                subjects.append(Subject.from_api(record))
            except (KeyError, TypeError, ValidationError) as e:
                logger.warning(f"Ignoring malformed subject record: {e}")
        return subjects

    @staticmethod
    def parse_entries(raw: Iterable[Dict[str, Any]]) -> List[TimetableEntry]:
        """Build TimetableEntry models, dropping malformed records."""
        entries = []
        for record in raw:
            try:
                entries.append(TimetableEntry.from_api(record))
            except (KeyError, TypeError, ValidationError) as e:
                logger.warning(f"Ignoring malformed timetable record: {e}")
        return entries

