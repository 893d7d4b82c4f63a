"""
Tests for message composition.

The composer filters timetable entries by class and cancellation code,
resolves period/subject/teacher and skips entries it cannot resolve.
"""

import unittest
from datetime import date

from untis_bot.models import AnnouncementMode, Subject, TimetableEntry
from untis_bot.notify.formatters import PERIOD_TABLE, MessageComposer

CLASS_ID = 661


def entry(subject_id=5, start_time=750, code="cancelled", class_ids=(CLASS_ID,), day=None):
    return TimetableEntry(
        class_ids=list(class_ids),
        subject_ids=[subject_id],
        start_time=start_time,
        code=code,
        date=day,
    )


class TestCompose(unittest.TestCase):
    def setUp(self) -> None:
        self.subjects = [Subject(id=5, name="MA1"), Subject(id=7, name="DE2")]
        self.teachers = {"MA1": "Mr. Smith", "DE2": "Frau Meyer"}

    def compose(self, entries, mode=AnnouncementMode.TODAY, on_date=None):
        return MessageComposer.compose(
            entries, self.subjects, self.teachers, mode, CLASS_ID, on_date
        )

    def test_single_cancellation_today(self) -> None:
        self.assertEqual(
            self.compose([entry()]),
            "Heute entfällt:\nMA1 in der 1. Stunde bei Mr. Smith\n",
        )

    def test_tomorrow_header(self) -> None:
        out = self.compose([entry(7, 1030)], mode=AnnouncementMode.TOMORROW)
        self.assertEqual(out, "Morgen entfällt:\nDE2 in der 4. Stunde bei Frau Meyer\n")

    def test_none_mode_is_empty(self) -> None:
        self.assertEqual(self.compose([entry()], mode=AnnouncementMode.NONE), "")

    def test_header_only_when_nothing_cancelled(self) -> None:
        self.assertEqual(self.compose([]), "Heute entfällt:\n")

    def test_other_class_never_contributes(self) -> None:
        out = self.compose([entry(class_ids=(662,))])
        self.assertEqual(out, "Heute entfällt:\n")

    def test_class_id_anywhere_in_list_counts(self) -> None:
        out = self.compose([entry(class_ids=(662, CLASS_ID))])
        self.assertIn("MA1 in der 1. Stunde", out)

    def test_non_cancelled_codes_never_contribute(self) -> None:
        out = self.compose([entry(code=None), entry(code="irregular")])
        self.assertEqual(out, "Heute entfällt:\n")

    def test_repeated_subject_is_not_deduplicated(self) -> None:
        out = self.compose([entry(start_time=750), entry(start_time=840)])
        self.assertEqual(
            out,
            "Heute entfällt:\n"
            "MA1 in der 1. Stunde bei Mr. Smith\n"
            "MA1 in der 2. Stunde bei Mr. Smith\n",
        )

    def test_lookup_faults_are_skipped(self) -> None:
        entries = [
            entry(subject_id=99),
            entry(start_time=800),
            entry(subject_id=7),
        ]
        self.teachers.pop("DE2")
        entries.append(entry(subject_id=5, start_time=1705))

        cancellations, faults = MessageComposer.find_cancellations(
            entries, self.subjects, self.teachers, CLASS_ID
        )

        self.assertEqual([c.period for c in cancellations], [12])
        self.assertEqual(len(faults), 3)
        self.assertIn("unknown subject id 99", faults[0].reason)
        self.assertIn("unknown start time 800", faults[1].reason)
        self.assertIn("no teacher for subject DE2", faults[2].reason)
        self.assertIs(faults[1].entry, entries[1])

    def test_blank_teacher_name_is_a_lookup_fault(self) -> None:
        self.teachers["MA1"] = ""
        self.teachers["DE2"] = "   "

        cancellations, faults = MessageComposer.find_cancellations(
            [entry(), entry(subject_id=7)], self.subjects, self.teachers, CLASS_ID
        )

        self.assertEqual(cancellations, [])
        self.assertEqual(len(faults), 2)
        self.assertIn("no teacher for subject MA1", faults[0].reason)
        self.assertEqual(self.compose([entry()]), "Heute entfällt:\n")

    def test_first_matching_subject_wins(self) -> None:
        self.subjects.append(Subject(id=5, name="DE2"))
        self.assertIn("MA1", self.compose([entry()]))

    def test_date_filter_drops_other_days(self) -> None:
        entries = [entry(day=20240304), entry(subject_id=7, day=20240305), entry(start_time=840)]
        out = self.compose(entries, on_date=date(2024, 3, 5))
        self.assertEqual(
            out,
            "Heute entfällt:\n"
            "DE2 in der 1. Stunde bei Frau Meyer\n"
            "MA1 in der 2. Stunde bei Mr. Smith\n",
        )

    def test_idempotent(self) -> None:
        entries = [entry(), entry(7, 1335)]
        self.assertEqual(self.compose(entries), self.compose(entries))

    def test_period_table_covers_twelve_periods(self) -> None:
        self.assertEqual(sorted(PERIOD_TABLE.values()), list(range(1, 13)))
        self.assertEqual(PERIOD_TABLE[750], 1)


class TestParsing(unittest.TestCase):
    def test_parse_entries_from_api_records(self) -> None:
        raw = [
            {
                "id": 1,
                "date": 20240304,
                "startTime": 940,
                "endTime": 1025,
                "kl": [{"id": 661}],
                "su": [{"id": 5}],
                "ro": [{"id": 3}],
                "code": "cancelled",
            },
            {"id": 2, "kl": [{"id": 661}]},
        ]
        entries = MessageComposer.parse_entries(raw)

        self.assertEqual(len(entries), 1)
        self.assertEqual(entries[0].class_ids, [661])
        self.assertEqual(entries[0].subject_ids, [5])
        self.assertEqual(entries[0].start_time, 940)
        self.assertTrue(entries[0].is_cancelled)
        self.assertEqual(entries[0].lesson_date, date(2024, 3, 4))

    def test_parse_entries_drops_impossible_date(self) -> None:
        raw = [
            {"date": 20241340, "startTime": 750, "kl": [{"id": 661}], "su": [{"id": 5}], "code": "cancelled"},
            {"date": 20240304, "startTime": 840, "kl": [{"id": 661}], "su": [{"id": 5}], "code": "cancelled"},
        ]
        entries = MessageComposer.parse_entries(raw)

        self.assertEqual([e.start_time for e in entries], [840])
        cancellations, faults = MessageComposer.find_cancellations(
            entries, [Subject(id=5, name="MA1")], {"MA1": "Mr. Smith"}, CLASS_ID, date(2024, 3, 4)
        )
        self.assertEqual([c.period for c in cancellations], [2])
        self.assertEqual(faults, [])

    def test_parse_subjects_drops_malformed(self) -> None:
        raw = [{"id": 5, "name": "MA1", "longName": "Mathe"}, {"id": 6}]
        self.assertEqual(MessageComposer.parse_subjects(raw), [Subject(id=5, name="MA1")])


if __name__ == "__main__":
    unittest.main()
