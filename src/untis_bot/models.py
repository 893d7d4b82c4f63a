"""
Data models for the WebUntis Cancellation Bot.

Defines Pydantic models for the entities read from WebUntis:
- Subject
- TimetableEntry
- Cancellation (one line of an announcement)
"""

import datetime as dt
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, computed_field, field_validator

# Status code WebUntis uses for a lesson that will not take place
CANCELLED_CODE = "cancelled"


class AnnouncementMode(str, Enum):
    """Which day an announcement refers to."""
    TODAY = "today"
    TOMORROW = "tomorrow"
    NONE = "none"

    @property
    def header(self) -> str:
        """First line of the message for this mode."""
        return {
            AnnouncementMode.TODAY: "Heute entfällt:\n",
            AnnouncementMode.TOMORROW: "Morgen entfällt:\n",
            AnnouncementMode.NONE: "",
        }[self]


class Subject(BaseModel):
    """
    A subject record from ``getSubjects``.

    Attributes:
        id: WebUntis subject id
        name: Short code of the subject (e.g. "MA1")
    """
    id: int
    name: str

    @classmethod
    def from_api(cls, raw: Dict[str, Any]) -> "Subject":
        return cls(id=raw["id"], name=raw["name"])


class TimetableEntry(BaseModel):
    """
    A single lesson from ``getTimetable``.

    WebUntis returns classes and subjects as lists of ``{"id": ...}``
    objects under the keys ``kl`` and ``su``.

    Attributes:
        class_ids: Ids of the classes attending the lesson
        subject_ids: Ids of the subjects taught
        start_time: Start time as WebUntis encodes it (750 for 07:50)
        code: Status code, ``"cancelled"`` for cancelled lessons
        date: Lesson date as a YYYYMMDD integer, if present
    """
    class_ids: List[int] = Field(default_factory=list)
    subject_ids: List[int] = Field(default_factory=list)
    start_time: int
    code: Optional[str] = None
    date: Optional[int] = None

    @classmethod
    def from_api(cls, raw: Dict[str, Any]) -> "TimetableEntry":
        return cls(
            class_ids=[item["id"] for item in raw.get("kl", [])],
            subject_ids=[item["id"] for item in raw.get("su", [])],
            start_time=raw["startTime"],
            code=raw.get("code"),
            date=raw.get("date"),
        )

    @field_validator("date")
    @classmethod
    def validate_date(cls, v: Optional[int]) -> Optional[int]:
        """Reject dates that are not a real YYYYMMDD day."""
        if v is not None:
            dt.datetime.strptime(str(v), "%Y%m%d")
        return v

    @property
    def is_cancelled(self) -> bool:
        return self.code == CANCELLED_CODE

    @property
    def lesson_date(self) -> Optional[dt.date]:
        """The lesson date as a ``date``, or None if WebUntis sent none."""
        if self.date is None:
            return None
        return dt.datetime.strptime(str(self.date), "%Y%m%d").date()


class Cancellation(BaseModel):
    """
    A resolved cancelled lesson, ready to be rendered.

    Attributes:
        subject: Subject short code
        period: Human period number (1-12)
        teacher: Teacher display name
    """
    subject: str
    period: int
    teacher: str

    @computed_field
    @property
    def line(self) -> str:
        """Message line for this cancellation."""
        return f"{self.subject} in der {self.period}. Stunde bei {self.teacher}\n"
