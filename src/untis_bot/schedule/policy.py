"""
Time-window policy.

Decides from the local weekday and hour whether to announce today's or
tomorrow's cancellations, and how long the scheduled loop sleeps before
the next check. Weekdays are ISO numbers: 1 is Monday, 7 is Sunday.
"""

from datetime import date, datetime, timedelta
from typing import Optional

from dateutil.tz import gettz

from untis_bot.models import AnnouncementMode

MONDAY = 1
FRIDAY = 5
SUNDAY = 7

MORNING_HOUR = 7
EVENING_HOUR = 20

HOUR = 60 * 60
DAY = 24 * HOUR


def _check(weekday: int, hour: int) -> None:
    if not MONDAY <= weekday <= SUNDAY:
        raise ValueError(f"weekday must be between 1 and 7, got {weekday}")
    if not 0 <= hour <= 23:
        raise ValueError(f"hour must be between 0 and 23, got {hour}")


def announcement_mode(weekday: int, hour: int) -> AnnouncementMode:
    """
    Pick the announcement mode for a weekday/hour pair.

    The morning check on a school day announces today; the same hour also
    lies in the tomorrow range but the today branch is checked first.
    """
    _check(weekday, hour)
    is_school_day = weekday <= FRIDAY

    if is_school_day and hour == MORNING_HOUR:
        return AnnouncementMode.TODAY
    if (is_school_day and MORNING_HOUR <= hour <= EVENING_HOUR) or (
        weekday == SUNDAY and hour == EVENING_HOUR
    ):
        return AnnouncementMode.TOMORROW
    return AnnouncementMode.NONE


def sleep_seconds(weekday: int, hour: int) -> int:
    """
    Seconds the scheduled loop waits before the next check.

    The result is computed once per cycle and not corrected for clock
    changes; the next cycle recomputes from the new current time.
    """
    _check(weekday, hour)

    if weekday == FRIDAY and hour > MORNING_HOUR:
        return 2 * DAY
    if weekday == SUNDAY and hour < EVENING_HOUR:
        return (EVENING_HOUR - hour) * HOUR
    if weekday == SUNDAY:
        return 6 * DAY
    if hour < MORNING_HOUR:
        return (MORNING_HOUR - hour) * HOUR
    if hour >= EVENING_HOUR:
        # until 07:00 after the next midnight
        return (24 + MORNING_HOUR - hour) * HOUR
    return 13 * HOUR


def target_date(mode: AnnouncementMode, today: date) -> Optional[date]:
    """Day the announcement refers to, None when nothing is announced."""
    if mode is AnnouncementMode.TODAY:
        return today
    if mode is AnnouncementMode.TOMORROW:
        return today + timedelta(days=1)
    return None


def local_now(timezone: str) -> datetime:
    """Current time in the given IANA timezone."""
    return datetime.now(gettz(timezone))
