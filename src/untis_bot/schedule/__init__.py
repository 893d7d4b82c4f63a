"""Time-window policy for announcements and the scheduled loop."""

from untis_bot.schedule.policy import announcement_mode, sleep_seconds, target_date

__all__ = ["announcement_mode", "sleep_seconds", "target_date"]
