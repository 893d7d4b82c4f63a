"""WebUntis authentication module."""

from untis_bot.auth.untis_session import UntisClient, UntisSession

__all__ = ["UntisClient", "UntisSession"]
