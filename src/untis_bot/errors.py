"""Error hierarchy for the cancellation bot.

Every error kind carries the process exit code that ``main()`` returns when
the error ends a run.
"""

from typing import Any, Optional


class UntisBotError(Exception):
    """Base exception for all bot errors."""

    exit_code = 1


class ConfigError(UntisBotError):
    """Required configuration is missing or invalid."""

    exit_code = 2


class TransportError(UntisBotError):
    """Network failure or non-2xx HTTP status."""

    exit_code = 3


class ProtocolError(UntisBotError):
    """Malformed or unexpected JSON-RPC response."""

    exit_code = 4


class AuthError(UntisBotError):
    """Authentication against WebUntis failed.

    Wraps transport and protocol failures of the authenticate call; the
    original error is available as ``__cause__``.
    """

    exit_code = 5


class SessionRequiredError(UntisBotError):
    """An authenticated call was made without a live session."""

    exit_code = 6


class DeliveryError(UntisBotError):
    """The Telegram notification could not be delivered."""

    exit_code = 7


class CacheError(UntisBotError):
    """A cache file is missing, unreadable or has the wrong shape."""

    exit_code = 8


class LookupFault(UntisBotError):
    """A timetable entry references an unknown period, subject or teacher.

    Never fatal: the composer skips the entry and keeps going.
    """

    exit_code = 9

    def __init__(self, reason: str, entry: Optional[Any] = None):
        super().__init__(reason)
        self.reason = reason
        self.entry = entry
