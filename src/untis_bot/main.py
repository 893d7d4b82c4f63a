"""
Main orchestrator for the WebUntis Cancellation Bot.

Coordinates one check cycle:
1. Login to WebUntis
2. Fetch subjects and the timetable for today and tomorrow
3. Persist both to the cache
4. Logout
5. Compose the message from the cache files
6. Send it to Telegram

In scheduled mode the cycle repeats, sleeping until the next relevant
time window in between.
"""

import argparse
import logging
import signal
import sys
import threading
from datetime import datetime, timedelta
from typing import List, Optional

from pydantic import ValidationError

from untis_bot.auth import UntisClient
from untis_bot.cache import CacheStore
from untis_bot.config import Settings, get_settings, setup_logging
from untis_bot.errors import ConfigError, DeliveryError, UntisBotError
from untis_bot.models import AnnouncementMode
from untis_bot.notify import MessageComposer, TelegramNotifier
from untis_bot.schedule.policy import (
    announcement_mode,
    local_now,
    sleep_seconds,
    target_date,
)

logger = logging.getLogger(__name__)


class CancellationMonitor:
    """
    Main orchestrator for cancellation checks.

    Coordinates all components for one check cycle and, in scheduled
    mode, for the sleep loop around it.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client: Optional[UntisClient] = None,
        store: Optional[CacheStore] = None,
        notifier: Optional[TelegramNotifier] = None,
    ):
        """Initialize the monitor with all components."""
        self.settings = settings or get_settings()
        self.client = client or UntisClient(self.settings)
        self.store = store or CacheStore(self.settings.cache_dir)
        self.notifier = notifier or TelegramNotifier(self.settings)
        self.composer = MessageComposer()
        self._reset_stats()

    def _reset_stats(self) -> None:
        self.stats = {
            "subjects_fetched": 0,
            "entries_fetched": 0,
            "cancellations_found": 0,
            "lookup_faults": 0,
            "message_sent": False,
        }

    def fetch(self, now: datetime) -> None:
        """
        Fetch subjects and timetable and write them to the cache.

        Nothing is written unless both fetches succeed.
        """
        start = now.date()
        end = start + timedelta(days=1)

        with self.client.login() as session:
            subjects = session.get_subjects()
            logger.info(f"Fetched {len(subjects)} subjects")

            logger.info(f"Fetching timetable from {start} to {end}")
            timetable = session.get_timetable(start, end)
            logger.info(f"Fetched {len(timetable)} timetable entries")

            self.store.save_subjects(subjects)
            self.store.save_timetable(timetable)
            logger.info(f"Cache written to {self.store.directory}")

        self.stats["subjects_fetched"] = len(subjects)
        self.stats["entries_fetched"] = len(timetable)

    def compose(self, now: datetime) -> str:
        """
        Compose the message for ``now`` from the cache files.

        Returns:
            str: The message, or "" if nothing should be sent
        """
        mode = announcement_mode(now.isoweekday(), now.hour)
        logger.info(f"Announcement mode for {now:%A %H:%M}: {mode.value}")
        if mode is AnnouncementMode.NONE:
            return ""

        entries = self.composer.parse_entries(self.store.load_timetable())
        subjects = self.composer.parse_subjects(self.store.load_subjects())
        teachers = self.store.load_teachers()

        cancellations, faults = self.composer.find_cancellations(
            entries,
            subjects,
            teachers,
            class_id=self.settings.untis_class_id,
            on_date=target_date(mode, now.date()),
        )
        self.stats["cancellations_found"] = len(cancellations)
        self.stats["lookup_faults"] = len(faults)

        return self.composer.render(mode, cancellations)

    def run_once(self, now: Optional[datetime] = None) -> int:
        """
        Execute one check cycle.

        Args:
            now: Current local time, defaults to the configured timezone's clock

        Returns:
            int: 0 on success, DeliveryError.exit_code if sending failed

        Raises:
            UntisBotError: On auth, fetch or cache failures
        """
        self._reset_stats()
        if now is None:
            now = local_now(self.settings.timezone)

        logger.info("=" * 50)
        logger.info("Checking WebUntis for cancelled lessons")
        logger.info("=" * 50)

        self.fetch(now)
        message = self.compose(now)

        exit_code = 0
        if not message:
            logger.info("Nothing to announce")
        else:
            try:
                self.notifier.send_message(message)
                self.stats["message_sent"] = True
            except DeliveryError as e:
                logger.error(f"Could not deliver message: {e}")
                exit_code = e.exit_code

        self._log_summary()
        return exit_code

    def run_forever(self, stop_event: threading.Event) -> int:
        """
        Repeat check cycles until ``stop_event`` is set.

        Failed cycles are logged and the loop carries on.

        Returns:
            int: Always 0; the loop only ends on request
        """
        logger.info("Starting scheduled mode")
        while not stop_event.is_set():
            try:
                self.run_once()
            except UntisBotError as e:
                logger.error(f"Check failed: {e}", exc_info=True)

            now = local_now(self.settings.timezone)
            seconds = sleep_seconds(now.isoweekday(), now.hour)
            wake = now + timedelta(seconds=seconds)
            logger.info(f"Sleeping {seconds}s until {wake:%a %Y-%m-%d %H:%M}")
            stop_event.wait(seconds)

        logger.info("Scheduled mode stopped")
        return 0

    def _log_summary(self) -> None:
        """Log execution summary."""
        logger.info("=" * 50)
        logger.info("Check Complete - Summary")
        logger.info("=" * 50)
        logger.info(f"Subjects fetched:     {self.stats['subjects_fetched']}")
        logger.info(f"Entries fetched:      {self.stats['entries_fetched']}")
        logger.info(f"Cancellations found:  {self.stats['cancellations_found']}")
        logger.info(f"Lookup faults:        {self.stats['lookup_faults']}")
        logger.info(f"Message sent:         {self.stats['message_sent']}")
        logger.info("=" * 50)


def _parse_args(argv: Optional[List[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="untis-bot",
        description="Announce cancelled WebUntis lessons in a Telegram chat.",
    )
    parser.add_argument(
        "--mode",
        choices=["once", "scheduled"],
        help="override the RUN_MODE setting",
    )
    return parser.parse_args(argv)


def _install_signal_handlers(stop_event: threading.Event) -> None:
    def _stop(signum, frame):
        logger.info(f"Received signal {signum}, shutting down")
        stop_event.set()

    signal.signal(signal.SIGINT, _stop)
    signal.signal(signal.SIGTERM, _stop)


def main(argv: Optional[List[str]] = None) -> int:
    """
    Entry point for the WebUntis Cancellation Bot.

    Returns:
        int: Exit code, 0 for success, otherwise the failing error's code
    """
    args = _parse_args(argv)

    try:
        settings = get_settings()
    except ValidationError as e:
        setup_logging()
        error = ConfigError(f"Configuration error: {e}")
        logger.error(str(error))
        logger.error("Please check your environment variables.")
        return error.exit_code

    try:
        setup_logging(settings.log_level, settings.log_file)
    except OSError as e:
        setup_logging(settings.log_level)
        error = ConfigError(f"Cannot open log file {settings.log_file}: {e}")
        logger.error(str(error))
        return error.exit_code
    logger.debug(f"Loaded configuration for {settings.untis_base_url}")

    mode = args.mode or settings.run_mode
    try:
        monitor = CancellationMonitor(settings)
        if mode == "scheduled":
            stop_event = threading.Event()
            _install_signal_handlers(stop_event)
            return monitor.run_forever(stop_event)
        return monitor.run_once()
    except UntisBotError as e:
        logger.error(f"Monitor failed with error: {e}", exc_info=True)
        return e.exit_code


if __name__ == "__main__":
    sys.exit(main())
