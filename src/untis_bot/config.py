"""
Configuration management for the WebUntis Cancellation Bot.

Loads and validates all required environment variables with clear error messages.
Uses Pydantic Settings for type safety and validation.
"""

import logging
import sys
from functools import lru_cache
from typing import Optional

from dateutil.tz import gettz
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All required variables must be set, or the application will fail fast
    with a clear error message indicating which variables are missing.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # WebUntis Configuration
    untis_subdomain: str = Field(
        ...,
        description="WebUntis server subdomain (e.g. 'mese' for mese.webuntis.com)"
    )
    untis_school: str = Field(
        ...,
        description="School name as used in the WebUntis login URL"
    )
    untis_username: str = Field(
        ...,
        description="WebUntis login username"
    )
    untis_password: str = Field(
        ...,
        description="WebUntis login password"
    )
    untis_class_id: int = Field(
        ...,
        description="Numeric WebUntis id of the class to watch"
    )
    untis_client_id: str = Field(
        default="untis-bot",
        description="Client identifier sent with the authenticate call"
    )

    # Telegram Bot API Configuration
    telegram_bot_token: str = Field(
        ...,
        description="Telegram Bot API token (from @BotFather)"
    )
    telegram_chat_id: str = Field(
        ...,
        description="Telegram chat ID (user, group, or channel)"
    )

    # Optional Configuration
    cache_dir: str = Field(
        default=".",
        description="Directory holding subjects.json, timetable.json and teachers.json"
    )
    run_mode: str = Field(
        default="once",
        description="'once' for a single run, 'scheduled' for the sleep loop"
    )
    request_timeout: float = Field(
        default=30.0,
        description="Timeout in seconds for every outbound HTTP request"
    )
    timezone: str = Field(
        default="Europe/Berlin",
        description="Timezone used to decide between today and tomorrow"
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level"
    )
    log_file: Optional[str] = Field(
        default="untis_send.log",
        description="Additional log file; empty disables file logging"
    )

    @field_validator("untis_subdomain")
    @classmethod
    def validate_subdomain(cls, v: str) -> str:
        """Accept 'mese' as well as 'mese.webuntis.com'."""
        v = v.strip().lower()
        if v.endswith(".webuntis.com"):
            v = v[: -len(".webuntis.com")]
        if not v:
            raise ValueError("Subdomain must not be empty")
        return v

    @field_validator("run_mode")
    @classmethod
    def validate_run_mode(cls, v: str) -> str:
        lower = v.lower()
        if lower not in {"once", "scheduled"}:
            raise ValueError("Run mode must be 'once' or 'scheduled'")
        return lower

    @field_validator("request_timeout")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("Request timeout must be positive")
        return v

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        if gettz(v) is None:
            raise ValueError(f"Unknown timezone: {v}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure log level is valid."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return upper

    @property
    def untis_base_url(self) -> str:
        """JSON-RPC endpoint of the school's WebUntis instance."""
        return (
            f"https://{self.untis_subdomain}.webuntis.com"
            f"/WebUntis/jsonrpc.do?school={self.untis_school}"
        )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Returns:
        Settings: Validated application settings

    Raises:
        ValidationError: If required environment variables are missing or invalid
    """
    return Settings()


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
) -> logging.Logger:
    """
    Configure application logging.

    Called once settings are loaded; if loading them fails, it is called
    with the defaults so the configuration error still gets logged.

    Args:
        level: Logging level name
        log_file: Optional file that receives a copy of every record

    Returns:
        logging.Logger: Configured logger instance
    """
    handlers = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=handlers,
        force=True,
    )

    # Reduce noise from third-party libraries
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("requests").setLevel(logging.WARNING)

    return logging.getLogger("untis_bot")
