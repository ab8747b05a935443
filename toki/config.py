"""Configuration management from environment variables."""

import os
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

from toki.utils.constants import (
    DEFAULT_LOCALE,
    DEFAULT_TIMEZONE,
    FALLBACK_OFFSET_MINUTES,
    SUPPORTED_LOCALES,
)

# Load .env file if it exists
load_dotenv()


class Config:
    """Application configuration loaded from environment variables."""

    # Telegram
    TELEGRAM_BOT_TOKEN: str = os.getenv("TELEGRAM_BOT_TOKEN", "")

    # Database
    DATABASE_PATH: Path = Path(os.getenv("DATABASE_PATH", "./data/toki.db"))

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Dispatch loop
    DISPATCH_INTERVAL: int = int(os.getenv("DISPATCH_INTERVAL", "60"))
    DISPATCH_ENABLED: bool = os.getenv("DISPATCH_ENABLED", "true").lower() != "false"

    # Parsing
    TIMEZONE: str = os.getenv("TIMEZONE", DEFAULT_TIMEZONE)
    DEFAULT_LOCALE: str = os.getenv("DEFAULT_LOCALE", DEFAULT_LOCALE)
    FALLBACK_OFFSET_MINUTES: int = int(
        os.getenv("FALLBACK_OFFSET_MINUTES", str(FALLBACK_OFFSET_MINUTES))
    )

    @classmethod
    def validate(cls) -> None:
        """Validate required configuration."""
        if not cls.TELEGRAM_BOT_TOKEN:
            raise ValueError("TELEGRAM_BOT_TOKEN environment variable is required")

        try:
            ZoneInfo(cls.TIMEZONE)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Invalid TIMEZONE: {cls.TIMEZONE}") from e

        if cls.DEFAULT_LOCALE not in SUPPORTED_LOCALES:
            raise ValueError(
                f"DEFAULT_LOCALE must be one of {', '.join(SUPPORTED_LOCALES)}"
            )

        if cls.DISPATCH_INTERVAL <= 0:
            raise ValueError("DISPATCH_INTERVAL must be positive")

        # Ensure database directory exists
        cls.DATABASE_PATH.parent.mkdir(parents=True, exist_ok=True)
