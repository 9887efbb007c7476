"""Configuration management for the application."""

import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

DEFAULT_RELAY_ENDPOINTS = (
    "direct|{url}|false",
    "corsproxy|https://corsproxy.io/?url={url}|false",
    "allorigins|https://api.allorigins.win/get?url={url}|true",
    "codetabs|https://api.codetabs.com/v1/proxy?quest={url}|false",
)


@dataclass
class RelayConfig:
    """A single relay endpoint definition."""

    name: str
    template: str
    wrapped: bool = False


@dataclass
class FetchConfig:
    """Quote API and relay configuration."""

    quote_api_url: str = "https://query1.finance.yahoo.com/v8/finance/chart"
    relays: list[RelayConfig] = field(default_factory=list)
    request_timeout: float = 10.0
    request_delay_seconds: float = 1.0  # Pause between symbols
    history_range: str = "1y"
    history_interval: str = "1d"


@dataclass
class SchedulerConfig:
    """Scheduler configuration."""

    refresh_time: str  # HH:MM format
    enabled: bool = False
    timezone: str = "UTC"


@dataclass
class DatabaseConfig:
    """Database configuration."""

    database_url: str
    echo: bool = False


@dataclass
class LoggingConfig:
    """Structured logging configuration."""

    level: str = "INFO"
    file_path: str | None = None


def parse_relay_endpoints(raw: str) -> list[RelayConfig]:
    """
    Parse relay definitions of the form ``name|template|wrapped`` separated by ``;``.

    Args:
        raw: Relay definitions string

    Returns:
        List of RelayConfig in the order given

    Raises:
        ValueError if an entry is malformed
    """
    relays = []
    for entry in raw.split(";"):
        entry = entry.strip()
        if not entry:
            continue
        parts = [part.strip() for part in entry.split("|")]
        if len(parts) not in (2, 3):
            raise ValueError(f"Invalid relay definition: {entry}")
        name, template = parts[0], parts[1]
        wrapped = len(parts) == 3 and parts[2].lower() == "true"
        if "{url}" not in template:
            raise ValueError(f"Relay template for {name} must contain {{url}}")
        relays.append(RelayConfig(name=name, template=template, wrapped=wrapped))
    return relays


class Config:
    """Main application configuration."""

    def __init__(self):
        self.fetch = FetchConfig(
            quote_api_url=os.getenv(
                "QUOTE_API_URL", "https://query1.finance.yahoo.com/v8/finance/chart"
            ),
            relays=parse_relay_endpoints(
                os.getenv("RELAY_ENDPOINTS", ";".join(DEFAULT_RELAY_ENDPOINTS))
            ),
            request_timeout=float(os.getenv("REQUEST_TIMEOUT", "10")),
            request_delay_seconds=float(os.getenv("REQUEST_DELAY_SECONDS", "1.0")),
            history_range=os.getenv("HISTORY_RANGE", "1y"),
            history_interval=os.getenv("HISTORY_INTERVAL", "1d"),
        )

        self.scheduler = SchedulerConfig(
            refresh_time=os.getenv("REFRESH_TIME", "18:00"),
            enabled=os.getenv("SCHEDULER_ENABLED", "false").lower() == "true",
            timezone=os.getenv("TIMEZONE", "UTC"),
        )

        self.database = DatabaseConfig(
            database_url=os.getenv("DATABASE_URL", "sqlite:///./defense_tracker.db"),
            echo=os.getenv("DATABASE_ECHO", "false").lower() == "true",
        )

        self.logging = LoggingConfig(
            level=os.getenv("LOG_LEVEL", "INFO").upper(),
            file_path=os.getenv("LOG_FILE") or None,
        )

    def validate(self) -> bool:
        """
        Validate configuration.

        Returns:
            True if configuration is valid

        Raises:
            ValueError if configuration is invalid
        """
        if not self.fetch.relays:
            raise ValueError("RELAY_ENDPOINTS must define at least one endpoint")
        if self.fetch.request_timeout <= 0:
            raise ValueError("REQUEST_TIMEOUT must be positive")
        if self.fetch.request_delay_seconds < 0:
            raise ValueError("REQUEST_DELAY_SECONDS must not be negative")
        if self.logging.level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Invalid LOG_LEVEL: {self.logging.level}")

        # Validate time format
        time_str = self.scheduler.refresh_time
        try:
            parts = time_str.split(":")
            if len(parts) != 2:
                raise ValueError(f"Invalid time format: {time_str}. Use HH:MM")
            hour, minute = int(parts[0]), int(parts[1])
            if not (0 <= hour < 24 and 0 <= minute < 60):
                raise ValueError(f"Invalid time values: {time_str}")
        except (ValueError, AttributeError) as e:
            raise ValueError(f"Invalid scheduler time configuration: {e}") from e

        return True


# Global config instance
config = Config()
