"""Runtime configuration read from the environment."""

import logging
from dataclasses import dataclass
from os import getenv
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger("Echo.config")

DEBUG = getenv("APP_DEBUG", "false").lower() == "true"
# Default DATABASE_URL is for local dev only (Docker Compose)
DATABASE_URL = getenv(
    "DATABASE_URL",
    "postgresql+asyncpg://postgres:postgres@db:5432/echo"
)


def _int_env(name: str, default: int) -> int:
    """Read a positive integer from the environment, falling back on bad input."""
    raw = getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning(f"Ignoring non-integer {name}={raw!r}, using {default}")
        return default
    if value < 1:
        logger.warning(f"Ignoring non-positive {name}={value}, using {default}")
        return default
    return value


def _timezone_env(name: str, default: str = "UTC") -> ZoneInfo:
    raw = getenv(name, default)
    try:
        return ZoneInfo(raw)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning(f"Unknown timezone {name}={raw!r}, using {default}")
        return ZoneInfo(default)


@dataclass(frozen=True)
class DashboardSettings:
    """Tunables for the feedback dashboard pipeline."""
    page_size: int = 5
    trend_days: int = 7
    top_contributors: int = 3
    recency_hours: int = 24
    default_range_days: int = 30
    timezone: ZoneInfo = ZoneInfo("UTC")
    incremental_merge: bool = False

    @classmethod
    def from_env(cls) -> "DashboardSettings":
        return cls(
            page_size=_int_env("FEEDBACK_PAGE_SIZE", 5),
            trend_days=_int_env("FEEDBACK_TREND_DAYS", 7),
            top_contributors=_int_env("FEEDBACK_TOP_CONTRIBUTORS", 3),
            recency_hours=_int_env("FEEDBACK_RECENCY_HOURS", 24),
            default_range_days=_int_env("FEEDBACK_DEFAULT_RANGE_DAYS", 30),
            timezone=_timezone_env("FEEDBACK_TIMEZONE"),
            incremental_merge=getenv("FEEDBACK_INCREMENTAL_MERGE", "false").lower() == "true",
        )


settings = DashboardSettings.from_env()
