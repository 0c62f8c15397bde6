from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass
from datetime import timedelta, timezone, tzinfo
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

from .errors import ConfigError

load_dotenv()

BASE_SCHEDULE_URL = "http://game.capcom.com/world/steam/us/schedule.html?utc=0"
MASTER_RANK_SCHEDULE_URL = "http://game.capcom.com/world/steam/us/schedule-master.html?utc=0"

EVENTS_SHEET = "Events"
CONFIG_SHEET = "Config"

# Events worksheet headers, keyed by the Event field they hold.
COLUMN_NAMES = {
    "title": "Title",
    "level": "★",
    "start_date": "Start",
    "end_date": "End",
    "description": "Description",
    "status": "✔",
    "notes": "Notes",
    "tags": "Tags",
}

CONFIG_KEY_HEADER = "Key"
CONFIG_VALUE_HEADER = "Value"
CONFIG_KEYS = {
    "timezone": "Timezone",
    "ignore_tags": "Ignore Tags",
}

UNCHECKED = False

UTC_NAMES = {"z", "utc", "gmt"}
FIXED_OFFSET_REGEX = re.compile(r"^(?:GMT|UTC)?\s*([+-])(\d{1,2})(?::?(\d{2}))?$", re.IGNORECASE)


@dataclass
class Settings:
    spreadsheet_id: str
    google_client_secrets: str
    google_token_file: str
    base_url: str = BASE_SCHEDULE_URL
    master_rank_url: str = MASTER_RANK_SCHEDULE_URL
    fetch_timeout_ms: float = 30_000
    artifacts_dir: Optional[str] = None

    @property
    def source_urls(self) -> tuple[str, str]:
        return self.base_url, self.master_rank_url


@dataclass(frozen=True)
class EventConfig:
    timezone: str
    tzinfo: tzinfo
    ignore_tags: frozenset[str]


def resolve_timezone(value: str) -> tzinfo:
    """Resolve a Config sheet timezone (``Z``, ``-05:00``, ``GMT+9`` or an IANA name)."""
    name = (value or "").strip()
    if not name:
        raise ConfigError("Timezone is empty")
    if name.lower() in UTC_NAMES:
        return timezone.utc
    match = FIXED_OFFSET_REGEX.match(name)
    if match:
        sign, hours, minutes = match.groups()
        delta = timedelta(hours=int(hours), minutes=int(minutes or 0))
        if delta >= timedelta(hours=24):
            raise ConfigError(f"Timezone offset out of range: {value!r}")
        return timezone(-delta if sign == "-" else delta)
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError, OSError) as exc:
        raise ConfigError(f"Unknown timezone {value!r}") from exc


def parse_ignore_tags(value: str) -> frozenset[str]:
    return frozenset(part.strip() for part in (value or "").split(",") if part.strip())


def build_event_config(raw: dict[str, str]) -> EventConfig:
    for key, name in CONFIG_KEYS.items():
        if key not in raw:
            raise ConfigError(f"Config key [ {name} ] not found in sheet")
    timezone_name = str(raw["timezone"]).strip()
    return EventConfig(
        timezone=timezone_name,
        tzinfo=resolve_timezone(timezone_name),
        ignore_tags=parse_ignore_tags(str(raw["ignore_tags"])),
    )


def _get_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from None


def get_settings() -> Settings:
    settings = Settings(
        spreadsheet_id=os.getenv("SPREADSHEET_ID", ""),
        google_client_secrets=os.getenv("GOOGLE_CLIENT_SECRETS", "credentials.json"),
        google_token_file=os.getenv("GOOGLE_TOKEN_FILE", "token.json"),
        base_url=os.getenv("BASE_SCHEDULE_URL", BASE_SCHEDULE_URL),
        master_rank_url=os.getenv("MASTER_RANK_SCHEDULE_URL", MASTER_RANK_SCHEDULE_URL),
        fetch_timeout_ms=_get_float("FETCH_TIMEOUT_MS", 30_000),
        artifacts_dir=os.getenv("ARTIFACTS_DIR") or None,
    )
    if not settings.spreadsheet_id:
        logging.warning("SPREADSHEET_ID is not set")
    return settings
