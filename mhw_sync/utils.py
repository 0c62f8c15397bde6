from __future__ import annotations

import re
from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Tuple

from .errors import ParseError

TZ_ANNOTATION_REGEX = re.compile(r"\(UTC([+-]\d{1,2})?\)")
OFFSET_REGEX = re.compile(r"^([+-])(\d{2}):(\d{2})$")
DATE_TOKEN_REGEX = re.compile(r"^\s*(\d{1,2})/(\d{1,2})\s+(\d{1,2}):(\d{2})\s*$")
WHITESPACE_REGEX = re.compile(r"\s+")

DISPLAY_FORMAT = "%m/%d/%Y %I:%M%p"
STAR = "★"
MASTER_RANK_STAR = "✪"


def collapse_ws(value: str) -> str:
    return WHITESPACE_REGEX.sub(" ", (value or "").replace("\n", " ")).strip()


def resolve_source_offset(text: str) -> str:
    """Turn a ``(UTC+9)`` style annotation into an ISO 8601 offset.

    ``(UTC)`` gives ``Z``, ``(UTC+09)`` and ``(UTC+9)`` both give ``+09:00``.
    """
    match = TZ_ANNOTATION_REGEX.search(text or "")
    if not match:
        raise ParseError(f"Can't parse tz, raw value: {text!r}")
    raw = match.group(1)
    if not raw:
        return "Z"
    if len(raw) == 3:
        return f"{raw}:00"
    return f"{raw[0]}0{raw[1]}:00"


def offset_to_tzinfo(offset: str) -> tzinfo:
    if offset == "Z":
        return timezone.utc
    match = OFFSET_REGEX.match(offset)
    if not match:
        raise ParseError(f"Invalid UTC offset '{offset}'")
    sign, hours, minutes = match.groups()
    delta = timedelta(hours=int(hours), minutes=int(minutes))
    return timezone(-delta if sign == "-" else delta)


def infer_year(month: int, today: date) -> int:
    # Oct-Dec entries seen during Jan/Feb belong to last year's schedule.
    if month >= 10 and today.month <= 2:
        return today.year - 1
    return today.year


def parse_date_token(token: str) -> Tuple[int, int, int, int]:
    match = DATE_TOKEN_REGEX.match(token or "")
    if not match:
        raise ParseError(f"Cannot parse date from '{token}'")
    month, day, hour, minute = (int(part) for part in match.groups())
    return month, day, hour, minute


def build_datetime(token: str, source_offset: str, today: date) -> datetime:
    month, day, hour, minute = parse_date_token(token)
    year = infer_year(month, today)
    try:
        return datetime(year, month, day, hour, minute, tzinfo=offset_to_tzinfo(source_offset))
    except ValueError as exc:
        raise ParseError(f"Invalid date '{token}' for year {year}: {exc}") from exc


def format_datetime(value: datetime, target_tz: tzinfo) -> str:
    return value.astimezone(target_tz).strftime(DISPLAY_FORMAT)


def normalize_date(token: str, source_offset: str, target_tz: tzinfo, today: date) -> Tuple[datetime, str]:
    instant = build_datetime(token, source_offset, today)
    return instant, format_datetime(instant, target_tz)


def format_level(text: str) -> str:
    level = (text or "").replace(STAR, "").strip()
    if "MR" not in level:
        return level + STAR
    return level.replace("MR ", "").strip() + MASTER_RANK_STAR
