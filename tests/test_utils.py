from datetime import date, datetime, timedelta, timezone

import pytest

from mhw_sync.errors import ParseError
from mhw_sync.utils import (
    collapse_ws,
    format_level,
    infer_year,
    normalize_date,
    offset_to_tzinfo,
    resolve_source_offset,
)

EST = timezone(timedelta(hours=-5))


@pytest.mark.parametrize(
    "text, expected",
    [
        ("Event Schedule (UTC)", "Z"),
        ("Event Schedule (UTC+9)", "+09:00"),
        ("Event Schedule (UTC+09)", "+09:00"),
        ("(UTC-5) local time", "-05:00"),
        ("(UTC-10)", "-10:00"),
    ],
)
def test_resolve_source_offset(text, expected):
    assert resolve_source_offset(text) == expected


def test_resolve_source_offset_without_annotation():
    with pytest.raises(ParseError):
        resolve_source_offset("Event Schedule")


def test_offset_to_tzinfo():
    assert offset_to_tzinfo("Z") is timezone.utc
    assert offset_to_tzinfo("-05:00").utcoffset(None) == timedelta(hours=-5)
    with pytest.raises(ParseError):
        offset_to_tzinfo("+9")


def test_infer_year_late_months_in_january_are_last_year():
    assert infer_year(12, date(2025, 1, 10)) == 2024
    assert infer_year(10, date(2025, 2, 28)) == 2024


def test_infer_year_keeps_current_year():
    assert infer_year(6, date(2025, 1, 10)) == 2025
    assert infer_year(6, date(2025, 9, 1)) == 2025
    assert infer_year(12, date(2025, 3, 1)) == 2025
    assert infer_year(1, date(2025, 1, 1)) == 2025


def test_normalize_date_converts_between_offsets():
    instant, text = normalize_date("09/01 09:00", "+09:00", EST, date(2024, 9, 15))
    assert instant == datetime(2024, 9, 1, 0, 0, tzinfo=timezone.utc)
    assert text == "08/31/2024 07:00PM"


def test_normalize_date_uses_inferred_year():
    _, text = normalize_date(" 12/24 12:00 ", "Z", timezone.utc, date(2025, 1, 5))
    assert text == "12/24/2024 12:00PM"


@pytest.mark.parametrize("token", ["9/1", "2024-09-01 09:00", "09/01 9am", ""])
def test_normalize_date_rejects_bad_tokens(token):
    with pytest.raises(ParseError):
        normalize_date(token, "Z", timezone.utc, date(2024, 9, 1))


def test_normalize_date_rejects_impossible_dates():
    with pytest.raises(ParseError):
        normalize_date("02/30 10:00", "Z", timezone.utc, date(2024, 9, 1))


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("3", "3★"),
        ("3★", "3★"),
        ("MR 1★", "1✪"),
        ("MR 12", "12✪"),
        (" 9★ ", "9★"),
    ],
)
def test_format_level(raw, expected):
    assert format_level(raw) == expected


def test_collapse_ws():
    assert collapse_ws("Slay\n  the   great\tJagras.\n") == "Slay the great Jagras."
