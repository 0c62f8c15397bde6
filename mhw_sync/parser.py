from __future__ import annotations

import logging
from datetime import date, tzinfo
from typing import Callable, List, Optional

from bs4 import BeautifulSoup, Tag

from .errors import ExtractionError
from .models import Event, EventTag
from .utils import collapse_ws, format_level, normalize_date, resolve_source_offset

ROW_SELECTOR = ".t1, .t2, .t3"
TERM_SEPARATOR = "〜"


def _has_class(el: Tag, name: str) -> bool:
    return name in (el.get("class") or [])


TAG_RULES: dict[EventTag, Callable[[Tag], bool]] = {
    EventTag.NEW: lambda el: _has_class(el, "new"),
    EventTag.PS4: lambda el: el.select_one(".ps4") is not None,
    EventTag.XBOX: lambda el: el.select_one(".xbox") is not None,
    EventTag.COLLAB: lambda el: _has_class(el, "sc"),
}


def classify_tags(row: Tag) -> frozenset[EventTag]:
    return frozenset(tag for tag, rule in TAG_RULES.items() if rule(row))


def _first_child(node: Optional[Tag]) -> Optional[Tag]:
    if node is None:
        return None
    return node.find(True, recursive=False)


def _require(node: Optional[Tag], what: str) -> Tag:
    if node is None:
        raise ExtractionError(f"Schedule row is missing {what}")
    return node


def _extract_title(row: Tag) -> str:
    title = _require(_first_child(row.select_one(".title")), "a title")
    return collapse_ws(title.get_text())


def _extract_description(row: Tag) -> str:
    quest = _require(row.select_one(".quest"), "a quest block")
    texts = quest.select(".txt")
    if not texts:
        raise ExtractionError("Schedule row is missing quest text")
    return collapse_ws("".join(node.get_text() for node in texts))


def _extract_level(row: Tag) -> str:
    level = _require(_first_child(row.select_one(".level")), "a level")
    return format_level(level.get_text())


def _extract_term(row: Tag) -> tuple[str, str]:
    term = _require(_first_child(row.select_one("td.term")), "a term")
    term_text = _require(_first_child(term.select_one(".txt")), "term text")
    parts = term_text.get_text().split(TERM_SEPARATOR)
    if len(parts) != 2:
        raise ExtractionError(f"Term '{term_text.get_text()}' is not a start{TERM_SEPARATOR}end pair")
    return parts[0], parts[1]


def extract_event(row: Tag, source_offset: str, target_tz: tzinfo, today: date) -> Event:
    title = _extract_title(row)
    start_token, end_token = _extract_term(row)
    start, start_date = normalize_date(start_token, source_offset, target_tz, today)
    end, end_date = normalize_date(end_token, source_offset, target_tz, today)
    if end < start:
        logging.warning("'%s' ends before it starts (%s - %s)", title, start_date, end_date)
    return Event(
        title=title,
        description=_extract_description(row),
        level=_extract_level(row),
        start_date=start_date,
        end_date=end_date,
        tags=classify_tags(row),
        start=start,
        end=end,
    )


def extract_source_offset(soup: BeautifulSoup) -> str:
    annotation = _first_child(soup.select_one(".terms"))
    return resolve_source_offset(annotation.get_text() if annotation else "")


def parse_events_from_html(html: str, target_tz: tzinfo, today: date) -> List[Event]:
    soup = BeautifulSoup(html, "lxml")
    source_offset = extract_source_offset(soup)
    logging.debug("Schedule timestamps are in UTC offset %s", source_offset)

    events: List[Event] = []
    for row in soup.select(ROW_SELECTOR):
        events.append(extract_event(row, source_offset, target_tz, today))
    return events
