from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

from ics import Calendar, Event as IcsEvent

from .models import Event


def build_calendar(events: Iterable[Event]) -> Calendar:
    cal = Calendar()
    for event in events:
        ev = IcsEvent()
        ev.name = f"[{event.level}] {event.title}"
        ev.begin = event.start
        ev.end = event.end
        description = event.description
        if event.tags:
            description = f"{description}\n\nTags: {event.tags_text()}"
        ev.description = description
        cal.events.add(ev)
    return cal


def write_ics(events: Iterable[Event], path: str) -> Path:
    events = list(events)
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    with open(out, "w", encoding="utf-8") as f:
        f.writelines(build_calendar(events).serialize_iter())
    logging.info("Wrote %d events to %s", len(events), out)
    return out
