from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, List, Optional

from .models import Event
from .schedule import FetchText, load_events
from .sheet import MergeResult, SpreadsheetSession


def run_update(
    workbook,
    fetch_text: FetchText,
    urls: Iterable[str],
    today: Optional[date] = None,
    dry_run: bool = False,
) -> tuple[List[Event], MergeResult]:
    """Load the schedules and merge them into the Events sheet."""
    session = SpreadsheetSession(workbook, dry_run=dry_run)
    config = session.load_config()
    events = load_events(config, fetch_text, urls, today=today)
    if not events:
        logging.warning("No events parsed; nothing to merge")
    result = session.merge_events(events)
    return events, result
