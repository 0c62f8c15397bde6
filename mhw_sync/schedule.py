from __future__ import annotations

import logging
import re
from datetime import date, datetime
from pathlib import Path
from typing import Callable, Iterable, List, Optional

from playwright.sync_api import APIRequestContext, Error as PlaywrightError, Playwright, sync_playwright

from .config import EventConfig
from .errors import FetchError
from .models import Event
from .parser import parse_events_from_html

FetchText = Callable[[str], str]


class ScheduleFetcher:
    """Fetches schedule pages over a Playwright API request context.

    Use as a context manager so the underlying driver is always stopped::

        with ScheduleFetcher() as fetcher:
            html = fetcher.fetch_text(url)
    """

    def __init__(self, timeout_ms: float = 30_000, artifacts_dir: Optional[str] = None):
        self.timeout_ms = timeout_ms
        self.artifacts_dir = Path(artifacts_dir) if artifacts_dir else None
        self._playwright: Optional[Playwright] = None
        self._request: Optional[APIRequestContext] = None

    def __enter__(self) -> "ScheduleFetcher":
        self._playwright = sync_playwright().start()
        try:
            self._request = self._playwright.request.new_context(extra_http_headers={"Accept": "text/html"})
        except BaseException:
            self._playwright.stop()
            self._playwright = None
            raise
        return self

    def __exit__(self, *exc_info) -> None:
        if self._request is not None:
            self._request.dispose()
            self._request = None
        if self._playwright is not None:
            self._playwright.stop()
            self._playwright = None

    def fetch_text(self, url: str) -> str:
        if self._request is None:
            raise RuntimeError("ScheduleFetcher must be used as a context manager")
        logging.info("Fetching schedule %s", url)
        try:
            resp = self._request.get(url, timeout=self.timeout_ms)
        except PlaywrightError as exc:
            raise FetchError(f"Failed to fetch {url}: {exc}") from exc
        if not resp.ok:
            raise FetchError(f"Failed to fetch {url}: HTTP {resp.status}")
        html = resp.text()
        if self.artifacts_dir is not None:
            self._save_artifact(url, html)
        return html

    def _save_artifact(self, url: str, html: str) -> None:
        self.artifacts_dir.mkdir(parents=True, exist_ok=True)
        name = re.sub(r"[^A-Za-z0-9._-]+", "_", url.split("://", 1)[-1]).strip("_")
        artifact_path = self.artifacts_dir / f"{name}.html"
        artifact_path.write_text(html, encoding="utf-8")
        logging.debug("Saved page to %s", artifact_path)


def dedupe_by_title(events: Iterable[Event]) -> List[Event]:
    seen: set[str] = set()
    unique: List[Event] = []
    for event in events:
        if event.title in seen:
            logging.debug("Dropping later duplicate of '%s' (%s)", event.title, event.start_date)
            continue
        seen.add(event.title)
        unique.append(event)
    return unique


def filter_ignored(events: Iterable[Event], ignore_tags: Iterable[str]) -> List[Event]:
    ignored = set(ignore_tags)
    return [event for event in events if not any(tag.value in ignored for tag in event.tags)]


def load_events(
    config: EventConfig,
    fetch_text: FetchText,
    urls: Iterable[str],
    today: Optional[date] = None,
) -> List[Event]:
    if today is None:
        today = datetime.now(config.tzinfo).date()

    all_events: List[Event] = []
    for url in urls:
        events = parse_events_from_html(fetch_text(url), config.tzinfo, today)
        logging.info("Parsed %d events from %s", len(events), url)
        all_events.extend(events)

    # sorted() is stable, so equal start times keep page order.
    ordered = sorted(all_events, key=lambda event: event.start)
    unique = dedupe_by_title(ordered)
    kept = filter_ignored(unique, config.ignore_tags)
    logging.info(
        "Loaded %d events (%d duplicates, %d ignored by tag)",
        len(kept),
        len(ordered) - len(unique),
        len(unique) - len(kept),
    )
    return kept
