from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, List

from .config import (
    COLUMN_NAMES,
    CONFIG_KEY_HEADER,
    CONFIG_KEYS,
    CONFIG_SHEET,
    CONFIG_VALUE_HEADER,
    EVENTS_SHEET,
    UNCHECKED,
    EventConfig,
    build_event_config,
)
from .errors import ConfigError
from .models import Event

# Columns the schedule owns, in write order. Status and Notes belong to the operator.
SOURCE_COLUMNS = ("title", "start_date", "level", "end_date", "description", "tags")


@dataclass
class MergeResult:
    created: List[str] = field(default_factory=list)
    updated: List[str] = field(default_factory=list)


def named_column(table, name: str) -> int:
    column = table.find_column(name)
    if column is None:
        raise ConfigError(f"Could not find column '{name}' in sheet '{table.title}'")
    return column


class SpreadsheetSession:
    """Reads and writes the linked spreadsheet for a single update run.

    Column positions are looked up by header when the session is created, so
    the Events sheet columns can be reordered freely.
    """

    def __init__(self, workbook, dry_run: bool = False):
        self.workbook = workbook
        self.dry_run = dry_run
        self.events = workbook.worksheet(EVENTS_SHEET)
        self.columns = {key: named_column(self.events, name) for key, name in COLUMN_NAMES.items()}

    def load_config(self) -> EventConfig:
        sheet = self.workbook.worksheet(CONFIG_SHEET)
        key_col = named_column(sheet, CONFIG_KEY_HEADER)
        value_col = named_column(sheet, CONFIG_VALUE_HEADER)

        raw: dict[str, str] = {}
        for key, name in CONFIG_KEYS.items():
            row = sheet.find_row(key_col, name)
            if row is None:
                raise ConfigError(f"Config key [ {name} ] not found in sheet")
            value = sheet.get_cell(row, value_col)
            raw[key] = "" if value is None else str(value)
            logging.info("Loaded config property %s: %s", key, raw[key])
        return build_event_config(raw)

    def upsert_event(self, event: Event) -> bool:
        """Write one event into the Events sheet. Returns True if a row was created."""
        existing = self.events.find_row(self.columns["title"], event.title)
        row = existing if existing is not None else self.events.row_count() + 1
        action = "UPDATE" if existing is not None else "CREATE"
        logging.info("%s %s %s-%s (row %d)", action, event.title, event.start_date, event.end_date, row)
        if self.dry_run:
            return existing is None

        values = event.to_row()
        for key in SOURCE_COLUMNS:
            self.events.set_cell(row, self.columns[key], values[key])
        if existing is None:
            self.events.set_cell(row, self.columns["status"], UNCHECKED)
        return existing is None

    def merge_events(self, events: Iterable[Event]) -> MergeResult:
        result = MergeResult()
        for event in events:
            if self.upsert_event(event):
                result.created.append(event.title)
            else:
                result.updated.append(event.title)
        logging.info("Merge complete. %d created, %d updated", len(result.created), len(result.updated))
        return result
