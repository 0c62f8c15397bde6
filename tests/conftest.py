from __future__ import annotations

from typing import Any, Optional

import pytest

from mhw_sync.errors import ConfigError

EVENTS_HEADER = ["Title", "★", "Start", "End", "Description", "✔", "Notes", "Tags"]


class FakeTable:
    """In-memory stand-in for a worksheet, 1-based like the real one."""

    def __init__(self, title: str, rows: list[list[Any]]):
        self.title = title
        self.rows = [list(row) for row in rows]
        self.writes: list[tuple[int, int, Any]] = []

    def row_count(self) -> int:
        return len(self.rows)

    def get_cell(self, row: int, column: int) -> Any:
        if row > len(self.rows) or column > len(self.rows[row - 1]):
            return None
        return self.rows[row - 1][column - 1]

    def find_column(self, header: str) -> Optional[int]:
        for idx, value in enumerate(self.rows[0] if self.rows else [], start=1):
            if value == header:
                return idx
        return None

    def find_row(self, column: int, value: str) -> Optional[int]:
        for row in range(2, len(self.rows) + 1):
            cell = self.get_cell(row, column)
            if cell is not None and str(cell) == value:
                return row
        return None

    def set_cell(self, row: int, column: int, value: Any) -> None:
        self.writes.append((row, column, value))
        while len(self.rows) < row:
            self.rows.append([])
        cells = self.rows[row - 1]
        while len(cells) < column:
            cells.append("")
        cells[column - 1] = value

    def column(self, header: str) -> list[Any]:
        idx = self.find_column(header)
        return [self.get_cell(row, idx) for row in range(2, len(self.rows) + 1)]


class FakeWorkbook:
    def __init__(self, **sheets: FakeTable):
        self.sheets = sheets

    def worksheet(self, name: str) -> FakeTable:
        if name not in self.sheets:
            raise ConfigError(f"No sheet named '{name}'.")
        return self.sheets[name]


@pytest.fixture
def events_table() -> FakeTable:
    return FakeTable("Events", [EVENTS_HEADER])


@pytest.fixture
def config_table() -> FakeTable:
    return FakeTable(
        "Config",
        [
            ["Key", "Value"],
            ["Timezone", "-05:00"],
            ["Ignore Tags", "Xbox, Collab"],
        ],
    )


@pytest.fixture
def workbook(events_table, config_table) -> FakeWorkbook:
    return FakeWorkbook(Events=events_table, Config=config_table)


def _row_html(
    title: str,
    term: str,
    level: str = "3★",
    classes: str = "t1",
    platforms: tuple[str, ...] = (),
    description: str = "Slay a monster.",
) -> str:
    platform_html = "".join(f'<span class="{p}">{p}</span>' for p in platforms)
    return f"""
    <tr class="{classes}">
      <td class="quest">
        <div class="title"><span>{title}</span></div>
        <p class="txt">{description}</p>
      </td>
      <td class="level"><span>{level}</span></td>
      <td class="term"><div><p class="txt"><span>{term}</span></p></div></td>
      <td class="platform">{platform_html}</td>
    </tr>
    """


def _page_html(rows: list[str], annotation: str = "Event Schedule (UTC+09)") -> str:
    return f"""
    <html><body>
      <div class="terms"><p>{annotation}</p><p>Times are local.</p></div>
      <table>{"".join(rows)}</table>
    </body></html>
    """


@pytest.fixture
def row_html():
    return _row_html


@pytest.fixture
def page_html():
    return _page_html
