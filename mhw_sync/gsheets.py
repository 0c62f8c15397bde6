from __future__ import annotations

import logging
from typing import Any, List, Optional

from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from .config import Settings
from .errors import ConfigError

SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]
HEADER_ROW = 1


def _load_credentials(client_secrets_file: str, token_file: str) -> Credentials:
    creds = None
    if token_file:
        try:
            creds = Credentials.from_authorized_user_file(token_file, SCOPES)
        except (OSError, ValueError):
            creds = None
    if not creds or not creds.valid:
        if creds and creds.expired and creds.refresh_token:
            creds.refresh(Request())
        else:
            flow = InstalledAppFlow.from_client_secrets_file(client_secrets_file, SCOPES)
            creds = flow.run_local_server(port=0)
        with open(token_file, "w") as token:
            token.write(creds.to_json())
    return creds


def build_service(client_secrets_file: str, token_file: str):
    creds = _load_credentials(client_secrets_file, token_file)
    return build("sheets", "v4", credentials=creds)


def column_letter(column: int) -> str:
    letters = ""
    while column > 0:
        column, rem = divmod(column - 1, 26)
        letters = chr(ord("A") + rem) + letters
    return letters


def quote_sheet(title: str) -> str:
    return "'" + title.replace("'", "''") + "'"


def a1_cell(title: str, row: int, column: int) -> str:
    return f"{quote_sheet(title)}!{column_letter(column)}{row}"


class Worksheet:
    """One tab of the spreadsheet, addressed with 1-based rows and columns.

    Cell values are read once when the worksheet is opened and the local copy
    is kept in step with every write, so lookups do not hit the API.
    """

    def __init__(self, service, spreadsheet_id: str, title: str):
        self.service = service
        self.spreadsheet_id = spreadsheet_id
        self.title = title
        self._values = self._fetch_values()

    def _fetch_values(self) -> List[List[Any]]:
        result = (
            self.service.spreadsheets()
            .values()
            .get(spreadsheetId=self.spreadsheet_id, range=quote_sheet(self.title))
            .execute()
        )
        values = result.get("values", [])
        logging.debug("Read %d rows from sheet '%s'", len(values), self.title)
        return values

    def row_count(self) -> int:
        return len(self._values)

    def get_cell(self, row: int, column: int) -> Any:
        if row > len(self._values):
            return None
        cells = self._values[row - 1]
        if column > len(cells):
            return None
        return cells[column - 1]

    def find_column(self, header: str) -> Optional[int]:
        headers = self._values[HEADER_ROW - 1] if self._values else []
        for idx, value in enumerate(headers, start=1):
            if str(value).strip() == header:
                return idx
        return None

    def find_row(self, column: int, value: str) -> Optional[int]:
        for row in range(HEADER_ROW + 1, len(self._values) + 1):
            cell = self.get_cell(row, column)
            if cell is not None and str(cell) == value:
                return row
        return None

    def set_cell(self, row: int, column: int, value: Any) -> None:
        (
            self.service.spreadsheets()
            .values()
            .update(
                spreadsheetId=self.spreadsheet_id,
                range=a1_cell(self.title, row, column),
                valueInputOption="USER_ENTERED",
                body={"values": [[value]]},
            )
            .execute()
        )
        while len(self._values) < row:
            self._values.append([])
        cells = self._values[row - 1]
        while len(cells) < column:
            cells.append("")
        cells[column - 1] = value


class Workbook:
    def __init__(self, service, spreadsheet_id: str):
        self.service = service
        self.spreadsheet_id = spreadsheet_id
        try:
            meta = (
                service.spreadsheets()
                .get(spreadsheetId=spreadsheet_id, fields="sheets.properties.title")
                .execute()
            )
        except HttpError as exc:
            raise ConfigError(f"Cannot open spreadsheet {spreadsheet_id}: {exc}") from exc
        self.sheet_titles = [sheet["properties"]["title"] for sheet in meta.get("sheets", [])]

    def worksheet(self, name: str) -> Worksheet:
        if name not in self.sheet_titles:
            raise ConfigError(f"No sheet named '{name}'.")
        return Worksheet(self.service, self.spreadsheet_id, name)


def open_workbook(settings: Settings) -> Workbook:
    if not settings.spreadsheet_id:
        raise ConfigError("SPREADSHEET_ID is not set")
    service = build_service(settings.google_client_secrets, settings.google_token_file)
    return Workbook(service, settings.spreadsheet_id)
