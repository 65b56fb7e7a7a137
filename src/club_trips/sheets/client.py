"""Google Sheets API client.

Low-level cell access for one spreadsheet. Rows and columns are 1-based,
matching the sheet UI (row 1 is the header row).

## API Documentation

https://developers.google.com/sheets/api/reference/rest

## Authentication

Uses service account credentials (see `club_trips.auth.google`). The
spreadsheet must be shared with the service account's email as an editor.

All values are written with `valueInputOption=RAW`, so Sheets stores them
as the exact strings given.
"""

from __future__ import annotations

import logging
from typing import Any

from google.auth.exceptions import GoogleAuthError
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from club_trips.exceptions import ExternalServiceError

logger = logging.getLogger(__name__)


def column_letter(index: int) -> str:
    """Convert a 1-based column number to A1 letters (1 -> A, 27 -> AA)."""
    if index < 1:
        raise ValueError(f"Invalid column index: {index}")
    letters = ""
    n = index
    while n > 0:
        n, rem = divmod(n - 1, 26)
        letters = chr(65 + rem) + letters
    return letters


def sheet_range(sheet: str, cells: str | None = None) -> str:
    """Quote a sheet name for A1 notation, e.g. `'Trips'!B2`."""
    quoted = "'" + sheet.replace("'", "''") + "'"
    return f"{quoted}!{cells}" if cells else quoted


class GoogleSheetsClient:
    """Client for a single spreadsheet.

    Example:
        ```python
        client = GoogleSheetsClient(spreadsheet_id, credentials=creds)

        rows = client.read_rows("Trips")
        client.write_cells("Trips", 5, {3: "new-event-id"})
        client.delete_row("Trips", 5)
        ```
    """

    def __init__(
        self,
        spreadsheet_id: str,
        credentials: Any = None,
        service: Any = None,
    ):
        """Initialize the client.

        Args:
            spreadsheet_id: Spreadsheet to operate on
            credentials: google-auth credentials used to build the service
            service: Prebuilt `sheets` v4 service resource
        """
        self.spreadsheet_id = spreadsheet_id
        self._service = service or build(
            "sheets", "v4", credentials=credentials, cache_discovery=False
        )
        self._sheet_ids: dict[str, int] | None = None

    def _execute(self, request: Any, action: str) -> dict[str, Any]:
        try:
            return request.execute()
        except HttpError as e:
            logger.error(f"Sheets {action} failed: {e}")
            raise ExternalServiceError(
                f"Sheets API error while trying to {action}",
                service="sheets",
                status=e.resp.status,
            ) from e
        except (GoogleAuthError, OSError) as e:
            logger.error(f"Sheets {action} failed: {e}")
            raise ExternalServiceError(
                f"Sheets API error while trying to {action}",
                service="sheets",
            ) from e

    def _values(self) -> Any:
        return self._service.spreadsheets().values()

    def _load_sheet_ids(self) -> dict[str, int]:
        if self._sheet_ids is None:
            meta = self._execute(
                self._service.spreadsheets().get(
                    spreadsheetId=self.spreadsheet_id,
                    fields="sheets.properties",
                ),
                "read spreadsheet metadata",
            )
            self._sheet_ids = {
                sheet["properties"]["title"]: sheet["properties"]["sheetId"]
                for sheet in meta.get("sheets", [])
            }
        return self._sheet_ids

    def has_sheet(self, sheet: str) -> bool:
        """Check whether a sheet (tab) exists."""
        return sheet in self._load_sheet_ids()

    def add_sheet(self, sheet: str) -> None:
        """Create a new sheet tab."""
        result = self._execute(
            self._service.spreadsheets().batchUpdate(
                spreadsheetId=self.spreadsheet_id,
                body={"requests": [{"addSheet": {"properties": {"title": sheet}}}]},
            ),
            f"create sheet {sheet}",
        )
        logger.info(f"Created sheet {sheet}")
        replies = result.get("replies") or [{}]
        properties = replies[0].get("addSheet", {}).get("properties", {})
        if self._sheet_ids is not None and "sheetId" in properties:
            self._sheet_ids[sheet] = properties["sheetId"]
        else:
            self._sheet_ids = None

    def read_rows(self, sheet: str) -> list[list[str]]:
        """Read every non-empty row, header included.

        A missing sheet reads as no rows.
        """
        if not self.has_sheet(sheet):
            return []
        result = self._execute(
            self._values().get(
                spreadsheetId=self.spreadsheet_id,
                range=sheet_range(sheet),
            ),
            f"read {sheet}",
        )
        return [[str(cell) for cell in row] for row in result.get("values", [])]

    def write_row(self, sheet: str, row_index: int, values: list[str]) -> None:
        """Overwrite a row starting at column A."""
        self._execute(
            self._values().update(
                spreadsheetId=self.spreadsheet_id,
                range=sheet_range(sheet, f"A{row_index}"),
                valueInputOption="RAW",
                body={"values": [values]},
            ),
            f"write row {row_index} of {sheet}",
        )

    def write_cells(self, sheet: str, row_index: int, cells: dict[int, str]) -> None:
        """Write several cells of one row in a single request.

        Args:
            sheet: Sheet name
            row_index: 1-based row
            cells: 1-based column -> value
        """
        data = [
            {
                "range": sheet_range(sheet, f"{column_letter(col)}{row_index}"),
                "values": [[value]],
            }
            for col, value in sorted(cells.items())
        ]
        self._execute(
            self._values().batchUpdate(
                spreadsheetId=self.spreadsheet_id,
                body={"valueInputOption": "RAW", "data": data},
            ),
            f"update row {row_index} of {sheet}",
        )

    def append_row(self, sheet: str, values: list[str]) -> None:
        """Append a row after the last non-empty row."""
        self._execute(
            self._values().append(
                spreadsheetId=self.spreadsheet_id,
                range=sheet_range(sheet, "A1"),
                valueInputOption="RAW",
                insertDataOption="INSERT_ROWS",
                body={"values": [values]},
            ),
            f"append to {sheet}",
        )

    def delete_row(self, sheet: str, row_index: int) -> None:
        """Delete a row, shifting the rows below it up."""
        sheet_ids = self._load_sheet_ids()
        if sheet not in sheet_ids:
            raise ExternalServiceError(f'Sheet "{sheet}" not found', service="sheets")

        self._execute(
            self._service.spreadsheets().batchUpdate(
                spreadsheetId=self.spreadsheet_id,
                body={
                    "requests": [
                        {
                            "deleteDimension": {
                                "range": {
                                    "sheetId": sheet_ids[sheet],
                                    "dimension": "ROWS",
                                    "startIndex": row_index - 1,  # 0-based
                                    "endIndex": row_index,
                                }
                            }
                        }
                    ]
                },
            ),
            f"delete row {row_index} of {sheet}",
        )
