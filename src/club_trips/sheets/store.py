"""Header-driven row storage on top of a spreadsheet.

The first row of each sheet names its columns; every other row is a record
read as `{column: value}`. Unknown columns read as empty strings.

Row identity is positional: `SheetRow.index` is the 1-based sheet row,
header included, so the first record is row 2. Inserting or deleting rows
shifts the rows below, so callers must re-resolve an index (for example
with `find_row_by_column`) right before each mutation instead of holding
on to it.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Protocol

from club_trips.exceptions import SheetSchemaError
from club_trips.sheets.schema import TableSchema

logger = logging.getLogger(__name__)

HEADER_ROW = 1


class SheetsClient(Protocol):
    """Cell-level spreadsheet access (see `GoogleSheetsClient`)."""

    def has_sheet(self, sheet: str) -> bool: ...

    def add_sheet(self, sheet: str) -> None: ...

    def read_rows(self, sheet: str) -> list[list[str]]: ...

    def write_row(self, sheet: str, row_index: int, values: list[str]) -> None: ...

    def write_cells(self, sheet: str, row_index: int, cells: dict[int, str]) -> None: ...

    def append_row(self, sheet: str, values: list[str]) -> None: ...

    def delete_row(self, sheet: str, row_index: int) -> None: ...


@dataclass
class SheetRow:
    """One record of a table."""

    index: int
    values: dict[str, str] = field(default_factory=dict)

    def get(self, column: str, default: str = "") -> str:
        return self.values.get(column, default)


def _column_map(headers: list[str]) -> dict[str, int]:
    """Header name -> 1-based column; blank headers skipped, first one wins."""
    columns: dict[str, int] = {}
    for i, name in enumerate(headers):
        name = name.strip()
        if name and name not in columns:
            columns[name] = i + 1
    return columns


class RowStore:
    """Tables of header-keyed rows.

    Example:
        ```python
        store = RowStore(GoogleSheetsClient(spreadsheet_id, credentials=creds))

        store.append_row(TRIPS, {"tripId": "2024-06-01-hike-ab12", "title": "Hike"})
        row = store.find_row_by_column("Trips", "tripId", "2024-06-01-hike-ab12")
        store.update_cell("Trips", row.index, "eventId", "evt123")
        ```
    """

    def __init__(self, client: SheetsClient):
        self.client = client

    def _read(self, table: str) -> tuple[list[str], list[list[str]]]:
        rows = self.client.read_rows(table)
        if not rows:
            return [], []
        return rows[0], rows[1:]

    def headers(self, table: str) -> list[str]:
        """Column names from the header row."""
        headers, _ = self._read(table)
        return [h.strip() for h in headers]

    def list_rows(self, table: str) -> list[SheetRow]:
        """Read every record of a table, in sheet order."""
        headers, data = self._read(table)
        columns = _column_map(headers)

        rows = []
        for offset, raw in enumerate(data):
            values = {
                name: (raw[col - 1] if col - 1 < len(raw) else "")
                for name, col in columns.items()
            }
            rows.append(SheetRow(index=offset + HEADER_ROW + 1, values=values))
        return rows

    def get_column_index(self, table: str, column: str) -> int | None:
        """1-based column of a header, or None if the table lacks it."""
        return _column_map(self.headers(table)).get(column)

    def find_row_by_column(self, table: str, column: str, value: str) -> SheetRow | None:
        """First record whose `column` equals `value` (whitespace-trimmed)."""
        wanted = value.strip()
        for row in self.list_rows(table):
            if row.get(column).strip() == wanted:
                return row
        return None

    def ensure_table(self, schema: TableSchema) -> dict[str, int]:
        """Create the table or add its missing columns.

        Existing columns keep their position and name; missing ones are
        appended after the last header.

        Returns:
            Header name -> 1-based column
        """
        headers, _ = self._read(schema.name)
        columns = _column_map(headers)

        if not columns:
            if not headers and not self.client.has_sheet(schema.name):
                self.client.add_sheet(schema.name)
            self.client.write_row(schema.name, HEADER_ROW, list(schema.columns))
            logger.info(f"Initialized {schema.name} header row")
            return _column_map(list(schema.columns))

        missing = [c for c in schema.columns if c not in columns]
        if missing:
            next_col = len(headers) + 1
            cells = {}
            for name in missing:
                cells[next_col] = name
                columns[name] = next_col
                next_col += 1
            self.client.write_cells(schema.name, HEADER_ROW, cells)
            logger.info(f"Added columns to {schema.name}: {', '.join(missing)}")

        return columns

    def append_row(self, schema: TableSchema, values: Mapping[str, str]) -> None:
        """Append a record, placing each value under its header.

        Values for columns the table does not have are dropped.
        """
        columns = self.ensure_table(schema)
        width = max(columns.values())
        row = [""] * width
        for name, value in values.items():
            col = columns.get(name)
            if col:
                row[col - 1] = "" if value is None else str(value)
        self.client.append_row(schema.name, row)

    def update_fields(self, table: str, row_index: int, values: Mapping[str, str]) -> None:
        """Overwrite several cells of one record.

        Raises:
            SheetSchemaError: If the table lacks any of the columns; nothing
                is written in that case
        """
        if row_index <= HEADER_ROW:
            raise ValueError(f"Row {row_index} is not a data row")

        columns = _column_map(self.headers(table))
        missing = [name for name in values if name not in columns]
        if missing:
            raise SheetSchemaError(
                f'{table} sheet is missing column(s): {", ".join(missing)}'
            )

        self.client.write_cells(
            table,
            row_index,
            {columns[name]: "" if value is None else str(value) for name, value in values.items()},
        )

    def update_cell(self, table: str, row_index: int, column: str, value: str) -> None:
        """Overwrite one cell of a record."""
        self.update_fields(table, row_index, {column: value})

    def delete_row(self, table: str, row_index: int) -> None:
        """Delete a record; rows below it move up by one."""
        if row_index <= HEADER_ROW:
            raise ValueError(f"Row {row_index} is not a data row")
        self.client.delete_row(table, row_index)
