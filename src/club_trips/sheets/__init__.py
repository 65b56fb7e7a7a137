"""Spreadsheet storage.

Trips, signup requests, suggestions and site settings are rows in one
Google Sheets spreadsheet. `GoogleSheetsClient` talks to the API;
`RowStore` reads and writes header-keyed rows on top of it.
"""

from club_trips.sheets.client import GoogleSheetsClient
from club_trips.sheets.schema import REQUESTS, SITE_SETTINGS, SUGGESTIONS, TRIPS, TableSchema
from club_trips.sheets.store import RowStore, SheetRow, SheetsClient

__all__ = [
    "GoogleSheetsClient",
    "TableSchema",
    "TRIPS",
    "REQUESTS",
    "SUGGESTIONS",
    "SITE_SETTINGS",
    "RowStore",
    "SheetRow",
    "SheetsClient",
]
