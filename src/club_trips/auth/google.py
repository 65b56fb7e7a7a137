"""Google service account credentials.

The backend talks to Sheets and Calendar as a service account rather than
as a signed-in user. Provide the key either as a file path
(`GOOGLE_SERVICE_ACCOUNT_FILE`) or inline JSON
(`GOOGLE_SERVICE_ACCOUNT_JSON`, convenient for container secrets).

## Setup

1. Create a service account in Google Cloud and download a JSON key
2. Enable the Google Sheets API and Google Calendar API for the project
3. Share the spreadsheet with the service account email (Editor)
4. Share the calendar with the service account email
   ("Make changes to events")
"""

from __future__ import annotations

import json
import logging

from google.oauth2 import service_account

from club_trips.config import Settings

logger = logging.getLogger(__name__)


class CredentialsNotConfiguredError(RuntimeError):
    """Raised when no service account key is configured."""


def load_service_account_credentials(
    settings: Settings,
) -> service_account.Credentials:
    """Load service account credentials for the configured scopes.

    Inline JSON takes precedence over the key file.

    Raises:
        CredentialsNotConfiguredError: If neither key source is set
    """
    scopes = settings.google_scopes

    if settings.google_service_account_json:
        info = json.loads(settings.google_service_account_json)
        logger.debug(f"Using inline service account {info.get('client_email')}")
        return service_account.Credentials.from_service_account_info(info, scopes=scopes)

    if settings.google_service_account_file:
        logger.debug(f"Using service account key file {settings.google_service_account_file}")
        return service_account.Credentials.from_service_account_file(
            settings.google_service_account_file, scopes=scopes
        )

    raise CredentialsNotConfiguredError(
        "Set GOOGLE_SERVICE_ACCOUNT_FILE or GOOGLE_SERVICE_ACCOUNT_JSON"
    )
