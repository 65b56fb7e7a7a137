"""FastAPI application and routes.

This module provides the REST API for the club trips service.

## API Structure

- /api/trips - Trip listing and officer trip management
- /api/sync - Calendar reconciliation
- /api/rsvp, /api/suggest - Member signup requests and suggestions
- /api/site-settings - Editable site copy
- /api/officer - Officer passcode check
- /health - Health check

## Authentication

Officer endpoints require the shared passcode as `officerSecret` in the
JSON body. Public endpoints need no credentials.

## Responses

All responses use the envelope `{"ok": true, "data": ...}` or
`{"ok": false, "error": "..."}`.
"""

from club_trips.api.app import create_app

__all__ = ["create_app"]
