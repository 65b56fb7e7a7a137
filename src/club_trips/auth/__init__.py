"""Authentication helpers.

- Service account credentials for the Google APIs
- Shared-secret officer authorization

## Usage

```python
from club_trips.auth import require_officer

require_officer(body.officer_secret, settings)  # raises AuthorizationError
```
"""

from club_trips.auth.google import (
    CredentialsNotConfiguredError,
    load_service_account_credentials,
)
from club_trips.auth.officer import is_officer, require_officer

__all__ = [
    "CredentialsNotConfiguredError",
    "load_service_account_credentials",
    "is_officer",
    "require_officer",
]
