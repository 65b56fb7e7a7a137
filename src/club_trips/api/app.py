"""FastAPI application factory.

Creates and configures the FastAPI application with all routes and middleware.

## Usage

```python
from club_trips.api import create_app

app = create_app()

# Run with uvicorn
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
```

## Configuration

The app is configured via environment variables. See `club_trips.config`
for available settings.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from club_trips.api.errors import register_exception_handlers
from club_trips.config import get_settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Log startup and shutdown."""
    settings = get_settings()

    logger.info(
        f"Starting {settings.app_name} v{settings.app_version} "
        f"(calendar {settings.calendar_id}, timezone {settings.timezone})"
    )

    yield

    logger.info("Shutting down")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application
    """
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Club trip planning backed by Google Sheets and Google Calendar",
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=False,
        allow_methods=["GET", "POST", "DELETE", "PATCH"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # Include routers
    from club_trips.api.routes import officer, signups, site_settings, sync, trips

    app.include_router(trips.router, prefix="/api/trips", tags=["Trips"])
    app.include_router(sync.router, prefix="/api/sync", tags=["Sync"])
    app.include_router(signups.router, prefix="/api", tags=["Signups"])
    app.include_router(site_settings.router, prefix="/api/site-settings", tags=["Site Settings"])
    app.include_router(officer.router, prefix="/api/officer", tags=["Officer"])

    # Health check endpoint
    @app.get("/health", tags=["Health"])
    def health_check():
        """Health check endpoint."""
        return {"ok": True, "data": {"status": "healthy", "version": settings.app_version}}

    return app
