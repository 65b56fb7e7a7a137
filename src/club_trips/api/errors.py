"""JSON envelope and exception handlers.

Every response body is either `{"ok": true, "data": ...}` or
`{"ok": false, "error": "<message>"}`.

| Exception | Status |
|---|---|
| ClubTripsError subclasses | their `status_code` |
| RequestValidationError (bad or malformed body) | 400 |
| HTTPException (unknown route, wrong method) | its status |
| anything else | 500, generic message |
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from club_trips.exceptions import ClubTripsError

logger = logging.getLogger(__name__)


def success(data: Any = None) -> dict[str, Any]:
    """Wrap response data in the success envelope (camelCase keys)."""
    return {"ok": True, "data": jsonable_encoder({} if data is None else data, by_alias=True)}


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"ok": False, "error": message})


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    if first.get("type") == "json_invalid":
        return "Invalid JSON body"
    field = ".".join(str(loc) for loc in first.get("loc", ()) if loc != "body")
    return f"Invalid {field}: {first.get('msg')}" if field else f"Invalid request: {first.get('msg')}"


async def handle_club_trips_error(request: Request, exc: ClubTripsError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
    return error_response(exc.status_code, exc.message)


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    message = _validation_message(exc)
    logger.info(f"{request.method} {request.url.path} -> 400: {message}")
    return error_response(status.HTTP_400_BAD_REQUEST, message)


async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return error_response(exc.status_code, str(exc.detail))


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error in {request.method} {request.url.path}")
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ClubTripsError, handle_club_trips_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(Exception, handle_unexpected_error)
