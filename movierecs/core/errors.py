# movierecs/core/errors.py
from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

log = logging.getLogger(__name__)


class MovieRecsError(Exception):
    """Base class for errors the API translates into JSON responses."""

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message


class UpstreamError(MovieRecsError):
    """The movie metadata provider was unreachable, timed out or answered non-2xx."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code

    def __str__(self) -> str:
        if self.status_code is not None:
            return f"{self.message} (status={self.status_code})"
        return self.message


class StoreError(MovieRecsError):
    """The favorites database is unreachable or rejected a write."""


class NotFound(MovieRecsError):
    pass


class Conflict(MovieRecsError):
    pass


# ───────────────── HTTP translation ─────────────────

async def _upstream_error(request: Request, exc: UpstreamError) -> JSONResponse:
    # upstream detail is for the logs only
    log.error("Upstream failure on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=500, content={"error": "Failed to fetch movies"})


async def _store_error(request: Request, exc: StoreError) -> JSONResponse:
    log.error(
        "Store failure on %s %s: %s",
        request.method,
        request.url.path,
        exc,
        exc_info=exc.__cause__ or exc,
    )
    return JSONResponse(status_code=500, content={"error": "Failed to access favorites"})


async def _not_found(request: Request, exc: NotFound) -> JSONResponse:
    return JSONResponse(status_code=404, content={"error": exc.message or "Not found"})


async def _conflict(request: Request, exc: Conflict) -> JSONResponse:
    return JSONResponse(status_code=409, content={"error": exc.message or "Conflict"})


async def _unexpected(request: Request, exc: Exception) -> JSONResponse:
    # Starlette re-raises after this response is sent, so the server log also sees it
    log.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(UpstreamError, _upstream_error)
    app.add_exception_handler(StoreError, _store_error)
    app.add_exception_handler(NotFound, _not_found)
    app.add_exception_handler(Conflict, _conflict)
    app.add_exception_handler(Exception, _unexpected)
