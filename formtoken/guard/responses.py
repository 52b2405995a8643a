"""Generic rejection responses."""

from __future__ import annotations

from starlette.requests import HTTPConnection
from starlette.responses import JSONResponse, PlainTextResponse, Response

FORBIDDEN_MESSAGE = "Forbidden"


def forbidden_response(connection: HTTPConnection) -> Response:
    """Return a 403 that says nothing about which check failed."""
    if "application/json" in connection.headers.get("accept", ""):
        return JSONResponse({"detail": FORBIDDEN_MESSAGE}, status_code=403)
    return PlainTextResponse(FORBIDDEN_MESSAGE, status_code=403)
