from __future__ import annotations

from fastapi import Request
from fastapi.responses import JSONResponse

from badgeflow.services.issuer_session import AppContext


def get_context(request: Request) -> AppContext:
    """The application's shared context, set up by ``create_app``."""
    return request.app.state.context


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def unexpected_error_response(request: Request, exc: Exception) -> JSONResponse:
    """500 for an exception no handler claimed; the message is hidden in prod."""
    settings = get_context(request).settings
    return error_response(500, "Internal server error" if settings.is_prod else str(exc))
