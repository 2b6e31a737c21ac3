"""Request ID + timing middleware.

Every request gets an ID: the caller's ``X-Request-ID`` if it sent one,
a fresh UUID otherwise.  The ID is echoed on the response, kept on
``request.state.request_id`` for handlers, and attached to every log
record emitted while the request is handled, so the log lines of one
issuance (callback, signing, network round-trips) can be pulled out of
interleaved output.

Server errors are logged at ERROR so a rejected issuance stands out
from routine traffic.  An exception no handler claimed is turned into
the usual ``{"error": ...}`` 500 here, inside the middleware, so it too
gets the summary line and the ``X-Request-ID`` header.
"""

from __future__ import annotations

import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from badgeflow.api.dependencies import unexpected_error_response
from badgeflow.core.logging import request_id_var

logger = logging.getLogger(__name__)


class RequestContextMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        req_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        request.state.request_id = req_id
        token = request_id_var.set(req_id)
        started = time.monotonic()
        try:
            response = await call_next(request)
        except Exception as exc:
            # Answered here so the summary line and header still happen.
            logger.exception("Unhandled error: %s", exc)
            response = unexpected_error_response(request, exc)
        finally:
            request_id_var.reset(token)
        elapsed_ms = round((time.monotonic() - started) * 1000, 1)

        level = logging.ERROR if response.status_code >= 500 else logging.INFO
        logger.log(
            level,
            "%s %s -> %d in %.1fms",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            extra={
                "request_id": req_id,
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": elapsed_ms,
            },
        )
        response.headers["X-Request-ID"] = req_id
        return response
