"""badgeflow web service.

RUN:  uvicorn badgeflow.main:app --port 3000
      python -m badgeflow.main

``create_app`` builds the FastAPI app around an ``AppContext``; tests
pass their own context (fake network transport, fake signer).  The
module-level ``app`` uses settings from the environment.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from badgeflow.api.consent import router as consent_router
from badgeflow.api.dependencies import error_response, unexpected_error_response
from badgeflow.api.health import router as health_router
from badgeflow.api.inbox import router as inbox_router
from badgeflow.api.issue import router as issue_router
from badgeflow.api.metrics_endpoint import router as metrics_router
from badgeflow.core.config import SETTINGS, warn_on_insecure_settings
from badgeflow.core.errors import BadgeflowError
from badgeflow.core.logging import setup_logging
from badgeflow.middleware.metrics import MetricsMiddleware
from badgeflow.middleware.request_context import RequestContextMiddleware
from badgeflow.services.issuer_session import AppContext

# Configure logging before anything else runs.
setup_logging(SETTINGS.log_level, json_format=SETTINGS.log_json)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    context: AppContext = app.state.context
    await context.warm_up()
    yield
    await context.aclose()


async def _badgeflow_error(_request: Request, exc: Exception) -> JSONResponse:
    logger.error("%s: %s", type(exc).__name__, exc)
    return error_response(500, str(exc))


async def _http_error(_request: Request, exc: Exception) -> JSONResponse:
    logger.error("Outbound request failed: %s", exc)
    return error_response(500, str(exc) or type(exc).__name__)


async def _unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error: %s", exc)
    return unexpected_error_response(request, exc)


async def _validation_error(_request: Request, exc: RequestValidationError) -> JSONResponse:
    first = exc.errors()[0] if exc.errors() else {}
    field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    message = first.get("msg", "Invalid request")
    return error_response(400, f"{field}: {message}" if field else message)


async def _starlette_http_error(
    _request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    return error_response(exc.status_code, str(exc.detail))


def create_app(context: AppContext | None = None) -> FastAPI:
    app = FastAPI(
        title="badgeflow",
        lifespan=lifespan,
        docs_url="/docs" if SETTINGS.is_dev else None,
        redoc_url=None,
    )
    app.state.context = context or AppContext(SETTINGS)

    # Last added runs first: RequestContext → Metrics → route handler
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestContextMiddleware)

    app.add_exception_handler(BadgeflowError, _badgeflow_error)
    app.add_exception_handler(httpx.HTTPError, _http_error)
    app.add_exception_handler(RequestValidationError, _validation_error)
    app.add_exception_handler(StarletteHTTPException, _starlette_http_error)
    app.add_exception_handler(Exception, _unexpected_error)

    app.include_router(metrics_router)
    app.include_router(health_router)
    app.include_router(consent_router)
    app.include_router(issue_router)
    app.include_router(inbox_router)
    return app


warn_on_insecure_settings(SETTINGS)
app = create_app()

logger.info(
    "badgeflow ready  env=%s log_level=%s port=%d api_base=%s",
    SETTINGS.app_env,
    SETTINGS.log_level,
    SETTINGS.port,
    SETTINGS.api_base,
)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=SETTINGS.port)
