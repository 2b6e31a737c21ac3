"""Health and readiness endpoints.

  /health - liveness: the process answers, nothing else is checked.
  /ready  - readiness: the issuer session is initialized, so issuing
            requests will not pay the cold-start cost (or fail on it).
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from badgeflow.api.dependencies import get_context
from badgeflow.services.issuer_session import AppContext

router = APIRouter(tags=["health"])


@router.get("/health")
async def health() -> dict:
    return {"status": "ok"}


@router.get("/ready")
async def ready(context: Annotated[AppContext, Depends(get_context)]) -> JSONResponse:
    if context.session_ready:
        return JSONResponse(status_code=200, content={"status": "ready"})
    return JSONResponse(status_code=503, content={"status": "initializing"})
