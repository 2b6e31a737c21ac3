"""Consent flow endpoints.

  GET /api/get-consent-url   - where to send the player to approve the
                               Pixel Pet contract.
  GET /learncard-callback    - where the network sends them back.

The callback hands the player's DID to the frontend in the redirect's
query string and nothing else.  There is no server-side session, state
parameter, signature or expiry tying the DID to the browser that started
the flow: anyone can craft ``/learncard-callback?did=...``.  Fine for a
demo; a real deployment must bind the DID to an authenticated session
(and verify the ``vp`` presentation) before trusting it.

Both redirects point at ``/``, the Pixel Pet frontend page.  This service
does not serve that page (static hosting lives elsewhere), so without a
frontend in front of it the browser lands on a 404 carrying the query.
"""

from __future__ import annotations

import logging
from typing import Annotated
from urllib.parse import urlencode

import httpx
from fastapi import APIRouter, Depends
from fastapi.responses import RedirectResponse

from badgeflow.api.dependencies import error_response, get_context
from badgeflow.core.errors import BadgeflowError
from badgeflow.services.consent import build_consent_url
from badgeflow.services.issuer_session import AppContext

logger = logging.getLogger(__name__)

router = APIRouter(tags=["consent"])


@router.get("/api/get-consent-url", response_model=None)
async def get_consent_url(
    context: Annotated[AppContext, Depends(get_context)],
):
    try:
        contract_uri = await context.consent_contract_uri()
    except (BadgeflowError, httpx.HTTPError) as exc:
        logger.error("/api/get-consent-url failed: %s", exc)
        return error_response(500, "Could not create consent URL.")

    settings = context.settings
    return {
        "consentUrl": build_consent_url(
            settings.consent_base, contract_uri, settings.gameflow_redirect_url
        )
    }


@router.get("/learncard-callback")
async def learncard_callback(did: str | None = None, vp: str | None = None) -> RedirectResponse:
    logger.info(
        "LearnCard callback did=%s vp=%s", did, "(present)" if vp else "N/A"
    )
    if not did:
        return RedirectResponse("/?learncard_error=did_missing")

    query = urlencode({"learncard_did": did, "status": "connected"})
    return RedirectResponse(f"/?{query}")
