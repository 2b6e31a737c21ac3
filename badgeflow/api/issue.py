"""Credential issuance endpoints (DID-addressed).

  POST /api/issue-credential - sign a demo SkillBadge for a DID
  POST /api/issue-pet-badge  - sign a Pixel Pet badge for the player

Both build an unsigned credential bound to the recipient DID and hand it
to the issuer session's signer.  The signer was chosen once, when the
session was initialized; if the session has none, issuing fails with 500.

Errors raised below (signing, network, configuration) are turned into
``{"error": message}`` responses by the handlers registered in main.py.

The pet badge response carries the signed credential itself and no
``credentialUri``: nothing is stored in a wallet, so there is no URI to
hand back.  A frontend that expects one has to fall back to the
credential body.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field

from badgeflow.api.dependencies import error_response, get_context
from badgeflow.core.errors import SigningError
from badgeflow.models.credential import (
    build_pet_badge_credential,
    build_skill_badge_credential,
)
from badgeflow.services.issuer_session import AppContext, IssuerSession

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["issue"])

NO_SIGNER_MESSAGE = "No signing method available on LearnCard instance"


class IssueCredentialIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    recipient_did: str | None = Field(default=None, alias="recipientDid")
    player_learncard_did: str | None = Field(default=None, alias="playerLearnCardDid")


class IssuePetBadgeIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    player_name: str | None = Field(default=None, alias="playerName")
    pet_design: list[str] | None = Field(default=None, alias="petDesign")
    player_learncard_did: str | None = Field(default=None, alias="playerLearnCardDid")


async def _sign(session: IssuerSession, credential: dict, recipient_did: str):
    if session.signer is None:
        raise SigningError(NO_SIGNER_MESSAGE)
    signed = await session.signer.sign(credential)
    logger.info(
        "Issued %s to %s via %s",
        credential["type"][-1],
        recipient_did,
        session.signer.capability,
        extra={"operation": "sign", "recipient_did": recipient_did},
    )
    return signed


@router.post("/issue-credential", response_model=None)
async def issue_credential(
    body: IssueCredentialIn,
    context: Annotated[AppContext, Depends(get_context)],
):
    recipient_did = body.recipient_did or body.player_learncard_did
    if not recipient_did:
        return error_response(400, "Missing recipientDid in request body")

    session = await context.issuer_session()
    if not session.did:
        return error_response(500, "Issuer DID not available")

    credential = build_skill_badge_credential(
        issuer_did=session.did, recipient_did=recipient_did
    )
    signed = await _sign(session, credential, recipient_did)
    return {"success": True, "credential": signed}


@router.post("/issue-pet-badge", response_model=None)
async def issue_pet_badge(
    body: IssuePetBadgeIn,
    context: Annotated[AppContext, Depends(get_context)],
):
    pet_name = (body.player_name or "").strip()
    if not pet_name:
        return error_response(400, "Missing playerName in request body")
    if not body.pet_design:
        return error_response(400, "Missing petDesign in request body")
    if not body.player_learncard_did:
        return error_response(400, "Missing playerLearnCardDid in request body")

    session = await context.issuer_session()
    credential = build_pet_badge_credential(
        issuer_did=session.did,
        recipient_did=body.player_learncard_did,
        pet_name=pet_name,
        pet_design=body.pet_design,
    )
    signed = await _sign(session, credential, body.player_learncard_did)
    return {"success": True, "issuedPetName": pet_name, "credential": signed}
