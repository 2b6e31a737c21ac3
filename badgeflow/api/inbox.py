"""Pass-through Universal Inbox endpoint.

  POST /api/inbox/issue - forward ``{recipient, credential, configuration?,
                          consentRequest?}`` to the network unchanged and
                          return its answer.

The caller supplies the whole request; nothing is composed here.
"""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field

from badgeflow.api.dependencies import get_context
from badgeflow.services.issuer_session import AppContext

router = APIRouter(prefix="/api/inbox", tags=["inbox"])


class InboxIssueIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    recipient: dict[str, Any]
    credential: dict[str, Any]
    configuration: dict[str, Any] | None = None
    consent_request: dict[str, Any] | None = Field(default=None, alias="consentRequest")


@router.post("/issue", response_model=None)
async def inbox_issue(
    body: InboxIssueIn,
    context: Annotated[AppContext, Depends(get_context)],
) -> Any:
    return await context.inbox.inbox_issue(
        recipient=body.recipient,
        credential=body.credential,
        configuration=body.configuration,
        consent_request=body.consent_request,
    )
