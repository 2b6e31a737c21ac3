"""Universal Inbox issuance client.

"Fire and forget" issuance: we hand the network an UNSIGNED credential
and a recipient's contact address, and the network takes it from there
(email the learner, let them claim into a wallet, sign at claim time).

One call, one POST:

    POST {api_base}/api/inbox/issue
    Authorization: Bearer <LEARNCARD_API_KEY>
    {recipient, credential, configuration?, consentRequest?}

No retries, no timeout, no idempotency key.  A failed call is reported
to the caller, who decides whether to try again.
"""

from __future__ import annotations

import logging

import httpx

from badgeflow.core.config import Settings
from badgeflow.core.errors import ConfigurationError, IssuanceError
from badgeflow.core.metrics import INBOX_ISSUANCES
from badgeflow.models.credential import build_open_badge_credential
from badgeflow.models.delivery import (
    Brand,
    DeliveryConfiguration,
    EnvironmentFallbacks,
    Recipient,
    SigningAuthority,
    compose_configuration,
)
from badgeflow.services.network_client import error_message, json_or_empty

logger = logging.getLogger(__name__)

INBOX_ISSUE_PATH = "/api/inbox/issue"


class InboxClient:
    def __init__(
        self,
        api_base: str,
        api_key: str | None,
        *,
        env: EnvironmentFallbacks | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_base = api_base.rstrip("/")
        self._api_key = api_key
        self._env = env or EnvironmentFallbacks()
        self._transport = transport

    @classmethod
    def from_settings(
        cls, settings: Settings, *, transport: httpx.AsyncBaseTransport | None = None
    ) -> InboxClient:
        return cls(
            settings.api_base,
            settings.api_key,
            env=EnvironmentFallbacks.from_settings(settings),
            transport=transport,
        )

    @property
    def issue_url(self) -> str:
        return f"{self._api_base}{INBOX_ISSUE_PATH}"

    async def inbox_issue(
        self,
        *,
        recipient: Recipient | dict,
        credential: dict,
        configuration: DeliveryConfiguration | dict | None = None,
        consent_request: dict | None = None,
    ) -> dict:
        """POST one issuance request.  Returns the network's JSON verbatim.

        Expected shape on success: ``{"issuanceId": ..., "claimUrl"?: ...}``
        (``claimUrl`` only when delivery was suppressed).

        Raises:
            ConfigurationError: no API key configured; nothing is sent.
            IssuanceError: the network answered with a non-2xx status.
        """
        if not self._api_key:
            INBOX_ISSUANCES.labels(outcome="not_configured").inc()
            raise ConfigurationError("Missing LEARNCARD_API_KEY")

        body: dict = {
            "recipient": (
                recipient.to_payload() if isinstance(recipient, Recipient) else recipient
            ),
            "credential": credential,
        }
        if isinstance(configuration, DeliveryConfiguration):
            configuration = None if configuration.is_empty() else configuration.to_payload()
        if configuration:
            body["configuration"] = configuration
        if consent_request:
            body["consentRequest"] = consent_request

        async with httpx.AsyncClient(transport=self._transport, timeout=None) as client:
            response = await client.post(
                self.issue_url,
                json=body,
                headers={"Authorization": f"Bearer {self._api_key}"},
            )

        data = json_or_empty(response)
        if not response.is_success:
            INBOX_ISSUANCES.labels(outcome="rejected").inc()
            message = error_message(data, f"Inbox issue failed ({response.status_code})")
            logger.warning(
                "Inbox issue rejected status=%d message=%s",
                response.status_code,
                message,
                extra={"operation": "inbox_issue", "status_code": response.status_code},
            )
            raise IssuanceError(message, status_code=response.status_code)

        summary = data if isinstance(data, dict) else {}
        INBOX_ISSUANCES.labels(
            outcome="claim_url" if summary.get("claimUrl") else "issued"
        ).inc()
        logger.info(
            "Inbox issuance created id=%s",
            summary.get("issuanceId"),
            extra={"operation": "inbox_issue", "issuance_id": summary.get("issuanceId")},
        )
        return data  # type: ignore[return-value]

    async def issue_via_inbox(
        self,
        *,
        email: str,
        skill_name: str,
        issuer_did: str | None = None,
        evidence_text: str | None = None,
        brand: Brand | None = None,
        suppress_delivery: bool = False,
        webhook_url: str | None = None,
        signing_authority: SigningAuthority | None = None,
        consent_request: dict | None = None,
    ) -> dict:
        """Build an OpenBadge for ``skill_name`` and deliver it to ``email``."""
        credential = build_open_badge_credential(
            skill_name=skill_name,
            issuer_did=issuer_did,
            evidence_text=evidence_text,
        )
        configuration = compose_configuration(
            skill_name=skill_name,
            brand=brand,
            suppress_delivery=suppress_delivery,
            webhook_url=webhook_url,
            signing_authority=signing_authority,
            env=self._env,
        )
        return await self.inbox_issue(
            recipient=Recipient.email(email),
            credential=credential,
            configuration=configuration,
            consent_request=consent_request,
        )
