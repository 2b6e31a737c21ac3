"""Credential signing through an external authority.

This service never signs anything itself.  A signing BACKEND is some
object that can turn an unsigned credential into a signed one; which
method it exposes depends on the backend (and, for SDK-style backends,
its version).  Rather than probing method names on every request, the
backend's capabilities are probed ONCE when the issuer session starts
and wrapped in a ``Signer`` with a single ``sign`` coroutine.

Probe order (first match wins):

    issue_credential -> sign_verifiable_credential -> sign_credential

``SigningAuthorityClient`` is the backend we ship: a VC-API style
endpoint (``SIGNING_AUTH_ENDPOINT``) that takes ``{"credential": ...}``
and returns the signed document.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Any, Protocol, runtime_checkable

import httpx

from badgeflow.core.errors import SigningError
from badgeflow.services.network_client import error_message, json_or_empty

logger = logging.getLogger(__name__)

SIGNING_CAPABILITIES = (
    "issue_credential",
    "sign_verifiable_credential",
    "sign_credential",
)

SignedCredential = dict | str


@runtime_checkable
class Signer(Protocol):
    capability: str

    async def sign(self, credential: dict) -> SignedCredential: ...


class CapabilitySigner:
    """Adapter over one backend method found by capability probing."""

    def __init__(
        self, capability: str, method: Callable[[dict], Awaitable[Any]]
    ) -> None:
        self.capability = capability
        self._method = method

    async def sign(self, credential: dict) -> SignedCredential:
        return await self._method(credential)


def select_signer(backend: object | None) -> Signer | None:
    """Return a Signer for the first capability ``backend`` supports."""
    if backend is None:
        return None
    for capability in SIGNING_CAPABILITIES:
        method = getattr(backend, capability, None)
        if callable(method):
            logger.info("Signing via %s.%s", type(backend).__name__, capability)
            return CapabilitySigner(capability, method)
    logger.warning("No signing capability on %s", type(backend).__name__)
    return None


class SigningAuthorityClient:
    """VC-API issuing endpoint acting as the issuer's signing authority."""

    def __init__(
        self,
        endpoint: str,
        *,
        api_key: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._endpoint = endpoint
        self._api_key = api_key
        self._transport = transport

    async def issue_credential(self, credential: dict) -> SignedCredential:
        headers = {"Authorization": f"Bearer {self._api_key}"} if self._api_key else {}
        async with httpx.AsyncClient(transport=self._transport, timeout=None) as client:
            response = await client.post(
                self._endpoint, json={"credential": credential}, headers=headers
            )

        data = json_or_empty(response)
        if not response.is_success:
            raise SigningError(
                error_message(data, f"Signing failed ({response.status_code})")
            )
        if isinstance(data, dict) and "verifiableCredential" in data:
            return data["verifiableCredential"]
        if not data:
            raise SigningError("Signing authority returned an empty response")
        return data  # type: ignore[return-value]
