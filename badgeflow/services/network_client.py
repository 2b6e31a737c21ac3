"""LearnCard network REST client.

Covers the handful of network operations this project needs beyond the
inbox: registering the issuer's profile, publishing a boost, generating
a claim link for it, and creating a consent-flow contract.  The network
is authoritative for all of these; we send one request each and report
what came back.

All calls share one ``httpx.AsyncClient`` (connection reuse across the
startup sequence) and are bearer-authenticated with the same API key as
the inbox.  Close the client with ``aclose()`` on shutdown.
"""

from __future__ import annotations

import logging
from urllib.parse import urlencode

import httpx

from badgeflow.core.errors import (
    ConfigurationError,
    NetworkError,
    ProfileAlreadyExistsNotice,
    is_profile_already_exists,
)
from badgeflow.core.metrics import NETWORK_CALLS

logger = logging.getLogger(__name__)

PROFILE_CREATE_PATH = "/api/profile/create"
BOOST_CREATE_PATH = "/api/boost/create"
BOOST_CLAIM_LINK_PATH = "/api/boost/generate-claim-link"
CONTRACT_CREATE_PATH = "/api/consent-flow-contract/create"


def json_or_empty(response: httpx.Response) -> object:
    """Parse the body, treating anything unparsable as ``{}``."""
    try:
        return response.json()
    except ValueError:
        return {}


def error_message(data: object, fallback: str) -> str:
    if isinstance(data, dict):
        return str(data.get("message") or data.get("error") or fallback)
    return fallback


def _extract_uri(data: object) -> str | None:
    # The network answers some create calls with a bare JSON string.
    if isinstance(data, str):
        return data
    if isinstance(data, dict):
        return data.get("uri") or data.get("boostUri") or data.get("contractUri")
    return None


class NetworkClient:
    def __init__(
        self,
        api_base: str,
        api_key: str | None,
        *,
        app_base: str = "https://learncard.app",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key
        self._app_base = app_base.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=api_base.rstrip("/"), transport=transport, timeout=None
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _post(self, operation: str, path: str, body: dict) -> object:
        if not self._api_key:
            raise ConfigurationError("Missing LEARNCARD_API_KEY")

        response = await self._client.post(
            path, json=body, headers={"Authorization": f"Bearer {self._api_key}"}
        )
        data = json_or_empty(response)
        if not response.is_success:
            NETWORK_CALLS.labels(operation=operation, outcome="error").inc()
            raise NetworkError(
                error_message(data, f"{operation} failed ({response.status_code})"),
                operation=operation,
                status_code=response.status_code,
            )
        NETWORK_CALLS.labels(operation=operation, outcome="ok").inc()
        return data

    async def create_profile(
        self, *, profile_id: str, display_name: str, description: str
    ) -> None:
        """Register the issuer's network profile.

        Raises:
            ProfileAlreadyExistsNotice: the profile (or account) exists.
            NetworkError: any other rejection.
        """
        try:
            await self._post(
                "create_profile",
                PROFILE_CREATE_PATH,
                {
                    "profileId": profile_id,
                    "displayName": display_name,
                    "description": description,
                },
            )
        except NetworkError as exc:
            if is_profile_already_exists(str(exc)):
                raise ProfileAlreadyExistsNotice(profile_id) from None
            raise
        logger.info("Created profile %s", profile_id, extra={"operation": "create_profile"})

    async def create_boost(self, credential: dict, *, name: str, description: str) -> str:
        """Publish a boost template and return its network URI."""
        data = await self._post(
            "create_boost",
            BOOST_CREATE_PATH,
            {
                "credential": credential,
                "name": name,
                "description": description,
                "category": "Achievement",
            },
        )
        uri = _extract_uri(data)
        if not uri:
            raise NetworkError("Boost created but no URI returned", operation="create_boost")
        logger.info("Boost published: %s", uri, extra={"operation": "create_boost"})
        return uri

    async def generate_boost_claim_link(self, boost_uri: str) -> str:
        """Ask the network for a claim challenge and build the wallet link."""
        data = await self._post(
            "generate_claim_link", BOOST_CLAIM_LINK_PATH, {"uri": boost_uri}
        )
        if not isinstance(data, dict) or not data.get("challenge"):
            raise NetworkError(
                "Claim link response missing challenge", operation="generate_claim_link"
            )
        query = urlencode(
            {
                "claim": "true",
                "boostUri": data.get("boostUri") or boost_uri,
                "challenge": data["challenge"],
            }
        )
        return f"{self._app_base}/claim/boost?{query}"

    async def create_contract(self, contract: dict) -> str:
        """Create a consent-flow contract and return its URI."""
        data = await self._post("create_contract", CONTRACT_CREATE_PATH, contract)
        uri = _extract_uri(data)
        if not uri:
            raise NetworkError(
                "Contract created but no URI returned", operation="create_contract"
            )
        logger.info("Consent contract created: %s", uri, extra={"operation": "create_contract"})
        return uri
