"""Issuer session and the per-application context.

An ``IssuerSession`` bundles what issuing needs: the issuer DID (derived
from the seed), a network client, and the signer picked by capability
probing.  Building one also makes sure the issuer's network profile
exists.

``AppContext`` is the ONE place the web service keeps shared state.  It
is created with the app, stored on ``app.state.context``, and hands the
session and the consent-contract URI to handlers through ``AsyncOnce``
guards, so two requests racing on a cold start trigger one setup, not
two.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

import httpx

from badgeflow.core.config import Settings
from badgeflow.core.errors import (
    ConfigurationError,
    NetworkError,
    ProfileAlreadyExistsNotice,
)
from badgeflow.core.metrics import SESSION_INITIALIZATIONS
from badgeflow.services.consent import build_gameflow_contract
from badgeflow.services.identity import did_key_from_seed
from badgeflow.services.inbox_client import InboxClient
from badgeflow.services.network_client import NetworkClient
from badgeflow.services.once import AsyncOnce
from badgeflow.services.signing import Signer, SigningAuthorityClient, select_signer

logger = logging.getLogger(__name__)


@dataclass
class IssuerSession:
    did: str
    network: NetworkClient
    signer: Signer | None = None

    async def aclose(self) -> None:
        await self.network.aclose()


async def ensure_profile(
    network: NetworkClient, *, profile_id: str, display_name: str, description: str
) -> bool:
    """Create the profile; return False when it already existed.

    Raises:
        NetworkError: creation failed for any other reason.
    """
    try:
        await network.create_profile(
            profile_id=profile_id, display_name=display_name, description=description
        )
    except ProfileAlreadyExistsNotice:
        logger.info("Profile %r already exists. Continuing.", profile_id)
        return False
    return True


async def open_issuer_session(
    settings: Settings,
    *,
    signing_backend: object | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> IssuerSession:
    """Derive the DID, open the network client and select a signer.

    Without an explicit ``signing_backend`` the configured signing
    authority is used; with neither, the session has no signer.
    """
    did = did_key_from_seed(settings.secure_seed)
    network = NetworkClient(
        settings.api_base,
        settings.api_key,
        app_base=settings.app_base,
        transport=transport,
    )
    if signing_backend is None and settings.signing_auth_endpoint:
        signing_backend = SigningAuthorityClient(
            settings.signing_auth_endpoint, api_key=settings.api_key, transport=transport
        )
    logger.info("Issuer session opened. Issuer DID: %s", did)
    return IssuerSession(did=did, network=network, signer=select_signer(signing_backend))


SessionFactory = Callable[[Settings], Awaitable[IssuerSession]]


def service_session_factory(
    *,
    signing_backend: object | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> SessionFactory:
    """Session setup for the web service: open the session, ensure the
    Pixel Pet profile, and tolerate profile failures with a warning."""

    async def factory(settings: Settings) -> IssuerSession:
        session = await open_issuer_session(
            settings, signing_backend=signing_backend, transport=transport
        )
        try:
            await ensure_profile(
                session.network,
                profile_id=settings.pixelpet_profile_id,
                display_name=settings.pixelpet_display_name,
                description="Pixel Pet Designer service profile",
            )
        except (NetworkError, ConfigurationError, httpx.HTTPError) as exc:
            # Lenient here; the quickstart treats this as fatal.
            logger.warning("Could not create profile: %s", exc)
        return session

    return factory


class AppContext:
    def __init__(
        self,
        settings: Settings,
        *,
        session_factory: SessionFactory | None = None,
        inbox: InboxClient | None = None,
    ) -> None:
        self.settings = settings
        self.inbox = inbox or InboxClient.from_settings(settings)
        self._session_factory = session_factory or service_session_factory()
        self._session: AsyncOnce[IssuerSession] = AsyncOnce(self._create_session)
        self._contract_uri: AsyncOnce[str] = AsyncOnce(self._create_contract)

    async def _create_session(self) -> IssuerSession:
        SESSION_INITIALIZATIONS.inc()
        logger.info("Initializing issuer session")
        return await self._session_factory(self.settings)

    async def _create_contract(self) -> str:
        session = await self.issuer_session()
        contract = build_gameflow_contract(self.settings.gameflow_redirect_url)
        return await session.network.create_contract(contract)

    @property
    def session_ready(self) -> bool:
        return self._session.initialized

    async def issuer_session(self) -> IssuerSession:
        return await self._session.get()

    async def consent_contract_uri(self) -> str:
        return await self._contract_uri.get()

    async def warm_up(self) -> None:
        """Initialize both guards; failures are logged, never raised."""
        try:
            await self.issuer_session()
            await self.consent_contract_uri()
        except Exception as exc:
            logger.warning("Startup initialization incomplete: %s", exc)

    async def aclose(self) -> None:
        session = self._session.peek()
        if session is not None:
            await session.aclose()
