from __future__ import annotations

import asyncio
from urllib.parse import parse_qs, urlparse

import pytest

from badgeflow.core.errors import (
    ConfigurationError,
    NetworkError,
    ProfileAlreadyExistsNotice,
)
from badgeflow.services.network_client import NetworkClient
from tests.fakes import (
    API_BASE,
    BOOST_PATH,
    CLAIM_LINK_PATH,
    CONTRACT_PATH,
    PROFILE_PATH,
    FakeNetwork,
)


def _run(network: FakeNetwork, op, *, api_key: str | None = "test-key"):
    async def go():
        client = NetworkClient(
            API_BASE, api_key, app_base="https://wallet.test", transport=network.transport
        )
        try:
            return await op(client)
        finally:
            await client.aclose()

    return asyncio.run(go())


def _create_profile(client: NetworkClient):
    return client.create_profile(profile_id="org", display_name="Org", description="d")


def test_create_profile_sends_camel_case_body(network: FakeNetwork) -> None:
    _run(network, _create_profile)
    request = network.requests_to(PROFILE_PATH)[0]
    assert request.headers["authorization"] == "Bearer test-key"
    assert network.body_of(request) == {
        "profileId": "org",
        "displayName": "Org",
        "description": "d",
    }


@pytest.mark.parametrize(
    "message",
    [
        "Profile already exists",
        "PROFILE ALREADY EXISTS",
        "profile with id org already exists",
        "Account already exists",
    ],
)
def test_existing_profile_becomes_notice(network: FakeNetwork, message: str) -> None:
    network.respond(PROFILE_PATH, 409, {"message": message})
    with pytest.raises(ProfileAlreadyExistsNotice):
        _run(network, _create_profile)


def test_other_profile_failure_is_network_error(network: FakeNetwork) -> None:
    network.respond(PROFILE_PATH, 500, {"message": "Some other failure"})
    with pytest.raises(NetworkError, match="Some other failure") as excinfo:
        _run(network, _create_profile)
    assert excinfo.value.operation == "create_profile"
    assert excinfo.value.status_code == 500


def test_missing_key_raises_configuration_error(network: FakeNetwork) -> None:
    with pytest.raises(ConfigurationError):
        _run(network, _create_profile, api_key=None)
    assert network.requests == []


def test_create_boost_returns_uri_from_bare_string(network: FakeNetwork) -> None:
    uri = _run(
        network,
        lambda c: c.create_boost({"type": ["VerifiableCredential"]}, name="B", description="D"),
    )
    assert uri == "lc:network:boost:1"
    body = network.body_of(network.requests_to(BOOST_PATH)[0])
    assert body["name"] == "B"
    assert body["credential"] == {"type": ["VerifiableCredential"]}


def test_create_boost_accepts_uri_object(network: FakeNetwork) -> None:
    network.respond(BOOST_PATH, 200, {"uri": "lc:network:boost:7"})
    uri = _run(network, lambda c: c.create_boost({}, name="B", description="D"))
    assert uri == "lc:network:boost:7"


def test_create_boost_without_uri_fails(network: FakeNetwork) -> None:
    network.respond(BOOST_PATH, 200, {})
    with pytest.raises(NetworkError, match="no URI"):
        _run(network, lambda c: c.create_boost({}, name="B", description="D"))


def test_claim_link_is_built_from_challenge(network: FakeNetwork) -> None:
    link = _run(network, lambda c: c.generate_boost_claim_link("lc:network:boost:1"))
    parsed = urlparse(link)
    assert f"{parsed.scheme}://{parsed.netloc}{parsed.path}" == "https://wallet.test/claim/boost"
    assert parse_qs(parsed.query) == {
        "claim": ["true"],
        "boostUri": ["lc:network:boost:1"],
        "challenge": ["abc"],
    }
    assert network.body_of(network.requests_to(CLAIM_LINK_PATH)[0]) == {
        "uri": "lc:network:boost:1"
    }


def test_claim_link_without_challenge_fails(network: FakeNetwork) -> None:
    network.respond(CLAIM_LINK_PATH, 200, {"boostUri": "x"})
    with pytest.raises(NetworkError, match="challenge"):
        _run(network, lambda c: c.generate_boost_claim_link("x"))


def test_create_contract_returns_uri(network: FakeNetwork) -> None:
    uri = _run(network, lambda c: c.create_contract({"name": "C", "contract": {}}))
    assert uri == "lc:network:contract:1"
    assert network.body_of(network.requests_to(CONTRACT_PATH)[0])["name"] == "C"


def test_unparsable_error_uses_operation_fallback(network: FakeNetwork) -> None:
    network.respond(CONTRACT_PATH, 503, b"upstream down")
    with pytest.raises(NetworkError, match=r"create_contract failed \(503\)"):
        _run(network, lambda c: c.create_contract({}))
