from __future__ import annotations

from fastapi.testclient import TestClient

from badgeflow.main import create_app
from badgeflow.services.inbox_client import InboxClient
from badgeflow.services.issuer_session import AppContext, service_session_factory
from tests.fakes import INBOX_PATH, FakeNetwork, make_settings

BODY = {
    "recipient": {"type": "email", "value": "learner@example.com"},
    "credential": {"type": ["VerifiableCredential", "OpenBadgeCredential"]},
}


def test_forwards_request_and_returns_network_answer(
    client: TestClient, network: FakeNetwork
) -> None:
    resp = client.post("/api/inbox/issue", json=BODY)
    assert resp.status_code == 200
    assert resp.json() == {"issuanceId": "iss-1"}

    [request] = network.requests_to(INBOX_PATH)
    assert request.headers["authorization"] == "Bearer test-key"
    assert network.body_of(request) == BODY


def test_configuration_and_consent_pass_through(
    client: TestClient, network: FakeNetwork
) -> None:
    body = {
        **BODY,
        "configuration": {"delivery": {"suppress": True}},
        "consentRequest": {"scopes": ["write"]},
    }
    client.post("/api/inbox/issue", json=body)
    forwarded = network.body_of(network.requests_to(INBOX_PATH)[0])
    assert forwarded["configuration"] == {"delivery": {"suppress": True}}
    assert forwarded["consentRequest"] == {"scopes": ["write"]}


def test_network_rejection_becomes_error_json(
    client: TestClient, network: FakeNetwork
) -> None:
    network.respond(INBOX_PATH, 422, {"message": "recipient not allowed"})
    resp = client.post("/api/inbox/issue", json=BODY)
    assert resp.status_code == 500
    assert resp.json() == {"error": "recipient not allowed"}


def test_missing_recipient_is_400(client: TestClient, network: FakeNetwork) -> None:
    resp = client.post("/api/inbox/issue", json={"credential": {}})
    assert resp.status_code == 400
    assert resp.json()["error"].startswith("recipient")
    assert network.requests_to(INBOX_PATH) == []


def test_missing_api_key_sends_nothing(network: FakeNetwork) -> None:
    settings = make_settings(api_key=None)
    context = AppContext(
        settings,
        session_factory=service_session_factory(transport=network.transport),
        inbox=InboxClient.from_settings(settings, transport=network.transport),
    )
    with TestClient(create_app(context)) as c:
        resp = c.post("/api/inbox/issue", json=BODY)
    assert resp.status_code == 500
    assert resp.json() == {"error": "Missing LEARNCARD_API_KEY"}
    assert network.requests_to(INBOX_PATH) == []
