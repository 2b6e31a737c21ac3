from __future__ import annotations

import httpx
from fastapi.testclient import TestClient

from badgeflow.main import create_app
from badgeflow.services.inbox_client import InboxClient
from badgeflow.services.issuer_session import AppContext, service_session_factory
from tests.fakes import INBOX_PATH, FakeNetwork, make_settings


def test_unknown_route_is_error_json(client: TestClient) -> None:
    resp = client.get("/nope")
    assert resp.status_code == 404
    assert resp.json() == {"error": "Not Found"}


def test_wrong_method_is_error_json(client: TestClient) -> None:
    resp = client.get("/api/issue-credential")
    assert resp.status_code == 405
    assert "error" in resp.json()


def test_docs_disabled_outside_dev(client: TestClient) -> None:
    assert client.get("/docs").status_code == 404


def test_transport_failure_becomes_500(network: FakeNetwork) -> None:
    def unreachable(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    settings = make_settings()
    context = AppContext(
        settings,
        session_factory=service_session_factory(transport=network.transport),
    )
    context.inbox = InboxClient.from_settings(
        settings, transport=httpx.MockTransport(unreachable)
    )
    with TestClient(create_app(context)) as c:
        resp = c.post(
            "/api/inbox/issue",
            json={"recipient": {"type": "email", "value": "a@b.test"}, "credential": {}},
        )
    assert resp.status_code == 500
    assert resp.json() == {"error": "connection refused"}
    assert network.requests_to(INBOX_PATH) == []


def test_shutdown_closes_session(context: AppContext) -> None:
    with TestClient(create_app(context)):
        pass
    session = context._session.peek()
    assert session is not None
    assert session.network._client.is_closed


class ExplodingBackend:
    async def sign_credential(self, credential: dict) -> dict:
        raise RuntimeError("backend crashed")


def test_unexpected_errors_still_answer_json(network: FakeNetwork) -> None:
    context = AppContext(
        make_settings(),
        session_factory=service_session_factory(
            signing_backend=ExplodingBackend(), transport=network.transport
        ),
    )
    with TestClient(create_app(context), raise_server_exceptions=False) as c:
        resp = c.post("/api/issue-credential", json={"recipientDid": "did:key:z6Mkx"})
    assert resp.status_code == 500
    assert resp.json() == {"error": "backend crashed"}
