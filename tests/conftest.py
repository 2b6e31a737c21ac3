from __future__ import annotations

import os
from collections.abc import Iterator

os.environ.setdefault("APP_ENV", "test")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from badgeflow.main import create_app  # noqa: E402
from badgeflow.services.inbox_client import InboxClient  # noqa: E402
from badgeflow.services.issuer_session import (  # noqa: E402
    AppContext,
    service_session_factory,
)
from tests.fakes import FakeNetwork, FakeSigningBackend, make_settings  # noqa: E402


@pytest.fixture
def network() -> FakeNetwork:
    return FakeNetwork()


@pytest.fixture
def signing_backend() -> FakeSigningBackend:
    return FakeSigningBackend()


@pytest.fixture
def context(network: FakeNetwork, signing_backend: FakeSigningBackend) -> AppContext:
    settings = make_settings()
    return AppContext(
        settings,
        session_factory=service_session_factory(
            signing_backend=signing_backend, transport=network.transport
        ),
        inbox=InboxClient.from_settings(settings, transport=network.transport),
    )


@pytest.fixture
def client(context: AppContext) -> Iterator[TestClient]:
    # Entering the client runs the lifespan (session + contract warm-up)
    # and keeps one event loop for the whole test.
    with TestClient(create_app(context), follow_redirects=False) as c:
        yield c
