"""
HTTP test fixtures.

The app shares the test engine through the kernel session factory.  Callers
are identified the way the gateway forwards them: ``X-Actor-Id`` and
``X-Actor-Role`` headers.
"""

import pytest
from fastapi.testclient import TestClient

from workshop_api import create_app
from workshop_config import WorkshopSettings
from workshop_kernel.db.engine import get_session_factory


@pytest.fixture
def app(engine, clock):
    return create_app(
        settings=WorkshopSettings(),
        session_factory=get_session_factory(),
        clock=clock,
    )


@pytest.fixture
def api(app, session) -> TestClient:
    # The in-memory database has one shared connection; end the fixture
    # session's transaction before the app opens its own.
    session.commit()
    with TestClient(app) as client:
        yield client


def _headers(user, role: str) -> dict[str, str]:
    return {"X-Actor-Id": str(user.id), "X-Actor-Role": role}


@pytest.fixture
def as_admin(admin):
    return _headers(admin, "ADMIN")


@pytest.fixture
def as_worker(worker):
    return _headers(worker, "WORKER")


@pytest.fixture
def as_client(client_user):
    return _headers(client_user, "CLIENT")
