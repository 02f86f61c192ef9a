"""
Pytest fixtures for the workshop ledger test suite.

Provides:
- A fresh database per test (in-memory SQLite unless DATABASE_URL is set)
- Reference data factories (users, vehicles, catalog, service requests)
- A deterministic clock
- Captured structured logs

Environment Variables:
- DATABASE_URL: connection URL.  Defaults to in-memory SQLite.  Tests marked
  ``postgres`` are skipped unless it points at PostgreSQL.
"""

import json
import logging
import os
from collections.abc import Generator
from decimal import Decimal
from io import StringIO
from uuid import UUID

import pytest
from sqlalchemy.orm import Session

from workshop_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_session,
    init_engine_from_url,
    is_postgres,
    reset_engine,
)
from workshop_kernel.domain.clock import DeterministicClock
from workshop_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from workshop_kernel.models import Service, SparePart, SystemRole, User, Vehicle
from workshop_modules.service_requests import RequestStatusSynchronizer, ServiceRequestService
from workshop_modules.work_orders.service import WorkOrderService
from workshop_modules.work_orders.signals import WorkOrderSignal

DEFAULT_TEST_URL = "sqlite+pysqlite:///:memory:"


def get_database_url() -> str:
    return os.environ.get("DATABASE_URL", DEFAULT_TEST_URL)


def pytest_collection_modifyitems(config, items):
    """Skip PostgreSQL-only tests when running against SQLite."""
    if get_database_url().startswith("postgresql"):
        return
    skip = pytest.mark.skip(reason="requires PostgreSQL (set DATABASE_URL)")
    for item in items:
        if "postgres" in item.keywords:
            item.add_marker(skip)


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG, stream=StringIO())
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture workshop logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, work_orders):
            work_orders.create_from_request(request.id)
            logs = captured_logs()
            assert any(r["message"] == "work_order_created" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("workshop")
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)


# =============================================================================
# Database
# =============================================================================


@pytest.fixture
def engine():
    """One engine and a freshly created schema per test."""
    eng = init_engine_from_url(get_database_url(), echo=False)
    drop_tables(eng)
    create_tables(eng)
    yield eng
    drop_tables(eng)
    reset_engine()


@pytest.fixture
def session(engine) -> Generator[Session, None, None]:
    sess = get_session()
    yield sess
    sess.rollback()
    sess.close()


@pytest.fixture
def postgres_only(engine):
    if not is_postgres(engine):
        pytest.skip("requires PostgreSQL")
    return engine


@pytest.fixture
def clock() -> DeterministicClock:
    return DeterministicClock()


# =============================================================================
# Reference data factories
# =============================================================================


@pytest.fixture
def make_user(session):
    counter = {"n": 0}

    def _make(role: SystemRole = SystemRole.CLIENT, name: str = "Test", surname: str | None = None,
              phone: str | None = None) -> User:
        counter["n"] += 1
        user = User(
            email=f"user{counter['n']}@example.com",
            name=name,
            surname=surname or f"User{counter['n']}",
            phone=phone,
            role=role.value,
        )
        session.add(user)
        session.commit()
        return user

    return _make


@pytest.fixture
def admin(make_user) -> User:
    return make_user(SystemRole.ADMIN, name="Anna", surname="Admin")


@pytest.fixture
def worker(make_user) -> User:
    return make_user(SystemRole.WORKER, name="Ivan", surname="Mechanic")


@pytest.fixture
def client_user(make_user) -> User:
    return make_user(SystemRole.CLIENT, name="Olga", surname="Driver", phone="+1 555 0199")


@pytest.fixture
def make_vehicle(session):
    def _make(owner: User, make: str = "Toyota", model: str = "Corolla", year: int | None = 2018,
              license_plate: str | None = "A123BC") -> Vehicle:
        vehicle = Vehicle(owner_id=owner.id, make=make, model=model, year=year,
                          license_plate=license_plate)
        session.add(vehicle)
        session.commit()
        return vehicle

    return _make


@pytest.fixture
def vehicle(make_vehicle, client_user) -> Vehicle:
    return make_vehicle(client_user)


@pytest.fixture
def make_service(session):
    def _make(name: str = "Oil change", price: str = "100.00", is_active: bool = True) -> Service:
        service = Service(name=name, base_price=Decimal(price), duration_min=30,
                          is_active=is_active)
        session.add(service)
        session.commit()
        return service

    return _make


@pytest.fixture
def make_part(session):
    def _make(name: str = "Oil filter", price: str = "20.00", is_active: bool = True) -> SparePart:
        part = SparePart(name=name, article=f"ART-{name[:3].upper()}", price=Decimal(price),
                         stock_quantity=10, is_active=is_active)
        session.add(part)
        session.commit()
        return part

    return _make


@pytest.fixture
def oil_change(make_service) -> Service:
    return make_service("Oil change", "100.00")


@pytest.fixture
def diagnostics(make_service) -> Service:
    return make_service("Diagnostics", "50.00")


@pytest.fixture
def oil_filter(make_part) -> SparePart:
    return make_part("Oil filter", "20.00")


# =============================================================================
# Services
# =============================================================================


@pytest.fixture
def service_requests(session, clock) -> ServiceRequestService:
    return ServiceRequestService(session, clock)


@pytest.fixture
def signal(service_requests) -> WorkOrderSignal:
    """Change signal with request status sync connected, as the API wires it."""
    sig = WorkOrderSignal()
    sig.connect(RequestStatusSynchronizer(service_requests))
    return sig


@pytest.fixture
def work_orders(session, clock, service_requests, signal, admin) -> WorkOrderService:
    return WorkOrderService(
        session,
        clock,
        requests=service_requests,
        signal=signal,
        actor_id=admin.id,
    )


@pytest.fixture
def make_request(service_requests, client_user, vehicle):
    def _make(desired_date=None, comment: str | None = None, service_id: UUID | None = None):
        return service_requests.create(
            client_user.id, vehicle.id, service_id=service_id,
            desired_date=desired_date, comment=comment,
        )

    return _make


@pytest.fixture
def service_request(make_request):
    return make_request(desired_date="2025-01-10T09:00:00Z", comment="Noise in the engine")


@pytest.fixture
def draft_order(work_orders, service_request):
    return work_orders.create_from_request(service_request.id)
