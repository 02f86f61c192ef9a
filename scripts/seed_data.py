#!/usr/bin/env python3
"""
Seed the database with a small demo workshop.

Creates the schema if needed, then adds an admin, a worker, a client with
one vehicle, a service and spare part catalog, and three service requests.
One request is turned into a COMPLETED work order so the financial report
has something to show.

Usage:
    python3 scripts/seed_data.py [--reset]

Reads the database URL from the process settings (``WORKSHOP_CONFIG`` /
``DATABASE_URL``).
"""

import argparse
import sys
from datetime import timedelta
from decimal import Decimal
from pathlib import Path

# ---------------------------------------------------------------------------
# Project root on sys.path
# ---------------------------------------------------------------------------
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))


def main() -> int:
    parser = argparse.ArgumentParser(description="Seed demo workshop data")
    parser.add_argument("--reset", action="store_true", help="Drop all tables first")
    args = parser.parse_args()

    from workshop_config import get_active_settings
    from workshop_kernel.db.engine import (
        create_tables,
        drop_tables,
        init_engine_from_url,
        session_scope,
    )
    from workshop_kernel.domain.clock import SystemClock
    from workshop_kernel.logging_config import configure_logging
    from workshop_kernel.models import Service, SparePart, SystemRole, User, Vehicle
    from workshop_kernel.models.work_order import WorkOrderStatus
    from workshop_modules.service_requests import RequestStatusSynchronizer, ServiceRequestService
    from workshop_modules.work_orders.service import WorkOrderService
    from workshop_modules.work_orders.signals import WorkOrderSignal

    settings = get_active_settings()
    configure_logging(level=settings.logging.level)
    engine = init_engine_from_url(settings.database.url, echo=settings.database.echo)

    if args.reset:
        drop_tables(engine)
    create_tables(engine)

    with session_scope() as session:
        admin = User(email="admin@workshop.local", name="Anna", surname="Admin",
                     role=SystemRole.ADMIN.value)
        worker = User(email="worker@workshop.local", name="Ivan", surname="Mechanic",
                      phone="+1 555 0101", role=SystemRole.WORKER.value)
        client = User(email="client@example.com", name="Olga", surname="Driver",
                      phone="+1 555 0199", role=SystemRole.CLIENT.value)
        session.add_all([admin, worker, client])
        session.flush()

        vehicle = Vehicle(owner_id=client.id, make="Toyota", model="Corolla",
                          year=2018, license_plate="A123BC")
        oil = Service(name="Oil change", description="Engine oil and filter",
                      base_price=Decimal("100.00"), duration_min=45)
        diag = Service(name="Diagnostics", base_price=Decimal("50.00"), duration_min=30)
        filt = SparePart(name="Oil filter", article="OF-100", price=Decimal("20.00"),
                         stock_quantity=25)
        pads = SparePart(name="Brake pads", article="BP-220", price=Decimal("65.50"),
                         stock_quantity=8)
        session.add_all([vehicle, oil, diag, filt, pads])
        session.flush()
        ids = {
            "admin": admin.id, "worker": worker.id, "client": client.id,
            "vehicle": vehicle.id, "oil": oil.id, "diag": diag.id,
            "filter": filt.id, "pads": pads.id,
        }

    clock = SystemClock()
    with session_scope() as session:
        requests = ServiceRequestService(session, clock)
        signal = WorkOrderSignal()
        signal.connect(RequestStatusSynchronizer(requests))
        orders = WorkOrderService(session, clock, requests=requests, signal=signal,
                                  actor_id=ids["admin"])

        soon = clock.now() + timedelta(days=2)
        first = requests.create(ids["client"], ids["vehicle"], ids["oil"], soon,
                                "Oil change before a trip")
        requests.create(ids["client"], ids["vehicle"], ids["diag"], soon + timedelta(days=7),
                        "Strange noise when braking")
        requests.create(ids["client"], ids["vehicle"], comment="Call me back")

        order = orders.create_from_request(first.id, responsible_worker_id=ids["worker"])
        orders.add_service_line(order.id, ids["oil"])
        orders.add_service_line(order.id, ids["diag"], quantity=3)
        orders.add_part_line(order.id, ids["filter"])
        orders.update_status(order.id, WorkOrderStatus.IN_PROGRESS)
        order = orders.update_status(order.id, WorkOrderStatus.COMPLETED)

    print(f"Seeded {settings.database.url}")
    print(f"  admin   {ids['admin']}")
    print(f"  worker  {ids['worker']}")
    print(f"  client  {ids['client']}")
    print(f"  order   {order.number}  total {order.total_cost}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
