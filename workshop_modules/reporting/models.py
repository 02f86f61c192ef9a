"""
Reporting Domain Models (``workshop_modules.reporting.models``).

Frozen dataclasses for the period financial report: summary figures,
per-item breakdowns, and the flattened order and request listings used
by the export.

Invariants enforced
-------------------
* All models are ``frozen=True``.
* All monetary fields use ``Decimal`` -- NEVER ``float``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from workshop_kernel.selectors.catalog_selector import ServiceInfo, SparePartInfo


@dataclass(frozen=True)
class ReportPeriod:
    from_date: datetime
    to_date: datetime


@dataclass(frozen=True)
class ServiceBreakdownRow:
    """Sales of one catalog service over the period."""
    id: UUID
    name: str
    quantity: int
    unit_price: Decimal
    total: Decimal
    service: ServiceInfo | None = None


@dataclass(frozen=True)
class PartBreakdownRow:
    """Sales of one spare part over the period."""
    id: UUID
    name: str
    quantity: int
    unit_price: Decimal
    total: Decimal
    part: SparePartInfo | None = None


@dataclass(frozen=True)
class ClientSummary:
    name: str
    phone: str


@dataclass(frozen=True)
class VehicleSummary:
    make: str
    model: str
    year: int | None
    license_plate: str

    def describe(self) -> str:
        parts = [self.make, self.model, str(self.year) if self.year else "", self.license_plate]
        return " ".join(p for p in parts if p)


@dataclass(frozen=True)
class OriginRequestSummary:
    id: UUID
    status: str
    desired_date: datetime | None
    created_at: datetime


@dataclass(frozen=True)
class WorkOrderDetail:
    """One completed order, flattened for listing and export."""
    id: UUID
    number: str
    status: str
    planned_date: datetime | None
    completed_date: datetime | None
    total_labor_cost: Decimal
    total_parts_cost: Decimal
    total_cost: Decimal
    client: ClientSummary
    vehicle: VehicleSummary
    services_count: int
    parts_count: int
    services_total: Decimal
    parts_total: Decimal
    request: OriginRequestSummary | None = None


@dataclass(frozen=True)
class ServiceRequestDetail:
    """One request created in the period, flattened for listing and export."""
    id: UUID
    status: str
    desired_date: datetime | None
    created_at: datetime
    comment: str | None
    client: ClientSummary
    vehicle: VehicleSummary


@dataclass(frozen=True)
class FinancialReport:
    """
    Period financial report.

    ``revenue`` and ``completed_orders`` cover orders completed in the
    period; ``incoming_requests`` counts requests created in it.
    """
    period: ReportPeriod
    revenue: Decimal
    completed_orders: int
    incoming_requests: int
    services: tuple[ServiceBreakdownRow, ...] = ()
    parts: tuple[PartBreakdownRow, ...] = ()
    work_orders_detailed: tuple[WorkOrderDetail, ...] = ()
    service_requests_detailed: tuple[ServiceRequestDetail, ...] = ()
    generated_at: datetime | None = None
