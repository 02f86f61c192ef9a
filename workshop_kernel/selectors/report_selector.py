"""
Module: workshop_kernel.selectors.report_selector
Responsibility: Period queries behind the financial report: completed work
    orders, their lines, and service requests created in the period.
Architecture position: Kernel > Selectors.  Read-only; takes no locks.

Invariants enforced:
    - Completed orders are selected by status COMPLETED AND completed_date
      within [from, to], both bounds inclusive.
    - Requests are selected by created_at within [from, to] regardless of
      status.  The two populations are independent.
    - Money is read as Decimal and never summed in SQL, so no backend can
      round it through a float.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import select

from workshop_kernel.logging_config import get_logger
from workshop_kernel.models.service_request import ServiceRequest
from workshop_kernel.models.work_order import (
    WorkOrder,
    WorkOrderPartLine,
    WorkOrderServiceLine,
    WorkOrderStatus,
)
from workshop_kernel.selectors.base import BaseSelector

logger = get_logger("selectors.report")


@dataclass(frozen=True)
class OrderRow:
    """Flat completed work order row."""

    id: UUID
    number: str
    status: str
    client_id: UUID
    vehicle_id: UUID
    request_id: UUID | None
    planned_date: datetime | None
    completed_date: datetime | None
    total_labor_cost: Decimal
    total_parts_cost: Decimal
    total_cost: Decimal


@dataclass(frozen=True)
class ReportLineRow:
    """One service or part line of a reported order."""

    work_order_id: UUID
    item_id: UUID
    quantity: int
    price: Decimal
    total: Decimal


@dataclass(frozen=True)
class RequestRow:
    id: UUID
    client_id: UUID
    vehicle_id: UUID
    service_id: UUID | None
    status: str
    desired_date: datetime | None
    created_at: datetime
    comment: str | None


def _request_row(row: ServiceRequest) -> RequestRow:
    return RequestRow(
        id=row.id,
        client_id=row.client_id,
        vehicle_id=row.vehicle_id,
        service_id=row.service_id,
        status=row.status,
        desired_date=row.desired_date,
        created_at=row.created_at,
        comment=row.comment,
    )


class ReportSelector(BaseSelector[WorkOrder]):
    """Queries for the period financial report."""

    def completed_orders(self, from_date: datetime, to_date: datetime) -> list[OrderRow]:
        rows = self.session.execute(
            select(
                WorkOrder.id,
                WorkOrder.number,
                WorkOrder.status,
                WorkOrder.client_id,
                WorkOrder.vehicle_id,
                WorkOrder.request_id,
                WorkOrder.planned_date,
                WorkOrder.completed_date,
                WorkOrder.total_labor_cost,
                WorkOrder.total_parts_cost,
                WorkOrder.total_cost,
            )
            .where(WorkOrder.status == WorkOrderStatus.COMPLETED.value)
            .where(WorkOrder.completed_date.is_not(None))
            .where(WorkOrder.completed_date >= from_date)
            .where(WorkOrder.completed_date <= to_date)
            .order_by(WorkOrder.completed_date, WorkOrder.number)
        ).all()

        orders = [OrderRow(*row) for row in rows]
        logger.debug(
            "completed_orders_loaded",
            extra={"count": len(orders), "from": from_date, "to": to_date},
        )
        return orders

    def service_lines(self, order_ids: Iterable[UUID]) -> list[ReportLineRow]:
        ids = set(order_ids)
        if not ids:
            return []
        rows = self.session.execute(
            select(
                WorkOrderServiceLine.work_order_id,
                WorkOrderServiceLine.service_id,
                WorkOrderServiceLine.quantity,
                WorkOrderServiceLine.price,
                WorkOrderServiceLine.total,
            ).where(WorkOrderServiceLine.work_order_id.in_(ids))
        ).all()
        return [ReportLineRow(*row) for row in rows]

    def part_lines(self, order_ids: Iterable[UUID]) -> list[ReportLineRow]:
        ids = set(order_ids)
        if not ids:
            return []
        rows = self.session.execute(
            select(
                WorkOrderPartLine.work_order_id,
                WorkOrderPartLine.part_id,
                WorkOrderPartLine.quantity,
                WorkOrderPartLine.price,
                WorkOrderPartLine.total,
            ).where(WorkOrderPartLine.work_order_id.in_(ids))
        ).all()
        return [ReportLineRow(*row) for row in rows]

    def requests_created(self, from_date: datetime, to_date: datetime) -> list[RequestRow]:
        rows = self.session.execute(
            select(ServiceRequest)
            .where(ServiceRequest.created_at >= from_date)
            .where(ServiceRequest.created_at <= to_date)
            .order_by(ServiceRequest.created_at)
        ).scalars()
        return [_request_row(row) for row in rows]

    def requests_by_ids(self, request_ids: Iterable[UUID]) -> dict[UUID, RequestRow]:
        ids = set(request_ids)
        if not ids:
            return {}
        rows = self.session.execute(
            select(ServiceRequest).where(ServiceRequest.id.in_(ids))
        ).scalars()
        return {row.id: _request_row(row) for row in rows}
