"""
Work Order Domain Models (``workshop_modules.work_orders.models``).

Responsibility
--------------
Frozen dataclass value objects returned by the work order service and
accepted by its bulk update path: work order views, line views, price
snapshots, ledger totals, and update/filter inputs.

Architecture position
---------------------
**Modules layer** -- pure data definitions with ZERO I/O.

Invariants enforced
-------------------
* All models are ``frozen=True`` (immutable after construction).
* All monetary fields use ``Decimal`` -- NEVER ``float``.
* ``LineInput.quantity`` is at least 1.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

from workshop_kernel.models.service_request import ServiceRequestStatus
from workshop_kernel.models.work_order import (
    WorkOrder as WorkOrderModel,
    WorkOrderPartLine,
    WorkOrderServiceLine,
    WorkOrderStatus,
)


class LineKind(str, Enum):
    """Which half of the ledger a line belongs to."""
    SERVICE = "service"
    PART = "part"


class _Unset:
    """Marker for "argument not supplied", distinct from an explicit None."""

    _instance: _Unset | None = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()


def is_set(value: object) -> bool:
    return value is not UNSET


@dataclass(frozen=True)
class PriceSnapshot:
    """Unit price of a catalog item captured at one instant."""
    kind: LineKind
    item_id: UUID
    unit_price: Decimal

    def total_for(self, quantity: int) -> Decimal:
        return self.unit_price * quantity


@dataclass(frozen=True)
class LedgerTotals:
    """The three cached totals of a work order."""
    labor: Decimal
    parts: Decimal
    grand: Decimal


@dataclass(frozen=True)
class LineInput:
    """One entry of a full line replacement list."""
    item_id: UUID
    quantity: int = 1

    def __post_init__(self):
        if isinstance(self.quantity, bool) or not isinstance(self.quantity, int):
            raise ValueError("quantity must be an integer")
        if self.quantity < 1:
            raise ValueError("quantity must be at least 1")


@dataclass(frozen=True)
class WorkOrderUpdate:
    """
    Bulk update of a work order.

    Fields left as UNSET (or None for the line lists) are not touched.  An
    explicit empty line tuple removes every line of that kind.
    ``planned_date`` and ``responsible_worker_id`` given as None or "" clear
    the field.
    """
    status: WorkOrderStatus | None = None
    planned_date: Any = UNSET
    responsible_worker_id: Any = UNSET
    services: tuple[LineInput, ...] | None = None
    parts: tuple[LineInput, ...] | None = None

    def is_empty(self) -> bool:
        return (
            self.status is None
            and not is_set(self.planned_date)
            and not is_set(self.responsible_worker_id)
            and self.services is None
            and self.parts is None
        )

    def has_editable_changes(self) -> bool:
        """True when a field gated by the editability check is present."""
        return (
            is_set(self.planned_date)
            or is_set(self.responsible_worker_id)
            or self.services is not None
            or self.parts is not None
        )


@dataclass(frozen=True)
class WorkOrderFilters:
    status: WorkOrderStatus | None = None
    client_id: UUID | None = None
    vehicle_id: UUID | None = None
    responsible_worker_id: UUID | None = None


@dataclass(frozen=True)
class WorkOrderLine:
    """A service or part line as seen by callers."""
    id: UUID
    kind: LineKind
    item_id: UUID
    quantity: int
    price: Decimal
    total: Decimal

    @classmethod
    def from_model(cls, line: WorkOrderServiceLine | WorkOrderPartLine) -> WorkOrderLine:
        kind = LineKind.SERVICE if isinstance(line, WorkOrderServiceLine) else LineKind.PART
        return cls(
            id=line.id,
            kind=kind,
            item_id=line.item_id,
            quantity=line.quantity,
            price=line.price,
            total=line.total,
        )


@dataclass(frozen=True)
class RequestSummary:
    """Originating service request, as attached to a work order view."""
    id: UUID
    status: ServiceRequestStatus
    desired_date: datetime | None
    created_at: datetime


@dataclass(frozen=True)
class WorkOrder:
    """A work order with its lines and cached totals."""
    id: UUID
    number: str
    status: WorkOrderStatus
    client_id: UUID
    vehicle_id: UUID
    request_id: UUID | None
    responsible_worker_id: UUID | None
    planned_date: datetime | None
    completed_date: datetime | None
    total_labor_cost: Decimal
    total_parts_cost: Decimal
    total_cost: Decimal
    services: tuple[WorkOrderLine, ...] = ()
    parts: tuple[WorkOrderLine, ...] = ()
    request: RequestSummary | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_editable(self) -> bool:
        return self.status not in (WorkOrderStatus.COMPLETED, WorkOrderStatus.CANCELLED)

    @classmethod
    def from_model(cls, order: WorkOrderModel) -> WorkOrder:
        request = None
        if order.request is not None:
            request = RequestSummary(
                id=order.request.id,
                status=ServiceRequestStatus(order.request.status),
                desired_date=order.request.desired_date,
                created_at=order.request.created_at,
            )
        return cls(
            id=order.id,
            number=order.number,
            status=WorkOrderStatus(order.status),
            client_id=order.client_id,
            vehicle_id=order.vehicle_id,
            request_id=order.request_id,
            responsible_worker_id=order.responsible_worker_id,
            planned_date=order.planned_date,
            completed_date=order.completed_date,
            total_labor_cost=order.total_labor_cost,
            total_parts_cost=order.total_parts_cost,
            total_cost=order.total_cost,
            services=tuple(WorkOrderLine.from_model(line) for line in order.service_lines),
            parts=tuple(WorkOrderLine.from_model(line) for line in order.part_lines),
            request=request,
            created_at=order.created_at,
            updated_at=order.updated_at,
        )
