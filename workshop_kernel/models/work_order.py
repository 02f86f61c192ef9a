"""
Module: workshop_kernel.models.work_order
Responsibility: ORM persistence for work orders and their service and part
    lines.  The line tables are the source of truth for money; the three
    totals on the work order row are a cache rebuilt from them.
Architecture position: Kernel > Models.  May import from db/base.py only.
    MUST NOT import from services/, selectors/, domain/, or outer layers.

Invariants enforced:
    - number is globally unique (uq_work_order_number).
    - request_id is unique: a service request backs at most one work order
      (uq_work_order_request).  This constraint is the backstop for the
      duplicate check done by the service.
    - quantity >= 1 on every line (ck_*_quantity_positive).
    - total_cost == total_labor_cost + total_parts_cost after every ledger
      mutation (maintained by the ledger, never patched incrementally).
    - Line price is a snapshot copied at insertion; catalog ids are plain
      UUID columns with NO foreign key so catalog deletions never touch
      historical lines.

Failure modes:
    - IntegrityError on duplicate number or duplicate request_id.
    - IntegrityError on a quantity below 1 reaching the database.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID

from sqlalchemy import CheckConstraint, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from workshop_kernel.db.base import TrackedBase, UTCDateTime, UUIDString
from workshop_kernel.models.service_request import ServiceRequest


class WorkOrderStatus(str, Enum):
    """Work order lifecycle status.

    Contract: COMPLETED and CANCELLED close the ledger.  No line, planned
    date, or responsible worker change is accepted in either of them.
    """

    DRAFT = "DRAFT"
    PLANNED = "PLANNED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


CLOSED_STATUSES: frozenset[str] = frozenset(
    {WorkOrderStatus.COMPLETED.value, WorkOrderStatus.CANCELLED.value}
)


class WorkOrder(TrackedBase):
    """
    A billable unit of labor and parts performed against one vehicle.

    Guarantees:
        - Starts in DRAFT with zero lines and zero totals.
        - completed_date is set only on a transition into COMPLETED.
        - Lines are owned exclusively and deleted with the order.
    """

    __tablename__ = "work_orders"

    __table_args__ = (
        UniqueConstraint("number", name="uq_work_order_number"),
        UniqueConstraint("request_id", name="uq_work_order_request"),
        Index("idx_work_order_status", "status"),
        Index("idx_work_order_client", "client_id"),
        Index("idx_work_order_vehicle", "vehicle_id"),
        Index("idx_work_order_worker", "responsible_worker_id"),
        Index("idx_work_order_completed", "completed_date"),
    )

    # Human-readable sequence number (WO-000001)
    number: Mapped[str] = mapped_column(String(50), nullable=False)

    client_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)

    vehicle_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)

    request_id: Mapped[UUID | None] = mapped_column(
        UUIDString(),
        ForeignKey("service_requests.id"),
        nullable=True,
    )

    responsible_worker_id: Mapped[UUID | None] = mapped_column(UUIDString(), nullable=True)

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=WorkOrderStatus.DRAFT.value,
    )

    planned_date: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)

    completed_date: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)

    # Cached totals, rebuilt from the lines
    total_labor_cost: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    total_parts_cost: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    total_cost: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))

    request: Mapped[ServiceRequest | None] = relationship(
        ServiceRequest,
        foreign_keys=[request_id],
        lazy="selectin",
    )

    service_lines: Mapped[list["WorkOrderServiceLine"]] = relationship(
        back_populates="work_order",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
        order_by="WorkOrderServiceLine.created_at",
    )

    part_lines: Mapped[list["WorkOrderPartLine"]] = relationship(
        back_populates="work_order",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
        order_by="WorkOrderPartLine.created_at",
    )

    def __repr__(self) -> str:
        return f"<WorkOrder {self.number} {self.status} {self.total_cost}>"


class WorkOrderServiceLine(TrackedBase):
    """A labor line: a quantity of one catalog service at a frozen price."""

    __tablename__ = "work_order_services"

    __table_args__ = (
        CheckConstraint("quantity >= 1", name="ck_work_order_services_quantity_positive"),
        Index("idx_wo_service_line_order", "work_order_id"),
        Index("idx_wo_service_line_service", "service_id"),
    )

    work_order_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("work_orders.id", ondelete="CASCADE"),
        nullable=False,
    )

    # Catalog reference (no FK)
    service_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)

    quantity: Mapped[int] = mapped_column(nullable=False, default=1)

    # Unit price snapshot at insertion time
    price: Mapped[Decimal] = mapped_column(nullable=False)

    total: Mapped[Decimal] = mapped_column(nullable=False)

    work_order: Mapped[WorkOrder] = relationship(back_populates="service_lines")

    @property
    def item_id(self) -> UUID:
        return self.service_id

    def __repr__(self) -> str:
        return f"<WorkOrderServiceLine {self.service_id} x{self.quantity} {self.total}>"


class WorkOrderPartLine(TrackedBase):
    """A parts line: a quantity of one spare part at a frozen price."""

    __tablename__ = "work_order_parts"

    __table_args__ = (
        CheckConstraint("quantity >= 1", name="ck_work_order_parts_quantity_positive"),
        Index("idx_wo_part_line_order", "work_order_id"),
        Index("idx_wo_part_line_part", "part_id"),
    )

    work_order_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("work_orders.id", ondelete="CASCADE"),
        nullable=False,
    )

    # Catalog reference (no FK)
    part_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)

    quantity: Mapped[int] = mapped_column(nullable=False, default=1)

    # Unit price snapshot at insertion time
    price: Mapped[Decimal] = mapped_column(nullable=False)

    total: Mapped[Decimal] = mapped_column(nullable=False)

    work_order: Mapped[WorkOrder] = relationship(back_populates="part_lines")

    @property
    def item_id(self) -> UUID:
        return self.part_id

    def __repr__(self) -> str:
        return f"<WorkOrderPartLine {self.part_id} x{self.quantity} {self.total}>"
