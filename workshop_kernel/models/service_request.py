"""
Module: workshop_kernel.models.service_request
Responsibility: ORM persistence for customer service requests, the intake
    record a work order is built from.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - status is one of ServiceRequestStatus.
    - A CANCELLED request can never back a work order (enforced by the
      work order service, this model is its data source).
"""

from datetime import datetime
from enum import Enum
from uuid import UUID

from sqlalchemy import Index, String
from sqlalchemy.orm import Mapped, mapped_column

from workshop_kernel.db.base import TrackedBase, UTCDateTime, UUIDString


class ServiceRequestStatus(str, Enum):
    """Service request lifecycle status."""

    NEW = "NEW"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"


class ServiceRequest(TrackedBase):
    """
    A client's request for service on one of their vehicles.

    Non-goals:
        - Does not hold a back-reference to its work order; the 1:1 link
          lives on work_orders.request_id.
    """

    __tablename__ = "service_requests"

    __table_args__ = (
        Index("idx_service_request_client", "client_id"),
        Index("idx_service_request_status", "status"),
        Index("idx_service_request_created", "created_at"),
    )

    client_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)

    vehicle_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)

    service_id: Mapped[UUID | None] = mapped_column(UUIDString(), nullable=True)

    desired_date: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)

    comment: Mapped[str | None] = mapped_column(String(2000), nullable=True)

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=ServiceRequestStatus.NEW.value,
    )

    def __repr__(self) -> str:
        return f"<ServiceRequest {self.id} {self.status}>"
