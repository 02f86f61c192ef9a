"""Service request value objects."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from workshop_kernel.models.service_request import ServiceRequest, ServiceRequestStatus


@dataclass(frozen=True)
class ServiceRequestInfo:
    id: UUID
    client_id: UUID
    vehicle_id: UUID
    service_id: UUID | None
    desired_date: datetime | None
    comment: str | None
    status: ServiceRequestStatus
    created_at: datetime

    @classmethod
    def from_model(cls, row: ServiceRequest) -> ServiceRequestInfo:
        return cls(
            id=row.id,
            client_id=row.client_id,
            vehicle_id=row.vehicle_id,
            service_id=row.service_id,
            desired_date=row.desired_date,
            comment=row.comment,
            status=ServiceRequestStatus(row.status),
            created_at=row.created_at,
        )


@dataclass(frozen=True)
class ServiceRequestFilters:
    """Staff listing filters.  Date bounds apply to the desired date."""
    status: ServiceRequestStatus | None = None
    client_id: UUID | None = None
    from_date: datetime | None = None
    to_date: datetime | None = None
