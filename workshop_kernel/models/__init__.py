"""ORM models for the workshop ledger and the reference data it reads."""

from workshop_kernel.models.catalog import Service, SparePart
from workshop_kernel.models.party import SystemRole, User, Vehicle
from workshop_kernel.models.service_request import ServiceRequest, ServiceRequestStatus
from workshop_kernel.models.work_order import (
    WorkOrder,
    WorkOrderPartLine,
    WorkOrderServiceLine,
    WorkOrderStatus,
)

__all__ = [
    "SystemRole",
    "User",
    "Vehicle",
    "Service",
    "SparePart",
    "ServiceRequest",
    "ServiceRequestStatus",
    "WorkOrder",
    "WorkOrderStatus",
    "WorkOrderServiceLine",
    "WorkOrderPartLine",
]
