"""
Service Requests Module (``workshop_modules.service_requests``).

Customer intake records that precede work orders: creation by the vehicle
owner, staff listing and status changes, cancellation by the owner, and the
listener that keeps a request's status in step with its work order.
"""

from workshop_modules.service_requests.models import ServiceRequestFilters, ServiceRequestInfo
from workshop_modules.service_requests.service import ServiceRequestService
from workshop_modules.service_requests.sync import RequestStatusSynchronizer

__all__ = [
    "ServiceRequestInfo",
    "ServiceRequestFilters",
    "ServiceRequestService",
    "RequestStatusSynchronizer",
]
