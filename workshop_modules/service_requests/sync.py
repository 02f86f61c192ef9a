"""
Keeps a service request's status in step with its work order.

Connected to ``WorkOrderSignal`` by the host application.  The work order
ledger never writes to service requests itself.

    created                      -> request CONFIRMED
    status changed to COMPLETED  -> request COMPLETED
"""

from workshop_kernel.logging_config import get_logger
from workshop_kernel.models.service_request import ServiceRequestStatus
from workshop_kernel.models.work_order import WorkOrderStatus
from workshop_modules.service_requests.service import ServiceRequestService
from workshop_modules.work_orders.signals import ChangeKind, WorkOrderChanged

logger = get_logger("modules.service_requests.sync")


class RequestStatusSynchronizer:
    """``WorkOrderSignal`` listener updating the originating request."""

    def __init__(self, requests: ServiceRequestService):
        self._requests = requests

    def target_status(self, event: WorkOrderChanged) -> ServiceRequestStatus | None:
        if event.change == ChangeKind.CREATED:
            return ServiceRequestStatus.CONFIRMED
        if (
            event.change in (ChangeKind.STATUS_CHANGED, ChangeKind.UPDATED)
            and event.status == WorkOrderStatus.COMPLETED
            and event.previous_status != WorkOrderStatus.COMPLETED
        ):
            return ServiceRequestStatus.COMPLETED
        return None

    def __call__(self, event: WorkOrderChanged) -> None:
        if event.request_id is None:
            return
        target = self.target_status(event)
        if target is None:
            return
        self._requests.update_status(event.request_id, target)
        logger.info(
            "service_request_synced",
            extra={
                "request_id": str(event.request_id),
                "work_order_id": str(event.work_order_id),
                "change": event.change.value,
                "request_status": target.value,
            },
        )
