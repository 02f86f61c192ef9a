"""
Work order change signal.

The lifecycle publishes a ``WorkOrderChanged`` event after each committed
mutation.  Listeners react outside the ledger's transaction; the service
request status sync is the main consumer.

Listeners run synchronously, in connection order, after commit.  A failing
listener is logged and its exception re-raised to the caller; the committed
work order change stands.
"""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from uuid import UUID

from workshop_kernel.logging_config import get_logger
from workshop_kernel.models.work_order import WorkOrderStatus

logger = get_logger("modules.work_orders.signals")


class ChangeKind(str, Enum):
    CREATED = "created"
    STATUS_CHANGED = "status_changed"
    LINES_CHANGED = "lines_changed"
    UPDATED = "updated"
    DELETED = "deleted"


@dataclass(frozen=True)
class WorkOrderChanged:
    """A committed change to one work order."""
    work_order_id: UUID
    request_id: UUID | None
    change: ChangeKind
    status: WorkOrderStatus
    occurred_at: datetime
    previous_status: WorkOrderStatus | None = None


Listener = Callable[[WorkOrderChanged], None]


class WorkOrderSignal:
    """Synchronous listener registry."""

    def __init__(self) -> None:
        self._listeners: list[Listener] = []

    def connect(self, listener: Listener) -> Listener:
        if listener not in self._listeners:
            self._listeners.append(listener)
        return listener

    def disconnect(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    @property
    def listeners(self) -> tuple[Listener, ...]:
        return tuple(self._listeners)

    def send(self, event: WorkOrderChanged) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.error(
                    "work_order_listener_failed",
                    extra={
                        "work_order_id": str(event.work_order_id),
                        "change": event.change.value,
                        "listener": getattr(listener, "__qualname__", repr(listener)),
                    },
                    exc_info=True,
                )
                raise
