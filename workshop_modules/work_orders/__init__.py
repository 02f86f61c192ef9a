"""
Work Orders Module (``workshop_modules.work_orders``).

Responsibility
--------------
The repair work order lifecycle and its line item ledger: creation from a
service request, status transitions, the editability gate, service and
part lines with snapshotted prices, and cached totals rebuilt from the
lines after every change.

Architecture position
---------------------
**Modules layer** -- declarative workflow, config schema, value objects,
flush-only ledger, and the ``WorkOrderService`` facade
(``workshop_modules.work_orders.service``) that owns transactions.

Invariants enforced
-------------------
* grand total == labor total + parts total == sums of the current lines.
* A service request backs at most one work order.
* Closed orders (COMPLETED, CANCELLED) accept no line or date changes.
"""

from workshop_modules.work_orders.config import WorkOrderConfig
from workshop_modules.work_orders.models import (
    UNSET,
    LedgerTotals,
    LineInput,
    LineKind,
    PriceSnapshot,
    WorkOrder,
    WorkOrderFilters,
    WorkOrderLine,
    WorkOrderUpdate,
)
from workshop_modules.work_orders.signals import ChangeKind, WorkOrderChanged, WorkOrderSignal
from workshop_modules.work_orders.workflows import WORK_ORDER_WORKFLOW

__all__ = [
    "UNSET",
    "LedgerTotals",
    "LineInput",
    "LineKind",
    "PriceSnapshot",
    "WorkOrder",
    "WorkOrderFilters",
    "WorkOrderLine",
    "WorkOrderUpdate",
    "ChangeKind",
    "WorkOrderChanged",
    "WorkOrderSignal",
    "WORK_ORDER_WORKFLOW",
    "WorkOrderConfig",
]
