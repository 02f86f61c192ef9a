"""
Work Order Workflows.

State machine for work order status and the editability gate that every
ledger mutation passes through.
"""

from workshop_kernel.domain.workflow import Guard, Transition, Workflow
from workshop_kernel.exceptions import InvalidStatusTransitionError, WorkOrderNotEditableError
from workshop_kernel.logging_config import get_logger
from workshop_kernel.models.work_order import CLOSED_STATUSES, WorkOrder, WorkOrderStatus

logger = get_logger("modules.work_orders.workflows")


# -----------------------------------------------------------------------------
# Guards
# -----------------------------------------------------------------------------

LEDGER_OPEN = Guard(
    name="ledger_open",
    description="Work order is not COMPLETED or CANCELLED",
)


# -----------------------------------------------------------------------------
# Work Order Workflow
# -----------------------------------------------------------------------------

_OPEN_STATES = (
    WorkOrderStatus.DRAFT.value,
    WorkOrderStatus.PLANNED.value,
    WorkOrderStatus.IN_PROGRESS.value,
)

_ACTIONS = {
    WorkOrderStatus.DRAFT.value: "return_to_draft",
    WorkOrderStatus.PLANNED.value: "plan",
    WorkOrderStatus.IN_PROGRESS.value: "start",
    WorkOrderStatus.COMPLETED.value: "complete",
    WorkOrderStatus.CANCELLED.value: "cancel",
}

WORK_ORDER_WORKFLOW = Workflow(
    name="work_order",
    description="Repair work order lifecycle",
    initial_state=WorkOrderStatus.DRAFT.value,
    states=tuple(s.value for s in WorkOrderStatus),
    transitions=tuple(
        Transition(
            from_state=source,
            to_state=target.value,
            action=_ACTIONS[target.value],
            guard=LEDGER_OPEN,
        )
        for source in _OPEN_STATES
        for target in WorkOrderStatus
        if target.value != source
    ),
    terminal_states=(
        WorkOrderStatus.COMPLETED.value,
        WorkOrderStatus.CANCELLED.value,
    ),
)

logger.debug(
    "work_order_workflow_defined",
    extra={
        "states": list(WORK_ORDER_WORKFLOW.states),
        "transition_count": len(WORK_ORDER_WORKFLOW.transitions),
    },
)


def ensure_editable(order: WorkOrder) -> None:
    """
    Reject any ledger, planned date, or worker change on a closed order.

    Raises:
        WorkOrderNotEditableError: status is COMPLETED or CANCELLED.
    """
    if order.status in CLOSED_STATUSES:
        raise WorkOrderNotEditableError(str(order.id), order.status)


def check_status_change(
    order: WorkOrder,
    target: WorkOrderStatus,
    allow_terminal_reopen: bool = False,
) -> None:
    """
    Validate a status change against the workflow.

    Setting the current status again is always accepted (no-op).

    Raises:
        InvalidStatusTransitionError: the change is not declared and the
            permissive policy is off.
    """
    if order.status == target.value:
        return
    if WORK_ORDER_WORKFLOW.transition_for(order.status, target.value) is not None:
        return
    if allow_terminal_reopen and WORK_ORDER_WORKFLOW.is_terminal(order.status):
        logger.warning(
            "work_order_terminal_status_reopened",
            extra={
                "work_order_id": str(order.id),
                "from_status": order.status,
                "to_status": target.value,
            },
        )
        return
    raise InvalidStatusTransitionError(str(order.id), order.status, target.value)
