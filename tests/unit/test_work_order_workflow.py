"""
Work order status policy and the editability gate.

COMPLETED and CANCELLED are terminal under the default (strict) policy.
The permissive policy lets status alone leave them.
"""

from uuid import uuid4

import pytest

from workshop_kernel.exceptions import InvalidStatusTransitionError, WorkOrderNotEditableError
from workshop_kernel.models.work_order import WorkOrder, WorkOrderStatus
from workshop_modules.work_orders.workflows import (
    WORK_ORDER_WORKFLOW,
    check_status_change,
    ensure_editable,
)

OPEN = [WorkOrderStatus.DRAFT, WorkOrderStatus.PLANNED, WorkOrderStatus.IN_PROGRESS]
CLOSED = [WorkOrderStatus.COMPLETED, WorkOrderStatus.CANCELLED]


def _order(status: WorkOrderStatus) -> WorkOrder:
    return WorkOrder(id=uuid4(), number="WO-000001", status=status.value)


class TestWorkflowDefinition:

    def test_initial_state_is_draft(self):
        assert WORK_ORDER_WORKFLOW.initial_state == WorkOrderStatus.DRAFT.value

    def test_terminal_states(self):
        assert set(WORK_ORDER_WORKFLOW.terminal_states) == {s.value for s in CLOSED}

    @pytest.mark.parametrize("source", OPEN)
    def test_open_states_reach_every_other_state(self, source):
        targets = set(WORK_ORDER_WORKFLOW.targets_from(source.value))
        assert targets == {s.value for s in WorkOrderStatus} - {source.value}

    @pytest.mark.parametrize("source", CLOSED)
    def test_terminal_states_have_no_targets(self, source):
        assert WORK_ORDER_WORKFLOW.targets_from(source.value) == ()


class TestCheckStatusChange:

    @pytest.mark.parametrize("source", OPEN)
    def test_open_to_completed(self, source):
        check_status_change(_order(source), WorkOrderStatus.COMPLETED)

    @pytest.mark.parametrize("source", CLOSED)
    def test_leaving_terminal_rejected_by_default(self, source):
        with pytest.raises(InvalidStatusTransitionError) as exc_info:
            check_status_change(_order(source), WorkOrderStatus.IN_PROGRESS)
        assert exc_info.value.from_status == source.value
        assert exc_info.value.to_status == "IN_PROGRESS"

    @pytest.mark.parametrize("source", CLOSED)
    def test_leaving_terminal_allowed_when_permissive(self, source, captured_logs):
        check_status_change(_order(source), WorkOrderStatus.DRAFT, allow_terminal_reopen=True)
        assert any(r["message"] == "work_order_terminal_status_reopened" for r in captured_logs())

    @pytest.mark.parametrize("status", list(WorkOrderStatus))
    def test_same_status_is_noop(self, status):
        check_status_change(_order(status), status)


class TestEnsureEditable:

    @pytest.mark.parametrize("status", OPEN)
    def test_open_orders_editable(self, status):
        ensure_editable(_order(status))

    @pytest.mark.parametrize("status", CLOSED)
    def test_closed_orders_rejected(self, status):
        with pytest.raises(WorkOrderNotEditableError) as exc_info:
            ensure_editable(_order(status))
        assert exc_info.value.message == "Work order is not editable"
