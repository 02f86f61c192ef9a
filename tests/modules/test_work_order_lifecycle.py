"""
Work order lifecycle through WorkOrderService.

Covers creation from a service request, numbering, status changes,
completed_date stamping, bulk updates, deletion, and listings.
"""

from datetime import UTC, datetime
from decimal import Decimal
from uuid import uuid4

import pytest
from sqlalchemy.exc import OperationalError

from workshop_kernel.exceptions import (
    CancelledRequestError,
    CatalogItemsNotFoundError,
    DuplicateWorkOrderError,
    InvalidDateError,
    InvalidResponsibleWorkerError,
    InvalidStatusTransitionError,
    NoFieldsToUpdateError,
    PersistenceError,
    ResponsibleWorkerNotFoundError,
    ServiceRequestNotFoundError,
    WorkOrderNotEditableError,
    WorkOrderNotFoundError,
)
from workshop_kernel.models import SystemRole
from workshop_kernel.models.service_request import ServiceRequestStatus
from workshop_kernel.models.work_order import WorkOrderStatus
from workshop_modules.work_orders.config import WorkOrderConfig
from workshop_modules.work_orders.ledger import LineItemLedger
from workshop_modules.work_orders.models import LineInput, WorkOrderFilters, WorkOrderUpdate
from workshop_modules.work_orders.service import WorkOrderService


class TestCreateFromRequest:

    def test_creates_draft_with_request_data(self, work_orders, service_request, client_user,
                                             vehicle):
        order = work_orders.create_from_request(service_request.id)

        assert order.number == "WO-000001"
        assert order.status == WorkOrderStatus.DRAFT
        assert order.client_id == client_user.id
        assert order.vehicle_id == vehicle.id
        assert order.request_id == service_request.id
        assert order.total_cost == Decimal("0")
        assert order.services == ()
        assert order.completed_date is None

    def test_planned_date_inherits_desired_date(self, work_orders, service_request):
        order = work_orders.create_from_request(service_request.id)
        assert order.planned_date == datetime(2025, 1, 10, 9, 0, tzinfo=UTC)

    def test_explicit_none_leaves_planned_date_empty(self, work_orders, service_request):
        order = work_orders.create_from_request(service_request.id, planned_date=None)
        assert order.planned_date is None

    def test_explicit_planned_date_is_wall_clock(self, work_orders, service_request):
        order = work_orders.create_from_request(
            service_request.id, planned_date="2025-02-01T10:00:00+03:00"
        )
        assert order.planned_date == datetime(2025, 2, 1, 10, 0, tzinfo=UTC)

    def test_invalid_planned_date(self, work_orders, service_request):
        with pytest.raises(InvalidDateError):
            work_orders.create_from_request(service_request.id, planned_date="soon")

    def test_request_confirmed_by_signal(self, work_orders, service_requests, service_request):
        work_orders.create_from_request(service_request.id)
        assert service_requests.get(service_request.id).status == ServiceRequestStatus.CONFIRMED

    def test_sequential_numbers(self, work_orders, make_request):
        numbers = [
            work_orders.create_from_request(make_request().id).number for _ in range(6)
        ]
        assert numbers[0] == "WO-000001"
        assert numbers[5] == "WO-000006"
        assert len(set(numbers)) == 6

    def test_numbers_not_reused_after_delete(self, work_orders, make_request):
        first = work_orders.create_from_request(make_request().id)
        work_orders.create_from_request(make_request().id)
        work_orders.delete_work_order(first.id)

        third = work_orders.create_from_request(make_request().id)

        assert third.number == "WO-000003"

    def test_duplicate_rejected(self, work_orders, service_request):
        work_orders.create_from_request(service_request.id)
        with pytest.raises(DuplicateWorkOrderError) as exc_info:
            work_orders.create_from_request(service_request.id)
        assert exc_info.value.message == "Work order already exists for this request"

    def test_cancelled_request_rejected(self, work_orders, service_requests, service_request,
                                       client_user):
        service_requests.cancel(service_request.id, client_user.id)
        with pytest.raises(CancelledRequestError):
            work_orders.create_from_request(service_request.id)

    def test_unknown_request(self, work_orders):
        with pytest.raises(ServiceRequestNotFoundError):
            work_orders.create_from_request(uuid4())

    def test_responsible_worker_must_exist(self, work_orders, service_request):
        with pytest.raises(ResponsibleWorkerNotFoundError):
            work_orders.create_from_request(service_request.id, responsible_worker_id=uuid4())

    def test_responsible_worker_must_be_staff(self, work_orders, service_request, client_user):
        with pytest.raises(InvalidResponsibleWorkerError):
            work_orders.create_from_request(
                service_request.id, responsible_worker_id=client_user.id
            )

    def test_failed_create_leaves_no_order(self, work_orders, service_request, client_user):
        with pytest.raises(InvalidResponsibleWorkerError):
            work_orders.create_from_request(
                service_request.id, responsible_worker_id=client_user.id
            )
        assert work_orders.list() == []

    def test_worker_assigned(self, work_orders, service_request, worker):
        order = work_orders.create_from_request(
            service_request.id, responsible_worker_id=str(worker.id)
        )
        assert order.responsible_worker_id == worker.id

    def test_custom_number_format(self, session, clock, service_request):
        service = WorkOrderService(
            session, clock, config=WorkOrderConfig(number_prefix="JOB-", number_width=4)
        )
        assert service.create_from_request(service_request.id).number == "JOB-0001"

    def test_logs_creation(self, work_orders, service_request, captured_logs):
        order = work_orders.create_from_request(service_request.id)
        records = [r for r in captured_logs() if r["message"] == "work_order_created"]
        assert records[0]["number"] == order.number
        assert records[0]["request_id"] == str(service_request.id)


class TestStatus:

    def test_completion_stamps_completed_date(self, work_orders, draft_order, clock):
        clock.advance(3600)
        order = work_orders.update_status(draft_order.id, WorkOrderStatus.COMPLETED)
        assert order.completed_date == clock.now()

    def test_completed_date_never_restamped(self, session, clock, draft_order):
        permissive = WorkOrderService(
            session, clock, config=WorkOrderConfig(allow_terminal_reopen=True)
        )
        first = permissive.update_status(draft_order.id, WorkOrderStatus.COMPLETED)
        clock.advance(60)
        permissive.update_status(draft_order.id, WorkOrderStatus.IN_PROGRESS)
        clock.advance(60)
        again = permissive.update_status(draft_order.id, WorkOrderStatus.COMPLETED)

        assert again.completed_date == first.completed_date

    def test_other_statuses_leave_completed_date_empty(self, work_orders, draft_order):
        order = work_orders.update_status(draft_order.id, WorkOrderStatus.IN_PROGRESS)
        assert order.completed_date is None

    def test_terminal_status_is_final_by_default(self, work_orders, draft_order):
        work_orders.update_status(draft_order.id, WorkOrderStatus.CANCELLED)
        with pytest.raises(InvalidStatusTransitionError):
            work_orders.update_status(draft_order.id, WorkOrderStatus.DRAFT)

    def test_same_status_accepted(self, work_orders, draft_order):
        work_orders.update_status(draft_order.id, WorkOrderStatus.COMPLETED)
        order = work_orders.update_status(draft_order.id, WorkOrderStatus.COMPLETED)
        assert order.status == WorkOrderStatus.COMPLETED

    def test_completion_completes_request(self, work_orders, service_requests, draft_order):
        work_orders.update_status(draft_order.id, WorkOrderStatus.COMPLETED)
        request = service_requests.get(draft_order.request_id)
        assert request.status == ServiceRequestStatus.COMPLETED

    def test_unknown_order(self, work_orders):
        with pytest.raises(WorkOrderNotFoundError):
            work_orders.update_status(uuid4(), WorkOrderStatus.PLANNED)


class TestBulkUpdate:

    def test_replaces_lines_and_fields(self, work_orders, draft_order, oil_change, diagnostics,
                                       oil_filter, worker):
        order = work_orders.update_work_order(draft_order.id, WorkOrderUpdate(
            status=WorkOrderStatus.PLANNED,
            planned_date="2025-03-01T08:00:00",
            responsible_worker_id=worker.id,
            services=(LineInput(oil_change.id), LineInput(diagnostics.id, 3)),
            parts=(LineInput(oil_filter.id),),
        ))

        assert order.status == WorkOrderStatus.PLANNED
        assert order.planned_date == datetime(2025, 3, 1, 8, 0, tzinfo=UTC)
        assert order.responsible_worker_id == worker.id
        assert order.total_labor_cost == Decimal("250")
        assert order.total_parts_cost == Decimal("20")
        assert order.total_cost == Decimal("270")

    def test_empty_update_rejected(self, work_orders, draft_order):
        with pytest.raises(NoFieldsToUpdateError) as exc_info:
            work_orders.update_work_order(draft_order.id, WorkOrderUpdate())
        assert exc_info.value.message == "No fields to update"

    def test_empty_list_clears_lines(self, work_orders, draft_order, oil_change, oil_filter):
        work_orders.add_service_line(draft_order.id, oil_change.id)
        work_orders.add_part_line(draft_order.id, oil_filter.id)

        order = work_orders.update_work_order(draft_order.id, WorkOrderUpdate(services=()))

        assert order.services == ()
        assert len(order.parts) == 1
        assert order.total_cost == Decimal("20")

    def test_mixed_valid_and_missing_ids_change_nothing(self, work_orders, draft_order,
                                                        oil_change):
        before = work_orders.add_service_line(draft_order.id, oil_change.id, quantity=2)

        with pytest.raises(CatalogItemsNotFoundError):
            work_orders.update_work_order(draft_order.id, WorkOrderUpdate(
                planned_date=None,
                services=(LineInput(oil_change.id), LineInput(uuid4())),
            ))

        after = work_orders.get(draft_order.id)
        assert [line.id for line in after.services] == [line.id for line in before.services]
        assert after.total_cost == before.total_cost
        assert after.planned_date == before.planned_date

    def test_missing_part_fails_service_replacement_too(self, work_orders, draft_order,
                                                        oil_change, diagnostics):
        work_orders.add_service_line(draft_order.id, oil_change.id)
        with pytest.raises(CatalogItemsNotFoundError):
            work_orders.update_work_order(draft_order.id, WorkOrderUpdate(
                services=(LineInput(diagnostics.id),),
                parts=(LineInput(uuid4()),),
            ))
        assert work_orders.get(draft_order.id).services[0].item_id == oil_change.id

    def test_storage_failure_after_delete_keeps_lines(self, monkeypatch, work_orders,
                                                      draft_order, oil_change, diagnostics):
        before = work_orders.add_service_line(draft_order.id, oil_change.id, quantity=2)

        def fail_insert(self, order, snapshot, quantity):
            raise OperationalError("INSERT INTO work_order_services", {},
                                   Exception("disk I/O error"))

        monkeypatch.setattr(LineItemLedger, "_new_line", fail_insert)
        with pytest.raises(PersistenceError):
            work_orders.update_work_order(draft_order.id, WorkOrderUpdate(
                services=(LineInput(diagnostics.id),),
            ))
        monkeypatch.undo()

        after = work_orders.get(draft_order.id)
        assert [line.id for line in after.services] == [line.id for line in before.services]
        assert after.total_labor_cost == Decimal("200")
        assert after.total_cost == Decimal("200")

    def test_blank_values_clear_fields(self, work_orders, service_request, worker):
        order = work_orders.create_from_request(service_request.id,
                                                responsible_worker_id=worker.id)
        order = work_orders.update_work_order(order.id, WorkOrderUpdate(
            planned_date="", responsible_worker_id=None,
        ))
        assert order.planned_date is None
        assert order.responsible_worker_id is None

    def test_closed_order_rejects_editable_fields(self, work_orders, draft_order, oil_change):
        work_orders.update_status(draft_order.id, WorkOrderStatus.COMPLETED)
        with pytest.raises(WorkOrderNotEditableError):
            work_orders.update_work_order(draft_order.id, WorkOrderUpdate(
                services=(LineInput(oil_change.id),),
            ))
        with pytest.raises(WorkOrderNotEditableError):
            work_orders.update_work_order(draft_order.id, WorkOrderUpdate(planned_date=None))

    def test_invalid_worker_rejected(self, work_orders, draft_order, make_user):
        client = make_user(SystemRole.CLIENT)
        with pytest.raises(InvalidResponsibleWorkerError):
            work_orders.update_work_order(draft_order.id, WorkOrderUpdate(
                responsible_worker_id=client.id,
            ))

    def test_completion_through_bulk_update_completes_request(self, work_orders,
                                                              service_requests, draft_order):
        order = work_orders.update_work_order(draft_order.id, WorkOrderUpdate(
            status=WorkOrderStatus.COMPLETED,
        ))
        assert order.completed_date is not None
        assert service_requests.get(draft_order.request_id).status == (
            ServiceRequestStatus.COMPLETED
        )


class TestDelete:

    def test_delete_editable_order(self, work_orders, draft_order, oil_change):
        work_orders.add_service_line(draft_order.id, oil_change.id)
        work_orders.delete_work_order(draft_order.id)
        with pytest.raises(WorkOrderNotFoundError):
            work_orders.get(draft_order.id)

    def test_request_can_back_new_order_after_delete(self, work_orders, draft_order):
        work_orders.delete_work_order(draft_order.id)
        order = work_orders.create_from_request(draft_order.request_id)
        assert order.request_id == draft_order.request_id

    def test_closed_order_cannot_be_deleted(self, work_orders, draft_order):
        work_orders.update_status(draft_order.id, WorkOrderStatus.CANCELLED)
        with pytest.raises(WorkOrderNotEditableError):
            work_orders.delete_work_order(draft_order.id)


class TestQueries:

    def test_get_unknown(self, work_orders):
        with pytest.raises(WorkOrderNotFoundError):
            work_orders.get(uuid4())

    def test_list_newest_first(self, work_orders, make_request, clock):
        first = work_orders.create_from_request(make_request().id)
        clock.advance(10)
        second = work_orders.create_from_request(make_request().id)

        assert [o.id for o in work_orders.list()] == [second.id, first.id]

    def test_list_filters(self, work_orders, make_request, worker):
        plain = work_orders.create_from_request(make_request().id)
        assigned = work_orders.create_from_request(make_request().id,
                                                   responsible_worker_id=worker.id)
        work_orders.update_status(plain.id, WorkOrderStatus.PLANNED)

        by_status = work_orders.list(WorkOrderFilters(status=WorkOrderStatus.PLANNED))
        by_worker = work_orders.list(WorkOrderFilters(responsible_worker_id=worker.id))

        assert [o.id for o in by_status] == [plain.id]
        assert [o.id for o in by_worker] == [assigned.id]

    def test_list_for_client(self, work_orders, draft_order, client_user, make_user,
                             make_vehicle, service_requests):
        other = make_user(SystemRole.CLIENT)
        other_vehicle = make_vehicle(other)
        other_request = service_requests.create(other.id, other_vehicle.id)
        work_orders.create_from_request(other_request.id)

        mine = work_orders.list_for_client(client_user.id)

        assert [o.id for o in mine] == [draft_order.id]

    def test_view_carries_origin_request(self, work_orders, draft_order, service_request):
        order = work_orders.get(draft_order.id)
        assert order.request.id == service_request.id
        assert order.is_editable
