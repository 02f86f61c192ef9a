"""
Work Order Module Service (``workshop_modules.work_orders.service``).

Responsibility
--------------
The work order lifecycle: creation from a service request, status
changes, bulk updates, the incremental line operations, and deletion.
Line arithmetic is delegated to ``LineItemLedger``; prices come from
``PricingSnapshot``; numbers come from the kernel ``SequenceService``.

Architecture position
---------------------
**Modules layer** -- ``WorkOrderService`` is the sole public entry point
for work order mutations.  Constructor: ``session`` + ``clock`` + ``config``
plus optional collaborators (catalog, user directory, request store,
change signal); defaults read the same database.

Invariants enforced
-------------------
* Each public method owns the transaction boundary (``commit`` on success,
  ``rollback`` on any exception, exception re-raised).
* A service request backs at most one work order; the unique constraint on
  ``work_orders.request_id`` is the backstop for the explicit check.
* Numbers come from a locked counter row, never from a row count.
* COMPLETED and CANCELLED orders reject every line, planned date, and
  responsible worker change.
* ``completed_date`` is stamped only when entering COMPLETED, only if it is
  not already set, and never cleared.
* The work order row is locked (``SELECT ... FOR UPDATE``) for the duration
  of every mutation, so a concurrent line change cannot interleave with a
  total recomputation.

Failure modes
-------------
* Domain errors (``workshop_kernel.exceptions``) -> rollback, re-raised.
* Storage errors -> rollback, logged, re-raised as ``PersistenceError``.
* Listener failure after commit -> logged and re-raised; the change stands.

Usage::

    service = WorkOrderService(session, clock)
    order = service.create_from_request(request_id)
    order = service.add_service_line(order.id, service_id, quantity=2)
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from workshop_kernel.db.types import parse_wall_clock
from workshop_kernel.domain.clock import Clock, SystemClock
from workshop_kernel.exceptions import (
    CancelledRequestError,
    DuplicateWorkOrderError,
    InvalidResponsibleWorkerError,
    NoFieldsToUpdateError,
    ResponsibleWorkerNotFoundError,
    WorkOrderNotFoundError,
)
from workshop_kernel.logging_config import LogContext, get_logger
from workshop_kernel.models.service_request import ServiceRequest, ServiceRequestStatus
from workshop_kernel.models.work_order import WorkOrder as WorkOrderModel
from workshop_kernel.models.work_order import WorkOrderStatus
from workshop_kernel.selectors.catalog_selector import CatalogSelector
from workshop_kernel.selectors.party_selector import PartySelector
from workshop_kernel.services.sequence_service import SequenceService
from workshop_modules._transaction import unit_of_work
from workshop_modules.work_orders.collaborators import (
    CatalogLookup,
    ServiceRequestStore,
    UserDirectory,
)
from workshop_modules.work_orders.config import WorkOrderConfig
from workshop_modules.work_orders.ledger import LineItemLedger
from workshop_modules.work_orders.models import (
    UNSET,
    LedgerTotals,
    LineKind,
    WorkOrder,
    WorkOrderFilters,
    WorkOrderUpdate,
    is_set,
)
from workshop_modules.work_orders.pricing import PricingSnapshot
from workshop_modules.work_orders.signals import ChangeKind, WorkOrderChanged, WorkOrderSignal
from workshop_modules.work_orders.workflows import check_status_change, ensure_editable

logger = get_logger("modules.work_orders.service")


def _blank(value: object) -> bool:
    return value is None or value == ""


class WorkOrderService:
    """
    Work order lifecycle and ledger facade.

    Contract
    --------
    * Every query and command returns a frozen ``WorkOrder`` view (or a
      list of them); ORM rows never leave the service.
    * ``WorkOrderChanged`` is sent after each successful commit.

    Non-goals
    ---------
    * Does NOT update service request status; a signal listener does.
    * Does NOT authorize callers; the HTTP layer checks roles.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        config: WorkOrderConfig | None = None,
        catalog: CatalogLookup | None = None,
        users: UserDirectory | None = None,
        requests: ServiceRequestStore | None = None,
        signal: WorkOrderSignal | None = None,
        actor_id: UUID | None = None,
    ):
        from workshop_modules.service_requests.service import ServiceRequestService

        self._session = session
        self._clock = clock or SystemClock()
        self._config = config or WorkOrderConfig.with_defaults()
        self._users = users or PartySelector(session)
        self._requests = requests or ServiceRequestService(session, self._clock)
        self._signal = signal or WorkOrderSignal()
        self._actor_id = actor_id
        self._pricing = PricingSnapshot(catalog or CatalogSelector(session))
        self._ledger = LineItemLedger(session, self._pricing)
        self._sequences = SequenceService(session)

    @property
    def signal(self) -> WorkOrderSignal:
        return self._signal

    # =========================================================================
    # Creation
    # =========================================================================

    def create_from_request(
        self,
        request_id: UUID,
        responsible_worker_id: UUID | str | None = None,
        planned_date: str | datetime | None = UNSET,
    ) -> WorkOrder:
        """
        Open a DRAFT work order for a service request.

        ``planned_date`` omitted inherits the request's desired date; an
        explicit None or "" leaves it empty.  A given value is taken as
        literal wall-clock time.

        Raises:
            ServiceRequestNotFoundError: unknown request.
            CancelledRequestError: request is CANCELLED.
            DuplicateWorkOrderError: request already backs a work order.
            ResponsibleWorkerNotFoundError / InvalidResponsibleWorkerError.
            InvalidDateError: planned date unparseable.
        """
        def duplicate(exc: IntegrityError) -> DuplicateWorkOrderError | None:
            if "request" in str(exc.orig).lower():
                return DuplicateWorkOrderError(str(request_id))
            return None

        with LogContext.bind(request_id=str(request_id)):
            with unit_of_work(self._session, "create work order", logger, duplicate):
                request = self._requests.get(request_id)
                if request.status == ServiceRequestStatus.CANCELLED:
                    raise CancelledRequestError(str(request_id))

                existing = self._session.execute(
                    select(WorkOrderModel.id).where(WorkOrderModel.request_id == request_id)
                ).scalar_one_or_none()
                if existing is not None:
                    raise DuplicateWorkOrderError(str(request_id))

                worker_id = None
                if not _blank(responsible_worker_id):
                    worker_id = self._validate_worker(responsible_worker_id)

                if is_set(planned_date):
                    planned = None if _blank(planned_date) else parse_wall_clock(planned_date)
                else:
                    planned = request.desired_date

                sequence = self._sequences.next_value(self._config.sequence_name)
                now = self._clock.now()
                order = WorkOrderModel(
                    number=self._config.format_number(sequence),
                    client_id=request.client_id,
                    vehicle_id=request.vehicle_id,
                    request_id=request.id,
                    responsible_worker_id=worker_id,
                    status=WorkOrderStatus.DRAFT.value,
                    planned_date=planned,
                    completed_date=None,
                    created_at=now,
                    updated_at=now,
                    created_by_id=self._actor_id,
                )
                self._session.add(order)
                self._session.flush()
                view = self._view(order)

            logger.info(
                "work_order_created",
                extra={
                    "work_order_id": str(view.id),
                    "number": view.number,
                    "planned_date": view.planned_date,
                    "responsible_worker_id": str(worker_id) if worker_id else None,
                },
            )
        self._emit(view, ChangeKind.CREATED)
        return view

    # =========================================================================
    # Status and bulk update
    # =========================================================================

    def update_status(self, work_order_id: UUID, status: WorkOrderStatus) -> WorkOrder:
        """
        Change status under the configured transition policy.

        Raises:
            WorkOrderNotFoundError: unknown id.
            InvalidStatusTransitionError: leaving a terminal status under the
                strict policy.
        """
        status = WorkOrderStatus(status)
        with LogContext.bind(work_order_id=str(work_order_id)):
            with unit_of_work(self._session, "update work order status", logger):
                order = self._load_for_update(work_order_id)
                previous = WorkOrderStatus(order.status)
                check_status_change(order, status, self._config.allow_terminal_reopen)
                self._set_status(order, status)
                self._session.flush()
                view = self._view(order)

            logger.info(
                "work_order_status_changed",
                extra={
                    "from_status": previous.value,
                    "to_status": status.value,
                    "completed_date": view.completed_date,
                },
            )
        self._emit(view, ChangeKind.STATUS_CHANGED, previous)
        return view

    def update_work_order(self, work_order_id: UUID, update: WorkOrderUpdate) -> WorkOrder:
        """
        Apply a bulk update: status, planned date, responsible worker, and
        full replacement of service and/or part lines, in one transaction.

        Raises:
            WorkOrderNotFoundError: unknown id.
            WorkOrderNotEditableError: an editable field on a closed order.
            NoFieldsToUpdateError: the update is empty.
            CatalogItemsNotFoundError: any replacement id fails to resolve;
                no line is changed.
            PersistenceError: storage failure; the transaction is rolled back
                and the previous lines and totals stand.
        """
        with LogContext.bind(work_order_id=str(work_order_id)):
            with unit_of_work(self._session, "update work order", logger):
                order = self._load_for_update(work_order_id)
                previous = WorkOrderStatus(order.status)

                if update.has_editable_changes():
                    ensure_editable(order)

                worker_id = None
                if is_set(update.responsible_worker_id) and not _blank(update.responsible_worker_id):
                    worker_id = self._validate_worker(update.responsible_worker_id)

                if update.is_empty():
                    raise NoFieldsToUpdateError(str(work_order_id))

                if update.status is not None:
                    check_status_change(order, update.status, self._config.allow_terminal_reopen)

                replacements = {}
                if update.services is not None:
                    replacements[LineKind.SERVICE] = update.services
                if update.parts is not None:
                    replacements[LineKind.PART] = update.parts
                if replacements:
                    self._ledger.replace_all(order, replacements)

                if is_set(update.planned_date):
                    order.planned_date = (
                        None if _blank(update.planned_date) else parse_wall_clock(update.planned_date)
                    )
                if is_set(update.responsible_worker_id):
                    order.responsible_worker_id = worker_id
                if update.status is not None:
                    self._set_status(order, update.status)

                order.updated_at = self._clock.now()
                self._session.flush()
                view = self._view(order)

            logger.info(
                "work_order_updated",
                extra={
                    "status": view.status.value,
                    "replaced": sorted(kind.value for kind in replacements),
                    "planned_date_changed": is_set(update.planned_date),
                    "worker_changed": is_set(update.responsible_worker_id),
                },
            )
        self._emit(view, ChangeKind.UPDATED, previous)
        return view

    # =========================================================================
    # Incremental line operations
    # =========================================================================

    def add_service_line(self, work_order_id: UUID, service_id: UUID, quantity: int = 1) -> WorkOrder:
        """Add one service line priced from the catalog now."""
        return self._add_line(work_order_id, LineKind.SERVICE, service_id, quantity)

    def add_part_line(self, work_order_id: UUID, part_id: UUID, quantity: int = 1) -> WorkOrder:
        """Add one spare part line priced from the catalog now."""
        return self._add_line(work_order_id, LineKind.PART, part_id, quantity)

    def delete_service_line(self, work_order_id: UUID, row_id: UUID) -> WorkOrder:
        return self._delete_line(work_order_id, LineKind.SERVICE, row_id)

    def delete_part_line(self, work_order_id: UUID, row_id: UUID) -> WorkOrder:
        return self._delete_line(work_order_id, LineKind.PART, row_id)

    def recalculate_totals(self, work_order_id: UUID) -> LedgerTotals:
        """Rebuild the cached totals from the stored lines.  Idempotent."""
        with unit_of_work(self._session, "recalculate work order totals", logger):
            order = self._load_for_update(work_order_id)
            totals = self._ledger.recalculate_totals(order)
        return totals

    # =========================================================================
    # Deletion
    # =========================================================================

    def delete_work_order(self, work_order_id: UUID) -> None:
        """
        Delete an editable work order and its lines.

        The originating request is left as is; it can back a new order.

        Raises:
            WorkOrderNotFoundError: unknown id.
            WorkOrderNotEditableError: order is COMPLETED or CANCELLED.
        """
        with unit_of_work(self._session, "delete work order", logger):
            order = self._load_for_update(work_order_id)
            ensure_editable(order)
            view = self._view(order)
            self._session.delete(order)
            self._session.flush()

        logger.info(
            "work_order_deleted",
            extra={"work_order_id": str(work_order_id), "number": view.number},
        )
        self._emit(view, ChangeKind.DELETED)

    # =========================================================================
    # Queries
    # =========================================================================

    def get(self, work_order_id: UUID) -> WorkOrder:
        """
        Raises:
            WorkOrderNotFoundError: unknown id.
        """
        order = self._session.get(WorkOrderModel, work_order_id)
        if order is None:
            raise WorkOrderNotFoundError(str(work_order_id))
        return self._view(order)

    def list(self, filters: WorkOrderFilters | None = None) -> list[WorkOrder]:
        """Staff listing, newest first."""
        filters = filters or WorkOrderFilters()
        query = select(WorkOrderModel)
        if filters.status is not None:
            query = query.where(WorkOrderModel.status == WorkOrderStatus(filters.status).value)
        if filters.client_id is not None:
            query = query.where(WorkOrderModel.client_id == filters.client_id)
        if filters.vehicle_id is not None:
            query = query.where(WorkOrderModel.vehicle_id == filters.vehicle_id)
        if filters.responsible_worker_id is not None:
            query = query.where(
                WorkOrderModel.responsible_worker_id == filters.responsible_worker_id
            )
        return self._fetch(query)

    def list_for_client(self, client_id: UUID) -> list[WorkOrder]:
        """Orders of the client, directly or through one of their requests."""
        query = (
            select(WorkOrderModel)
            .outerjoin(ServiceRequest, WorkOrderModel.request_id == ServiceRequest.id)
            .where(
                or_(
                    WorkOrderModel.client_id == client_id,
                    ServiceRequest.client_id == client_id,
                )
            )
        )
        return self._fetch(query)

    # =========================================================================
    # Internal helpers
    # =========================================================================

    def _add_line(self, work_order_id: UUID, kind: LineKind, item_id: UUID, quantity: int) -> WorkOrder:
        with LogContext.bind(work_order_id=str(work_order_id)):
            with unit_of_work(self._session, f"add {kind.value} line", logger):
                order = self._load_for_update(work_order_id)
                ensure_editable(order)
                self._ledger.add_line(order, kind, item_id, quantity)
                order.updated_at = self._clock.now()
                self._session.flush()
                view = self._view(order)
        self._emit(view, ChangeKind.LINES_CHANGED)
        return view

    def _delete_line(self, work_order_id: UUID, kind: LineKind, row_id: UUID) -> WorkOrder:
        with LogContext.bind(work_order_id=str(work_order_id)):
            with unit_of_work(self._session, f"delete {kind.value} line", logger):
                order = self._load_for_update(work_order_id)
                ensure_editable(order)
                self._ledger.delete_line(order, kind, row_id)
                order.updated_at = self._clock.now()
                self._session.flush()
                view = self._view(order)
        self._emit(view, ChangeKind.LINES_CHANGED)
        return view

    def _load_for_update(self, work_order_id: UUID) -> WorkOrderModel:
        order = self._session.execute(
            select(WorkOrderModel)
            .where(WorkOrderModel.id == work_order_id)
            .with_for_update(of=WorkOrderModel)
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()
        if order is None:
            raise WorkOrderNotFoundError(str(work_order_id))
        return order

    def _fetch(self, query) -> list[WorkOrder]:
        rows = self._session.execute(
            query.order_by(WorkOrderModel.created_at.desc(), WorkOrderModel.number.desc())
        ).scalars().unique()
        return [self._view(row) for row in rows]

    def _set_status(self, order: WorkOrderModel, status: WorkOrderStatus) -> None:
        order.status = status.value
        order.updated_at = self._clock.now()
        if status == WorkOrderStatus.COMPLETED and order.completed_date is None:
            order.completed_date = self._clock.now()

    def _validate_worker(self, worker_id: UUID | str) -> UUID:
        try:
            worker_uuid = worker_id if isinstance(worker_id, UUID) else UUID(str(worker_id))
        except ValueError:
            raise ResponsibleWorkerNotFoundError(str(worker_id)) from None
        worker = self._users.get_user(worker_uuid)
        if worker is None:
            raise ResponsibleWorkerNotFoundError(str(worker_uuid))
        if worker.role not in self._config.staff_roles:
            raise InvalidResponsibleWorkerError(str(worker_uuid), worker.role)
        return worker_uuid

    def _view(self, order: WorkOrderModel) -> WorkOrder:
        return WorkOrder.from_model(order)

    def _emit(
        self,
        view: WorkOrder,
        change: ChangeKind,
        previous: WorkOrderStatus | None = None,
    ) -> None:
        self._signal.send(
            WorkOrderChanged(
                work_order_id=view.id,
                request_id=view.request_id,
                change=change,
                status=view.status,
                occurred_at=self._clock.now(),
                previous_status=previous,
            )
        )
