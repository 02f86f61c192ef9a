"""
LineItemLedger -- service and part lines of one work order, plus the
cached totals derived from them.

Responsibility:
    Adds, removes, and wholesale-replaces lines, and rebuilds the three
    cached totals after every mutation.

Architecture position:
    Modules > Work orders.  Flush-only (extends ``BaseService``): runs
    inside the caller's transaction and never commits.  ``WorkOrderService``
    owns the transaction, so a failed replacement leaves no half-deleted
    line set behind.

Invariants enforced:
    - total_cost == total_labor_cost + total_parts_cost, and each equals the
      sum of its current line totals.  Totals are rebuilt from a fresh read
      of the lines on every mutation, never patched incrementally.
    - Every mutation goes through ``_apply`` (mutate -> flush -> recalculate),
      the single recompute path shared by the incremental and bulk routes.
    - Line price is the snapshot captured at insertion.
    - quantity >= 1.  A smaller value reaching the ledger is a programming
      error and raises ``LedgerIntegrityError``; it is never clamped.

Failure modes:
    - CatalogItemNotFoundError / CatalogItemsNotFoundError from pricing.
    - LineNotFoundError when a row is missing or belongs to another order.
    - LedgerIntegrityError on quantity < 1.

Callers must pass the editability gate (``workflows.ensure_editable``)
before calling any mutation.
"""

from collections.abc import Callable, Iterable, Sequence
from decimal import Decimal
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from workshop_kernel.db.types import ZERO
from workshop_kernel.exceptions import LedgerIntegrityError, LineNotFoundError
from workshop_kernel.logging_config import get_logger
from workshop_kernel.models.work_order import WorkOrder, WorkOrderPartLine, WorkOrderServiceLine
from workshop_kernel.services.base import BaseService
from workshop_modules.work_orders.models import LedgerTotals, LineInput, LineKind, PriceSnapshot
from workshop_modules.work_orders.pricing import PricingSnapshot

logger = get_logger("modules.work_orders.ledger")

LineModel = type[WorkOrderServiceLine] | type[WorkOrderPartLine]

_LINE_MODELS: dict[LineKind, LineModel] = {
    LineKind.SERVICE: WorkOrderServiceLine,
    LineKind.PART: WorkOrderPartLine,
}

_ITEM_COLUMNS = {
    LineKind.SERVICE: "service_id",
    LineKind.PART: "part_id",
}


def _check_quantity(order: WorkOrder, quantity: int) -> None:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
        raise LedgerIntegrityError(str(order.id), f"line quantity {quantity!r} is below 1")


class LineItemLedger(BaseService[WorkOrder]):
    """
    Line item mutations and total reconstruction for work orders.

    Guarantees:
        - After every public mutation the order's cached totals equal the
          sums of its lines as stored in the database.
        - A replacement resolves every price before deleting any line.
    """

    def __init__(self, session: Session, pricing: PricingSnapshot):
        super().__init__(session)
        self._pricing = pricing

    # =========================================================================
    # Mutations
    # =========================================================================

    def add_line(
        self,
        order: WorkOrder,
        kind: LineKind,
        item_id: UUID,
        quantity: int = 1,
    ) -> LedgerTotals:
        """Price one catalog item and append it as a new line."""
        _check_quantity(order, quantity)
        snapshot = self._pricing.snapshot(kind, item_id)

        def mutate() -> None:
            self.session.add(self._new_line(order, snapshot, quantity))

        logger.info(
            "ledger_line_added",
            extra={
                "work_order_id": str(order.id),
                "kind": kind.value,
                "item_id": str(item_id),
                "quantity": quantity,
                "price": snapshot.unit_price,
            },
        )
        return self._apply(order, mutate)

    def delete_line(self, order: WorkOrder, kind: LineKind, row_id: UUID) -> LedgerTotals:
        """
        Remove one line of this order.

        Raises:
            LineNotFoundError: row missing or owned by another order.
        """
        model = _LINE_MODELS[kind]
        line = self.session.execute(
            select(model)
            .where(model.id == row_id)
            .where(model.work_order_id == order.id)
        ).scalar_one_or_none()
        if line is None:
            raise LineNotFoundError(kind.value, str(order.id), str(row_id))

        def mutate() -> None:
            self.session.delete(line)

        logger.info(
            "ledger_line_deleted",
            extra={
                "work_order_id": str(order.id),
                "kind": kind.value,
                "row_id": str(row_id),
            },
        )
        return self._apply(order, mutate)

    def replace_lines(
        self,
        order: WorkOrder,
        kind: LineKind,
        inputs: Sequence[LineInput],
    ) -> LedgerTotals:
        """Replace every line of one kind with a freshly priced set."""
        return self.replace_all(order, {kind: inputs})

    def replace_all(
        self,
        order: WorkOrder,
        replacements: dict[LineKind, Sequence[LineInput]],
    ) -> LedgerTotals:
        """
        Replace the lines of each given kind in one step.

        All prices for all kinds are resolved first; no line is deleted if
        any id fails to resolve.
        """
        priced: dict[LineKind, list[tuple[PriceSnapshot, int]]] = {}
        for kind, inputs in replacements.items():
            for entry in inputs:
                _check_quantity(order, entry.quantity)
            snapshots = self._pricing.snapshot_many(kind, (entry.item_id for entry in inputs))
            priced[kind] = [(snapshots[entry.item_id], entry.quantity) for entry in inputs]

        def mutate() -> None:
            for kind, lines in priced.items():
                model = _LINE_MODELS[kind]
                self.session.execute(
                    delete(model).where(model.work_order_id == order.id),
                    execution_options={"synchronize_session": "fetch"},
                )
                for snapshot, quantity in lines:
                    self.session.add(self._new_line(order, snapshot, quantity))

        logger.info(
            "ledger_lines_replaced",
            extra={
                "work_order_id": str(order.id),
                "counts": {kind.value: len(lines) for kind, lines in priced.items()},
            },
        )
        return self._apply(order, mutate)

    # =========================================================================
    # Totals
    # =========================================================================

    def recalculate_totals(self, order: WorkOrder) -> LedgerTotals:
        """
        Rebuild the cached totals from the lines currently stored.

        Idempotent: calling it twice yields the same totals.
        """
        labor = self._sum_totals(WorkOrderServiceLine, order.id)
        parts = self._sum_totals(WorkOrderPartLine, order.id)
        totals = LedgerTotals(labor=labor, parts=parts, grand=labor + parts)

        order.total_labor_cost = totals.labor
        order.total_parts_cost = totals.parts
        order.total_cost = totals.grand
        self.session.flush()
        self.session.expire(order, ["service_lines", "part_lines"])

        logger.info(
            "ledger_totals_recalculated",
            extra={
                "work_order_id": str(order.id),
                "labor": totals.labor,
                "parts": totals.parts,
                "grand": totals.grand,
            },
        )
        return totals

    # =========================================================================
    # Internals
    # =========================================================================

    def _apply(self, order: WorkOrder, mutate: Callable[[], None]) -> LedgerTotals:
        mutate()
        self.session.flush()
        return self.recalculate_totals(order)

    def _sum_totals(self, model: LineModel, work_order_id: UUID) -> Decimal:
        totals: Iterable[Decimal] = self.session.execute(
            select(model.total).where(model.work_order_id == work_order_id)
        ).scalars()
        return sum(totals, ZERO)

    def _new_line(self, order: WorkOrder, snapshot: PriceSnapshot, quantity: int):
        model = _LINE_MODELS[snapshot.kind]
        return model(
            work_order_id=order.id,
            quantity=quantity,
            price=snapshot.unit_price,
            total=snapshot.total_for(quantity),
            **{_ITEM_COLUMNS[snapshot.kind]: snapshot.item_id},
        )
