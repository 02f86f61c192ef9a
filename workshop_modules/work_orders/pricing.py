"""
PricingSnapshot -- captures catalog prices for new work order lines.

Responsibility:
    Resolves the current price of a service or spare part at the moment a
    line is added or rebuilt.  The price is copied onto the line row, so a
    later catalog price change never reprices an existing order.

Invariants enforced:
    - Missing and inactive catalog items are both "not found".
    - Batch resolution is all-or-nothing: one unresolved id fails the call.
    - Prices are exact Decimals; a float price is refused.
"""

from collections.abc import Iterable
from uuid import UUID

from workshop_kernel.db.types import to_money
from workshop_kernel.exceptions import CatalogItemNotFoundError, CatalogItemsNotFoundError
from workshop_kernel.logging_config import get_logger
from workshop_modules.work_orders.collaborators import CatalogLookup
from workshop_modules.work_orders.models import LineKind, PriceSnapshot

logger = get_logger("modules.work_orders.pricing")


class PricingSnapshot:
    """Catalog price resolution for one unit of work."""

    def __init__(self, catalog: CatalogLookup):
        self._catalog = catalog

    def snapshot(self, kind: LineKind, item_id: UUID) -> PriceSnapshot:
        """
        Resolve one item.

        Raises:
            CatalogItemNotFoundError: item missing or inactive.
        """
        if kind == LineKind.SERVICE:
            item = self._catalog.get_service(item_id)
        else:
            item = self._catalog.get_part(item_id)

        if item is None or not item.is_active:
            logger.info(
                "catalog_item_unavailable",
                extra={
                    "kind": kind.value,
                    "item_id": str(item_id),
                    "exists": item is not None,
                },
            )
            raise CatalogItemNotFoundError(kind.value, str(item_id))

        return PriceSnapshot(kind=kind, item_id=item_id, unit_price=to_money(item.price))

    def snapshot_service(self, service_id: UUID) -> PriceSnapshot:
        return self.snapshot(LineKind.SERVICE, service_id)

    def snapshot_part(self, part_id: UUID) -> PriceSnapshot:
        return self.snapshot(LineKind.PART, part_id)

    def snapshot_many(self, kind: LineKind, item_ids: Iterable[UUID]) -> dict[UUID, PriceSnapshot]:
        """
        Resolve a batch of items in one lookup.

        Duplicate ids are resolved once.

        Raises:
            CatalogItemsNotFoundError: any id is missing or inactive.
        """
        wanted = list(dict.fromkeys(item_ids))
        if not wanted:
            return {}

        if kind == LineKind.SERVICE:
            found = self._catalog.services_by_ids(wanted)
        else:
            found = self._catalog.parts_by_ids(wanted)

        missing = [
            item_id for item_id in wanted
            if item_id not in found or not found[item_id].is_active
        ]
        if missing:
            logger.info(
                "catalog_batch_unresolved",
                extra={
                    "kind": kind.value,
                    "requested": len(wanted),
                    "missing": [str(m) for m in missing],
                },
            )
            raise CatalogItemsNotFoundError(kind.value, [str(m) for m in missing])

        return {
            item_id: PriceSnapshot(
                kind=kind,
                item_id=item_id,
                unit_price=to_money(found[item_id].price),
            )
            for item_id in wanted
        }
