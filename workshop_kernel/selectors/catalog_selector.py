"""
Module: workshop_kernel.selectors.catalog_selector
Responsibility: Read access to the service and spare-part catalog.  Feeds
    price snapshots for new work order lines and the catalog details shown
    next to report breakdowns.
Architecture position: Kernel > Selectors.

Lookups return inactive items too; deciding that an inactive item is
unusable for pricing is the caller's business.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID

from sqlalchemy import select

from workshop_kernel.models.catalog import Service, SparePart
from workshop_kernel.selectors.base import BaseSelector


@dataclass(frozen=True)
class ServiceInfo:
    """Catalog service as of the time of the read."""

    id: UUID
    name: str
    description: str | None
    base_price: Decimal
    duration_min: int | None
    is_active: bool

    @property
    def price(self) -> Decimal:
        return self.base_price


@dataclass(frozen=True)
class SparePartInfo:
    """Catalog spare part as of the time of the read."""

    id: UUID
    name: str
    article: str
    unit: str
    price: Decimal
    stock_quantity: int
    is_active: bool


def _service_info(row: Service) -> ServiceInfo:
    return ServiceInfo(
        id=row.id,
        name=row.name,
        description=row.description,
        base_price=row.base_price,
        duration_min=row.duration_min,
        is_active=row.is_active,
    )


def _part_info(row: SparePart) -> SparePartInfo:
    return SparePartInfo(
        id=row.id,
        name=row.name,
        article=row.article,
        unit=row.unit,
        price=row.price,
        stock_quantity=row.stock_quantity,
        is_active=row.is_active,
    )


class CatalogSelector(BaseSelector[Service]):
    """Catalog lookups by id, single and batch."""

    def get_service(self, service_id: UUID) -> ServiceInfo | None:
        row = self.session.get(Service, service_id)
        return _service_info(row) if row is not None else None

    def get_part(self, part_id: UUID) -> SparePartInfo | None:
        row = self.session.get(SparePart, part_id)
        return _part_info(row) if row is not None else None

    def services_by_ids(self, service_ids: Iterable[UUID]) -> dict[UUID, ServiceInfo]:
        ids = set(service_ids)
        if not ids:
            return {}
        rows = self.session.execute(
            select(Service).where(Service.id.in_(ids))
        ).scalars()
        return {row.id: _service_info(row) for row in rows}

    def parts_by_ids(self, part_ids: Iterable[UUID]) -> dict[UUID, SparePartInfo]:
        ids = set(part_ids)
        if not ids:
            return {}
        rows = self.session.execute(
            select(SparePart).where(SparePart.id.in_(ids))
        ).scalars()
        return {row.id: _part_info(row) for row in rows}
