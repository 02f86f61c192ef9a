"""
Module: workshop_kernel.models.catalog
Responsibility: ORM persistence for the labor and spare-part catalog.
Architecture position: Kernel > Models.  May import from db/base.py only.

Catalog prices are live values.  Work order lines copy the price at the
moment they are created and never read it back from here, so editing a
catalog price never reprices historical orders.
"""

from decimal import Decimal

from sqlalchemy import Boolean, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from workshop_kernel.db.base import TrackedBase


class Service(TrackedBase):
    """
    A labor service offered by the shop.

    Guarantees:
        - base_price is an exact Decimal.
        - Inactive services cannot be added to work orders.
    """

    __tablename__ = "services"

    __table_args__ = (
        Index("idx_service_active", "is_active"),
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    description: Mapped[str | None] = mapped_column(String(2000), nullable=True)

    base_price: Mapped[Decimal] = mapped_column(nullable=False)

    duration_min: Mapped[int | None] = mapped_column(nullable=True)

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    def __repr__(self) -> str:
        return f"<Service {self.name} {self.base_price}>"


class SparePart(TrackedBase):
    """A stocked spare part."""

    __tablename__ = "spare_parts"

    __table_args__ = (
        Index("idx_spare_part_active", "is_active"),
        Index("idx_spare_part_article", "article"),
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    article: Mapped[str] = mapped_column(String(100), nullable=False)

    unit: Mapped[str] = mapped_column(String(20), nullable=False, default="pcs")

    price: Mapped[Decimal] = mapped_column(nullable=False)

    stock_quantity: Mapped[int] = mapped_column(nullable=False, default=0)

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    def __repr__(self) -> str:
        return f"<SparePart {self.article} {self.price}>"
