"""
Module: workshop_kernel.models.party
Responsibility: ORM persistence for the people and vehicles the shop deals
    with.  Users carry the role that decides who may be a responsible worker;
    vehicles anchor service requests and work orders.
Architecture position: Kernel > Models.  May import from db/base.py only.
    MUST NOT import from services/, selectors/, domain/, or outer layers.

These rows are reference data owned by the account and garage collaborators.
The ledger only reads them.
"""

from enum import Enum
from uuid import UUID

from sqlalchemy import Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from workshop_kernel.db.base import TrackedBase, UUIDString


class SystemRole(str, Enum):
    """Account role.

    Contract: ADMIN and WORKER are staff roles; CLIENT owns vehicles and
    files service requests.
    """

    ADMIN = "ADMIN"
    WORKER = "WORKER"
    CLIENT = "CLIENT"


STAFF_ROLES: tuple[SystemRole, ...] = (SystemRole.ADMIN, SystemRole.WORKER)


class User(TrackedBase):
    """
    A shop account: client or staff member.

    Guarantees:
        - email is unique.
        - role is one of SystemRole.
    """

    __tablename__ = "users"

    __table_args__ = (
        UniqueConstraint("email", name="uq_user_email"),
        Index("idx_user_role", "role"),
    )

    email: Mapped[str] = mapped_column(String(255), nullable=False)

    name: Mapped[str] = mapped_column(String(100), nullable=False)

    surname: Mapped[str] = mapped_column(String(100), nullable=False)

    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)

    role: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=SystemRole.CLIENT.value,
    )

    @property
    def full_name(self) -> str:
        return f"{self.surname} {self.name}".strip()

    @property
    def is_staff(self) -> bool:
        return self.role in {r.value for r in STAFF_ROLES}

    def __repr__(self) -> str:
        return f"<User {self.email} ({self.role})>"


class Vehicle(TrackedBase):
    """A client's vehicle."""

    __tablename__ = "vehicles"

    __table_args__ = (
        Index("idx_vehicle_owner", "owner_id"),
    )

    owner_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)

    make: Mapped[str] = mapped_column(String(100), nullable=False)

    model: Mapped[str] = mapped_column(String(100), nullable=False)

    year: Mapped[int | None] = mapped_column(nullable=True)

    license_plate: Mapped[str | None] = mapped_column(String(20), nullable=True)

    def __repr__(self) -> str:
        return f"<Vehicle {self.make} {self.model} {self.license_plate or ''}>"
