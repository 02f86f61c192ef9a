"""
Module: workshop_kernel.selectors.party_selector
Responsibility: Read access to users and vehicles, for responsible-worker
    validation and for the client/vehicle columns of report listings.
Architecture position: Kernel > Selectors.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from uuid import UUID

from sqlalchemy import select

from workshop_kernel.models.party import STAFF_ROLES, User, Vehicle
from workshop_kernel.selectors.base import BaseSelector


@dataclass(frozen=True)
class UserInfo:
    id: UUID
    email: str
    name: str
    surname: str
    phone: str | None
    role: str

    @property
    def full_name(self) -> str:
        return f"{self.surname} {self.name}".strip()

    @property
    def is_staff(self) -> bool:
        return self.role in {r.value for r in STAFF_ROLES}


@dataclass(frozen=True)
class VehicleInfo:
    id: UUID
    owner_id: UUID
    make: str
    model: str
    year: int | None
    license_plate: str | None


def _user_info(row: User) -> UserInfo:
    return UserInfo(
        id=row.id,
        email=row.email,
        name=row.name,
        surname=row.surname,
        phone=row.phone,
        role=row.role,
    )


def _vehicle_info(row: Vehicle) -> VehicleInfo:
    return VehicleInfo(
        id=row.id,
        owner_id=row.owner_id,
        make=row.make,
        model=row.model,
        year=row.year,
        license_plate=row.license_plate,
    )


class PartySelector(BaseSelector[User]):
    """User and vehicle lookups."""

    def get_user(self, user_id: UUID) -> UserInfo | None:
        row = self.session.get(User, user_id)
        return _user_info(row) if row is not None else None

    def get_vehicle(self, vehicle_id: UUID) -> VehicleInfo | None:
        row = self.session.get(Vehicle, vehicle_id)
        return _vehicle_info(row) if row is not None else None

    def users_by_ids(self, user_ids: Iterable[UUID]) -> dict[UUID, UserInfo]:
        ids = set(user_ids)
        if not ids:
            return {}
        rows = self.session.execute(select(User).where(User.id.in_(ids))).scalars()
        return {row.id: _user_info(row) for row in rows}

    def vehicles_by_ids(self, vehicle_ids: Iterable[UUID]) -> dict[UUID, VehicleInfo]:
        ids = set(vehicle_ids)
        if not ids:
            return {}
        rows = self.session.execute(select(Vehicle).where(Vehicle.id.in_(ids))).scalars()
        return {row.id: _vehicle_info(row) for row in rows}
