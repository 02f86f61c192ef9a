"""
Request bodies.

Field names are accepted in snake_case or camelCase (``requestId``,
``plannedDate``, ...).  Optional fields that distinguish "omitted" from
"null" are read through ``model_fields_set``.
"""

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from workshop_kernel.models.work_order import WorkOrderStatus
from workshop_modules.work_orders.models import UNSET, LineInput, WorkOrderUpdate


class _Body(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    def _given(self, name: str, value):
        return value if name in self.model_fields_set else UNSET


class CreateWorkOrderBody(_Body):
    request_id: UUID
    responsible_worker_id: str | None = None
    planned_date: str | None = None

    def planned_date_arg(self):
        return self._given("planned_date", self.planned_date)


class UpdateStatusBody(_Body):
    status: WorkOrderStatus


class ServiceLineBody(_Body):
    service_id: UUID
    quantity: int = Field(default=1, ge=1)


class PartLineBody(_Body):
    part_id: UUID
    quantity: int = Field(default=1, ge=1)


class UpdateWorkOrderBody(_Body):
    status: WorkOrderStatus | None = None
    planned_date: str | None = None
    responsible_worker_id: str | None = None
    services: list[ServiceLineBody] | None = None
    parts: list[PartLineBody] | None = None

    def to_update(self) -> WorkOrderUpdate:
        services = None
        if self.services is not None:
            services = tuple(LineInput(line.service_id, line.quantity) for line in self.services)
        parts = None
        if self.parts is not None:
            parts = tuple(LineInput(line.part_id, line.quantity) for line in self.parts)
        return WorkOrderUpdate(
            status=self.status,
            planned_date=self._given("planned_date", self.planned_date),
            responsible_worker_id=self._given("responsible_worker_id", self.responsible_worker_id),
            services=services,
            parts=parts,
        )
