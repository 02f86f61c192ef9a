"""Work order routes.  Staff only, except ``/work-orders/my``."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response

from workshop_api.dependencies import Caller, WorkOrderServiceDep, any_member, staff_only
from workshop_api.schemas import (
    CreateWorkOrderBody,
    PartLineBody,
    ServiceLineBody,
    UpdateStatusBody,
    UpdateWorkOrderBody,
)
from workshop_kernel.exceptions import RoleNotPermittedError
from workshop_kernel.models.work_order import WorkOrderStatus
from workshop_modules.reporting import render_to_dict
from workshop_modules.work_orders.models import WorkOrderFilters

router = APIRouter(prefix="/work-orders", tags=["work-orders"])

Staff = Depends(staff_only)


@router.post("", status_code=201, dependencies=[Staff])
def create_work_order(body: CreateWorkOrderBody, service: WorkOrderServiceDep) -> dict:
    order = service.create_from_request(
        body.request_id,
        responsible_worker_id=body.responsible_worker_id,
        planned_date=body.planned_date_arg(),
    )
    return render_to_dict(order)


@router.get("", dependencies=[Staff])
def list_work_orders(
    service: WorkOrderServiceDep,
    status: WorkOrderStatus | None = None,
    client_id: Annotated[UUID | None, Query(alias="clientId")] = None,
    vehicle_id: Annotated[UUID | None, Query(alias="vehicleId")] = None,
    responsible_worker_id: Annotated[UUID | None, Query(alias="responsibleWorkerId")] = None,
) -> list[dict]:
    filters = WorkOrderFilters(
        status=status,
        client_id=client_id,
        vehicle_id=vehicle_id,
        responsible_worker_id=responsible_worker_id,
    )
    return [render_to_dict(order) for order in service.list(filters)]


@router.get("/my")
def my_work_orders(
    service: WorkOrderServiceDep,
    caller: Annotated[Caller, Depends(any_member)],
) -> list[dict]:
    if caller.user_id is None:
        raise RoleNotPermittedError(caller.role, ())
    return [render_to_dict(order) for order in service.list_for_client(caller.user_id)]


@router.get("/{work_order_id}", dependencies=[Staff])
def get_work_order(work_order_id: UUID, service: WorkOrderServiceDep) -> dict:
    return render_to_dict(service.get(work_order_id))


@router.patch("/{work_order_id}/status", dependencies=[Staff])
def update_work_order_status(
    work_order_id: UUID, body: UpdateStatusBody, service: WorkOrderServiceDep
) -> dict:
    return render_to_dict(service.update_status(work_order_id, body.status))


@router.patch("/{work_order_id}", dependencies=[Staff])
def update_work_order(
    work_order_id: UUID, body: UpdateWorkOrderBody, service: WorkOrderServiceDep
) -> dict:
    return render_to_dict(service.update_work_order(work_order_id, body.to_update()))


@router.delete("/{work_order_id}", status_code=204, dependencies=[Staff])
def delete_work_order(work_order_id: UUID, service: WorkOrderServiceDep) -> Response:
    service.delete_work_order(work_order_id)
    return Response(status_code=204)


# Lines


@router.post("/{work_order_id}/services", status_code=201, dependencies=[Staff])
def add_service_line(
    work_order_id: UUID, body: ServiceLineBody, service: WorkOrderServiceDep
) -> dict:
    return render_to_dict(service.add_service_line(work_order_id, body.service_id, body.quantity))


@router.delete("/{work_order_id}/services/{row_id}", dependencies=[Staff])
def delete_service_line(work_order_id: UUID, row_id: UUID, service: WorkOrderServiceDep) -> dict:
    return render_to_dict(service.delete_service_line(work_order_id, row_id))


@router.post("/{work_order_id}/parts", status_code=201, dependencies=[Staff])
def add_part_line(work_order_id: UUID, body: PartLineBody, service: WorkOrderServiceDep) -> dict:
    return render_to_dict(service.add_part_line(work_order_id, body.part_id, body.quantity))


@router.delete("/{work_order_id}/parts/{row_id}", dependencies=[Staff])
def delete_part_line(work_order_id: UUID, row_id: UUID, service: WorkOrderServiceDep) -> dict:
    return render_to_dict(service.delete_part_line(work_order_id, row_id))
