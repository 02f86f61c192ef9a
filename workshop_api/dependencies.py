"""
Request-scoped dependencies: database session, caller identity, services.

Authentication happens in front of this service.  The gateway forwards the
authenticated caller as ``X-Actor-Id`` and ``X-Actor-Role``; the role gate
here only compares that role against the route's allowed roles.
"""

from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Annotated
from uuid import UUID

from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session

from workshop_kernel.exceptions import RoleNotPermittedError
from workshop_kernel.models.party import SystemRole
from workshop_modules.reporting import ReportingService
from workshop_modules.service_requests import RequestStatusSynchronizer, ServiceRequestService
from workshop_modules.work_orders.service import WorkOrderService
from workshop_modules.work_orders.signals import WorkOrderSignal


@dataclass(frozen=True)
class Caller:
    user_id: UUID | None
    role: str | None


def get_db_session(request: Request) -> Iterator[Session]:
    session = request.app.state.session_factory()
    try:
        yield session
    finally:
        session.close()


def get_caller(
    x_actor_id: Annotated[str | None, Header()] = None,
    x_actor_role: Annotated[str | None, Header()] = None,
) -> Caller:
    user_id = None
    if x_actor_id:
        try:
            user_id = UUID(x_actor_id)
        except ValueError:
            raise RoleNotPermittedError(x_actor_role, ()) from None
    role = x_actor_role.strip().upper() if x_actor_role else None
    return Caller(user_id=user_id, role=role)


def require_roles(*roles: SystemRole) -> Callable[..., Caller]:
    """Dependency admitting only callers holding one of ``roles``."""
    allowed = tuple(role.value for role in roles)

    def dependency(caller: Annotated[Caller, Depends(get_caller)]) -> Caller:
        if caller.role not in allowed:
            raise RoleNotPermittedError(caller.role, allowed)
        return caller

    return dependency


staff_only = require_roles(SystemRole.ADMIN, SystemRole.WORKER)
admin_only = require_roles(SystemRole.ADMIN)
any_member = require_roles(SystemRole.ADMIN, SystemRole.WORKER, SystemRole.CLIENT)


def get_work_order_service(
    request: Request,
    session: Annotated[Session, Depends(get_db_session)],
    caller: Annotated[Caller, Depends(get_caller)],
) -> WorkOrderService:
    """Work order service with request status sync connected."""
    state = request.app.state
    requests = ServiceRequestService(session, state.clock)
    signal = WorkOrderSignal()
    signal.connect(RequestStatusSynchronizer(requests))
    return WorkOrderService(
        session,
        state.clock,
        config=state.work_order_config,
        requests=requests,
        signal=signal,
        actor_id=caller.user_id,
    )


def get_reporting_service(
    request: Request,
    session: Annotated[Session, Depends(get_db_session)],
) -> ReportingService:
    state = request.app.state
    return ReportingService(session, state.clock, state.reporting_config)


WorkOrderServiceDep = Annotated[WorkOrderService, Depends(get_work_order_service)]
ReportingServiceDep = Annotated[ReportingService, Depends(get_reporting_service)]
