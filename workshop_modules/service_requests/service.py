"""
Service Request Module Service (``workshop_modules.service_requests.service``).

Responsibility
--------------
Creates, lists, re-statuses, and cancels service requests.  Also the
default ``ServiceRequestStore`` the work order lifecycle reads from.

Invariants enforced
-------------------
* Each public mutating method owns the transaction boundary
  (``commit`` on success, ``rollback`` on any exception).
* A request can only be filed for a vehicle the client owns.
* Only the owner may cancel, and only from NEW or CONFIRMED.
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from workshop_kernel.db.types import parse_instant
from workshop_kernel.domain.clock import Clock, SystemClock
from workshop_kernel.exceptions import (
    CatalogItemNotFoundError,
    NotResourceOwnerError,
    RequestNotCancellableError,
    ServiceRequestNotFoundError,
    VehicleNotFoundError,
)
from workshop_kernel.logging_config import get_logger
from workshop_kernel.models.service_request import ServiceRequest, ServiceRequestStatus
from workshop_kernel.selectors.catalog_selector import CatalogSelector
from workshop_kernel.selectors.party_selector import PartySelector
from workshop_modules._transaction import unit_of_work
from workshop_modules.service_requests.models import ServiceRequestFilters, ServiceRequestInfo

logger = get_logger("modules.service_requests.service")

_CANCELLABLE = frozenset({ServiceRequestStatus.NEW.value, ServiceRequestStatus.CONFIRMED.value})


class ServiceRequestService:
    """
    Service request intake and status management.

    Usage::

        service = ServiceRequestService(session, clock)
        request = service.create(client_id, vehicle_id, desired_date="2025-12-01T10:00:00Z")
    """

    def __init__(self, session: Session, clock: Clock | None = None):
        self._session = session
        self._clock = clock or SystemClock()
        self._parties = PartySelector(session)
        self._catalog = CatalogSelector(session)

    # =========================================================================
    # Commands
    # =========================================================================

    def create(
        self,
        client_id: UUID,
        vehicle_id: UUID,
        service_id: UUID | None = None,
        desired_date: str | datetime | None = None,
        comment: str | None = None,
    ) -> ServiceRequestInfo:
        """
        File a new request for one of the client's vehicles.

        Raises:
            VehicleNotFoundError: unknown vehicle.
            NotResourceOwnerError: vehicle belongs to someone else.
            CatalogItemNotFoundError: service given but missing or inactive.
        """
        with unit_of_work(self._session, "create service request", logger):
            vehicle = self._parties.get_vehicle(vehicle_id)
            if vehicle is None:
                raise VehicleNotFoundError(str(vehicle_id))
            if vehicle.owner_id != client_id:
                raise NotResourceOwnerError("vehicles", str(vehicle_id), str(client_id))

            if service_id is not None:
                service = self._catalog.get_service(service_id)
                if service is None or not service.is_active:
                    raise CatalogItemNotFoundError("service", str(service_id))

            now = self._clock.now()
            request = ServiceRequest(
                client_id=client_id,
                vehicle_id=vehicle_id,
                service_id=service_id,
                desired_date=parse_instant(desired_date) if desired_date else None,
                comment=comment,
                status=ServiceRequestStatus.NEW.value,
                created_at=now,
                updated_at=now,
                created_by_id=client_id,
            )
            self._session.add(request)
            self._session.flush()
            info = ServiceRequestInfo.from_model(request)

        logger.info(
            "service_request_created",
            extra={
                "request_id": str(info.id),
                "client_id": str(client_id),
                "vehicle_id": str(vehicle_id),
            },
        )
        return info

    def update_status(self, request_id: UUID, status: ServiceRequestStatus) -> ServiceRequestInfo:
        """Set a request's status (staff action, no transition table)."""
        with unit_of_work(self._session, "update request status", logger):
            request = self._load(request_id)
            previous = request.status
            request.status = ServiceRequestStatus(status).value
            request.updated_at = self._clock.now()
            self._session.flush()
            info = ServiceRequestInfo.from_model(request)

        logger.info(
            "service_request_status_changed",
            extra={
                "request_id": str(request_id),
                "from_status": previous,
                "to_status": info.status.value,
            },
        )
        return info

    def cancel(self, request_id: UUID, user_id: UUID) -> ServiceRequestInfo:
        """
        Cancel a request on behalf of its owner.

        Raises:
            NotResourceOwnerError: caller is not the requesting client.
            RequestNotCancellableError: request is already CANCELLED or COMPLETED.
        """
        with unit_of_work(self._session, "cancel service request", logger):
            request = self._load(request_id)
            if request.client_id != user_id:
                raise NotResourceOwnerError("service requests", str(request_id), str(user_id))
            if request.status not in _CANCELLABLE:
                raise RequestNotCancellableError(str(request_id), request.status)
            request.status = ServiceRequestStatus.CANCELLED.value
            request.updated_at = self._clock.now()
            self._session.flush()
            info = ServiceRequestInfo.from_model(request)

        logger.info("service_request_cancelled", extra={"request_id": str(request_id)})
        return info

    # =========================================================================
    # Queries
    # =========================================================================

    def get(self, request_id: UUID) -> ServiceRequestInfo:
        """
        Raises:
            ServiceRequestNotFoundError: unknown id.
        """
        return ServiceRequestInfo.from_model(self._load(request_id))

    def list(self, filters: ServiceRequestFilters | None = None) -> list[ServiceRequestInfo]:
        """Staff listing, newest first."""
        filters = filters or ServiceRequestFilters()
        query = select(ServiceRequest)
        if filters.status is not None:
            query = query.where(ServiceRequest.status == ServiceRequestStatus(filters.status).value)
        if filters.client_id is not None:
            query = query.where(ServiceRequest.client_id == filters.client_id)
        if filters.from_date is not None:
            query = query.where(ServiceRequest.desired_date >= filters.from_date)
        if filters.to_date is not None:
            query = query.where(ServiceRequest.desired_date <= filters.to_date)
        rows = self._session.execute(
            query.order_by(ServiceRequest.created_at.desc())
        ).scalars()
        return [ServiceRequestInfo.from_model(row) for row in rows]

    def list_for_client(self, client_id: UUID) -> list[ServiceRequestInfo]:
        return self.list(ServiceRequestFilters(client_id=client_id))

    # =========================================================================
    # Internal helpers
    # =========================================================================

    def _load(self, request_id: UUID) -> ServiceRequest:
        request = self._session.get(ServiceRequest, request_id)
        if request is None:
            raise ServiceRequestNotFoundError(str(request_id))
        return request
