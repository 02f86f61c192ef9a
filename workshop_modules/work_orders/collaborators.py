"""
Collaborator contracts consumed by the work order lifecycle.

The ledger reads catalog prices, user roles, and service requests through
these protocols.  The default implementations are the kernel selectors and
the service request module; tests and other hosts may pass their own.
"""

from collections.abc import Iterable
from typing import Protocol, runtime_checkable
from uuid import UUID

from workshop_kernel.selectors.catalog_selector import ServiceInfo, SparePartInfo
from workshop_kernel.selectors.party_selector import UserInfo
from workshop_modules.service_requests.models import ServiceRequestInfo


@runtime_checkable
class CatalogLookup(Protocol):
    """Service and spare-part lookup by id.  Returns inactive items too."""

    def get_service(self, service_id: UUID) -> ServiceInfo | None:
        ...

    def get_part(self, part_id: UUID) -> SparePartInfo | None:
        ...

    def services_by_ids(self, service_ids: Iterable[UUID]) -> dict[UUID, ServiceInfo]:
        ...

    def parts_by_ids(self, part_ids: Iterable[UUID]) -> dict[UUID, SparePartInfo]:
        ...


@runtime_checkable
class UserDirectory(Protocol):
    """User lookup used to validate responsible workers."""

    def get_user(self, user_id: UUID) -> UserInfo | None:
        ...


@runtime_checkable
class ServiceRequestStore(Protocol):
    """Read access to service requests.

    Raises:
        ServiceRequestNotFoundError: When the id is unknown.
    """

    def get(self, request_id: UUID) -> ServiceRequestInfo:
        ...
