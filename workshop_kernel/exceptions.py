"""
Typed Exception Hierarchy for the Workshop Ledger.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Callers (the HTTP layer, scripts, tests) must be able to tell a missing
catalog item from a locked work order without parsing message strings.
Every error therefore has:
  1. A TYPED exception class (catch by type, not message)
  2. A CODE attribute (machine-readable, API-safe)
  3. A KIND attribute naming the response category
  4. Structured DATA as attributes (not just a message string)

Example:
    try:
        service.add_service_line(order_id, service_id)
    except WorkOrderNotEditableError as e:
        api_response(code=e.code, status=e.status)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    WorkshopError (base)
    |
    +-- NotFoundError                       kind = NOT_FOUND
    |   +-- ServiceRequestNotFoundError
    |   +-- WorkOrderNotFoundError
    |   +-- ResponsibleWorkerNotFoundError
    |   +-- VehicleNotFoundError
    |   +-- CatalogItemNotFoundError
    |   +-- CatalogItemsNotFoundError
    |   +-- LineNotFoundError
    |
    +-- BadRequestError                     kind = BAD_REQUEST
    |   +-- CancelledRequestError
    |   +-- DuplicateWorkOrderError
    |   +-- InvalidResponsibleWorkerError
    |   +-- WorkOrderNotEditableError
    |   +-- InvalidStatusTransitionError
    |   +-- NoFieldsToUpdateError
    |   +-- RequestNotCancellableError
    |   +-- InvalidDateError
    |   +-- InvalidPeriodError
    |
    +-- ForbiddenError                      kind = FORBIDDEN
    |   +-- RoleNotPermittedError
    |   +-- NotResourceOwnerError
    |
    +-- InternalError                       kind = INTERNAL
        +-- PersistenceError
        +-- LedgerIntegrityError

===============================================================================
DESIGN DECISIONS
===============================================================================

1. Inherit from Exception, not ValueError/LookupError.  Domain errors must be
   catchable as a group without mixing in programming errors.

2. ``code`` and ``kind`` are class attributes.  Both are static per type and
   are available without instantiation (error tables, API docs).

3. InternalError messages are generic.  The underlying storage error is
   chained (``raise ... from exc``) and logged, never rendered to callers.

===============================================================================
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Response category of a workshop error."""

    NOT_FOUND = "NOT_FOUND"
    BAD_REQUEST = "BAD_REQUEST"
    FORBIDDEN = "FORBIDDEN"
    INTERNAL = "INTERNAL"


class WorkshopError(Exception):
    """
    Base exception for all workshop ledger errors.

    All subclasses must have a ``code`` class attribute for machine-readable
    error identification.
    """

    code: str = "WORKSHOP_ERROR"
    kind: ErrorKind = ErrorKind.INTERNAL

    @property
    def message(self) -> str:
        return str(self)


# =============================================================================
# Not found
# =============================================================================


class NotFoundError(WorkshopError):
    """Base exception for missing entities."""

    code: str = "NOT_FOUND"
    kind: ErrorKind = ErrorKind.NOT_FOUND


class ServiceRequestNotFoundError(NotFoundError):
    """Service request with given ID was not found."""

    code: str = "SERVICE_REQUEST_NOT_FOUND"

    def __init__(self, request_id: str):
        self.request_id = request_id
        super().__init__("Service request not found")


class WorkOrderNotFoundError(NotFoundError):
    """Work order with given ID was not found."""

    code: str = "WORK_ORDER_NOT_FOUND"

    def __init__(self, work_order_id: str):
        self.work_order_id = work_order_id
        super().__init__("Work order not found")


class ResponsibleWorkerNotFoundError(NotFoundError):
    """The user named as responsible worker does not exist."""

    code: str = "RESPONSIBLE_WORKER_NOT_FOUND"

    def __init__(self, worker_id: str):
        self.worker_id = worker_id
        super().__init__("Responsible worker does not exist")


class VehicleNotFoundError(NotFoundError):
    """Vehicle with given ID was not found."""

    code: str = "VEHICLE_NOT_FOUND"

    def __init__(self, vehicle_id: str):
        self.vehicle_id = vehicle_id
        super().__init__("Vehicle not found")


class CatalogItemNotFoundError(NotFoundError):
    """
    Catalog service or spare part is missing or deactivated.

    Inactive items count as not found for pricing purposes.
    """

    code: str = "CATALOG_ITEM_NOT_FOUND"

    _LABELS = {"service": "Service", "part": "Spare part"}

    def __init__(self, item_kind: str, item_id: str):
        self.item_kind = item_kind
        self.item_id = item_id
        super().__init__(f"{self._LABELS.get(item_kind, 'Catalog item')} not found")


class CatalogItemsNotFoundError(NotFoundError):
    """At least one id of a batch price lookup did not resolve to an active item."""

    code: str = "CATALOG_ITEMS_NOT_FOUND"

    _LABELS = {"service": "services", "part": "spare parts"}

    def __init__(self, item_kind: str, missing_ids: list[str]):
        self.item_kind = item_kind
        self.missing_ids = missing_ids
        super().__init__(
            f"One or more {self._LABELS.get(item_kind, 'catalog items')} not found"
        )


class LineNotFoundError(NotFoundError):
    """Line row is missing or belongs to a different work order."""

    code: str = "LINE_NOT_FOUND"

    _LABELS = {"service": "service", "part": "part"}

    def __init__(self, item_kind: str, work_order_id: str, row_id: str):
        self.item_kind = item_kind
        self.work_order_id = work_order_id
        self.row_id = row_id
        super().__init__(
            f"Work order {self._LABELS.get(item_kind, 'line')} position not found"
        )


# =============================================================================
# Bad request
# =============================================================================


class BadRequestError(WorkshopError):
    """Base exception for rejected inputs and rejected state changes."""

    code: str = "BAD_REQUEST"
    kind: ErrorKind = ErrorKind.BAD_REQUEST


class CancelledRequestError(BadRequestError):
    """A work order cannot be built from a cancelled service request."""

    code: str = "CANCELLED_REQUEST"

    def __init__(self, request_id: str):
        self.request_id = request_id
        super().__init__("Cannot create work order from cancelled request")


class DuplicateWorkOrderError(BadRequestError):
    """The service request already backs a work order (1:1)."""

    code: str = "DUPLICATE_WORK_ORDER"

    def __init__(self, request_id: str):
        self.request_id = request_id
        super().__init__("Work order already exists for this request")


class InvalidResponsibleWorkerError(BadRequestError):
    """The responsible worker does not hold a staff role."""

    code: str = "INVALID_RESPONSIBLE_WORKER"

    def __init__(self, worker_id: str, role: str):
        self.worker_id = worker_id
        self.role = role
        super().__init__("Responsible worker must be an Admin or Worker")


class WorkOrderNotEditableError(BadRequestError):
    """The work order is COMPLETED or CANCELLED; its ledger is closed."""

    code: str = "WORK_ORDER_NOT_EDITABLE"

    def __init__(self, work_order_id: str, status: str):
        self.work_order_id = work_order_id
        self.status = status
        super().__init__("Work order is not editable")


class InvalidStatusTransitionError(BadRequestError):
    """The requested status change is not in the transition table."""

    code: str = "INVALID_STATUS_TRANSITION"

    def __init__(self, work_order_id: str, from_status: str, to_status: str):
        self.work_order_id = work_order_id
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(
            f"Cannot change work order status from {from_status} to {to_status}"
        )


class NoFieldsToUpdateError(BadRequestError):
    """A bulk update carried no fields at all."""

    code: str = "NO_FIELDS_TO_UPDATE"

    def __init__(self, work_order_id: str):
        self.work_order_id = work_order_id
        super().__init__("No fields to update")


class RequestNotCancellableError(BadRequestError):
    """Only NEW or CONFIRMED requests can be cancelled."""

    code: str = "REQUEST_NOT_CANCELLABLE"

    def __init__(self, request_id: str, status: str):
        self.request_id = request_id
        self.status = status
        super().__init__("Request cannot be cancelled")


class InvalidDateError(BadRequestError):
    """A date/time input could not be parsed."""

    code: str = "INVALID_DATE"

    def __init__(self, value: str):
        self.value = value
        super().__init__("Invalid date format")


class InvalidPeriodError(BadRequestError):
    """Report period bounds are unparseable or reversed."""

    code: str = "INVALID_PERIOD"

    def __init__(self, from_date: str, to_date: str, reason: str = "invalid period"):
        self.from_date = from_date
        self.to_date = to_date
        self.reason = reason
        super().__init__(reason)


# =============================================================================
# Forbidden
# =============================================================================


class ForbiddenError(WorkshopError):
    """Base exception for authorization failures."""

    code: str = "FORBIDDEN"
    kind: ErrorKind = ErrorKind.FORBIDDEN


class RoleNotPermittedError(ForbiddenError):
    """The caller's role is not allowed on this operation."""

    code: str = "ROLE_NOT_PERMITTED"

    def __init__(self, role: str | None, allowed: tuple[str, ...]):
        self.role = role
        self.allowed = allowed
        super().__init__("Insufficient role for this operation")


class NotResourceOwnerError(ForbiddenError):
    """The caller does not own the resource it is acting on."""

    code: str = "NOT_RESOURCE_OWNER"

    def __init__(self, resource: str, resource_id: str, user_id: str):
        self.resource = resource
        self.resource_id = resource_id
        self.user_id = user_id
        super().__init__(f"You can act only on your own {resource}")


# =============================================================================
# Internal
# =============================================================================


class InternalError(WorkshopError):
    """Base exception for failures the caller cannot fix."""

    code: str = "INTERNAL_ERROR"
    kind: ErrorKind = ErrorKind.INTERNAL


class PersistenceError(InternalError):
    """
    Unexpected storage failure, wrapped so storage internals never leak.

    The original exception is chained as ``__cause__``.
    """

    code: str = "PERSISTENCE_ERROR"

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"Failed to {operation}")


class LedgerIntegrityError(InternalError):
    """A ledger precondition that upstream validation guarantees was violated."""

    code: str = "LEDGER_INTEGRITY_ERROR"

    def __init__(self, work_order_id: str, reason: str):
        self.work_order_id = work_order_id
        self.reason = reason
        super().__init__(f"Ledger integrity violation: {reason}")
