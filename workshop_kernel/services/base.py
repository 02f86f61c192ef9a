"""
BaseService -- abstract base for all kernel and ledger services.

Responsibility:
    Provides the common constructor and session-handling contract for
    every flush-only service.  Concrete services receive a SQLAlchemy
    ``Session`` that they use via ``session.flush()`` -- never
    ``session.commit()``.

Invariants enforced:
    Transaction boundaries: services flush within the caller's transaction
    and never commit or rollback themselves.  The caller (a module service
    such as WorkOrderService, or a test harness) owns commit/rollback.
    This is what makes a bulk line replacement one atomic unit.
"""

from abc import ABC
from typing import Generic, TypeVar

from sqlalchemy.orm import Session

from workshop_kernel.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseService(ABC, Generic[ModelType]):
    """
    Abstract base class for flush-only services.

    Non-goals:
        - Does NOT manage transaction lifecycle (commit/rollback).
        - Does NOT provide query-only (read) methods -- those belong
          in ``workshop_kernel/selectors/``.
    """

    def __init__(self, session: Session):
        self.session = session
