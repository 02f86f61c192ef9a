"""
Shared transaction boundary for module services.

Used by ``workshop_modules/*/service.py``: each public mutating method
runs its body inside ``unit_of_work`` so that commit, rollback, and the
wrapping of storage failures are written once.

Architecture: Modules layer.  Imports only from workshop_kernel.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from workshop_kernel.exceptions import PersistenceError, WorkshopError


@contextmanager
def unit_of_work(
    session: Session,
    operation: str,
    logger: logging.Logger,
    on_integrity_error: Callable[[IntegrityError], WorkshopError | None] | None = None,
) -> Iterator[Session]:
    """
    Commit on success, roll back on any exception.

    Domain errors are re-raised unchanged.  Storage errors are logged with
    their traceback and re-raised as ``PersistenceError`` so that driver
    details never reach callers.  ``on_integrity_error`` may translate a
    constraint violation into a domain error instead.
    """
    try:
        yield session
        session.commit()
    except WorkshopError:
        session.rollback()
        raise
    except IntegrityError as exc:
        session.rollback()
        translated = on_integrity_error(exc) if on_integrity_error else None
        if translated is not None:
            logger.info(
                "integrity_error_translated",
                extra={"operation": operation, "code": translated.code},
            )
            raise translated from exc
        logger.error("persistence_failed", extra={"operation": operation}, exc_info=True)
        raise PersistenceError(operation) from exc
    except SQLAlchemyError as exc:
        session.rollback()
        logger.error("persistence_failed", extra={"operation": operation}, exc_info=True)
        raise PersistenceError(operation) from exc
    except Exception:
        session.rollback()
        raise
