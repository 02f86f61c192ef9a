"""
Module ORM Registry (``workshop_modules._orm_registry``).

Responsibility
--------------
Ensure every SQLAlchemy ORM model is imported so that ``Base.metadata``
contains its table definition before tables are created.  The kernel's
``create_tables()`` calls ``import_all_orm_models()`` first.

Architecture position
---------------------
**Modules layer** -- utility.  MUST NOT be imported by ``workshop_kernel``
at module import time (only lazily from ``create_tables``).
"""


def import_all_orm_models() -> None:
    """Import kernel models and the sequence counter table.

    This function is idempotent -- repeated calls are harmless.
    """
    import workshop_kernel.models  # noqa: F401
    import workshop_kernel.services.sequence_service  # noqa: F401
