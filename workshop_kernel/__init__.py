"""
Workshop Kernel

The persistence and invariant layer for the repair-order ledger:
- UUID-keyed SQLAlchemy models with Decimal money columns
- Transactional engine and session scope
- Typed, coded exceptions
- Structured JSON logging
- Locked-counter sequence allocation
"""

__version__ = "0.1.0"
