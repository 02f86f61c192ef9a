"""Database layer - engine, base classes, and column types."""

from workshop_kernel.db.base import Base, TrackedBase, UTCDateTime, UUIDString
from workshop_kernel.db.engine import (
    build_engine,
    create_tables,
    drop_tables,
    get_engine,
    get_session,
    get_session_factory,
    init_engine_from_url,
    session_scope,
)
from workshop_kernel.db.types import Money, round_money

__all__ = [
    "build_engine",
    "init_engine_from_url",
    "get_engine",
    "get_session",
    "get_session_factory",
    "session_scope",
    "create_tables",
    "drop_tables",
    "Base",
    "TrackedBase",
    "UUIDString",
    "UTCDateTime",
    "Money",
    "round_money",
]
