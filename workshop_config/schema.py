"""
Workshop settings schema.

Frozen dataclasses for the process-level settings.  YAML is parsed into
these types by the loader and then overridden from the environment.
Module sections (``work_orders``, ``reporting``) are kept as plain dicts
and handed to the module config classes' ``from_dict``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

DEFAULT_DATABASE_URL = "sqlite+pysqlite:///./workshop.db"


@dataclass(frozen=True)
class DatabaseSettings:
    url: str = DEFAULT_DATABASE_URL
    echo: bool = False
    pool_size: int = 20
    max_overflow: int = 10


@dataclass(frozen=True)
class LoggingSettings:
    level: str = "INFO"


@dataclass(frozen=True)
class WorkshopSettings:
    """Everything a process needs to wire the engine, logging, and modules."""

    database: DatabaseSettings = field(default_factory=DatabaseSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)
    work_orders: dict[str, Any] = field(default_factory=dict)
    reporting: dict[str, Any] = field(default_factory=dict)
    source: str | None = None
