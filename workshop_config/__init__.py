"""
workshop_config -- single public entrypoint for process settings.

Responsibility:
    ``get_active_settings()`` is the one place that reads the settings
    file and the environment.  Scripts and the HTTP application call it at
    start-up and pass the resulting values down explicitly; services never
    read the environment themselves.

Resolution order (later wins):
    1. Built-in defaults (local SQLite file, INFO logging).
    2. YAML file named by ``WORKSHOP_CONFIG`` (or the ``path`` argument).
    3. Environment: ``DATABASE_URL``, ``WORKSHOP_LOG_LEVEL``,
       ``WORKSHOP_SQL_ECHO``.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path

from workshop_config.loader import apply_env_overrides, load_yaml_file, parse_settings
from workshop_config.schema import DatabaseSettings, LoggingSettings, WorkshopSettings
from workshop_kernel.logging_config import get_logger

_logger = get_logger("config")

__all__ = [
    "DatabaseSettings",
    "LoggingSettings",
    "WorkshopSettings",
    "get_active_settings",
]


def get_active_settings(
    path: Path | str | None = None,
    environ: Mapping[str, str] | None = None,
) -> WorkshopSettings:
    """Resolve the process settings.

    Raises:
        FileNotFoundError: the named settings file does not exist.
        ValueError: the file contains unknown keys.
    """
    environ = os.environ if environ is None else environ
    path = path or environ.get("WORKSHOP_CONFIG")

    if path:
        settings = parse_settings(load_yaml_file(Path(path)), source=str(path))
    else:
        settings = WorkshopSettings()

    settings = apply_env_overrides(settings, environ)
    _logger.info(
        "workshop_settings_loaded",
        extra={
            "source": settings.source or "defaults",
            "dialect": settings.database.url.split(":", 1)[0],
            "log_level": settings.logging.level,
        },
    )
    return settings
