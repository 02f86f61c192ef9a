"""
Settings Loader (``workshop_config.loader``).

Responsibility
--------------
Loads the optional YAML settings file, parses it into the frozen
``workshop_config.schema`` dataclasses, and applies environment overrides.
Callers use ``workshop_config.get_active_settings()`` rather than this
module directly.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Unknown keys in a section  -> ``ValueError``.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import fields, replace
from pathlib import Path
from typing import Any

import yaml

from workshop_config.schema import DatabaseSettings, LoggingSettings, WorkshopSettings

_TRUE = {"1", "true", "yes", "on"}


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def _section(cls, data: Mapping[str, Any] | None, name: str):
    data = dict(data or {})
    known = {f.name for f in fields(cls)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValueError(f"Unknown keys in '{name}' settings: {', '.join(unknown)}")
    return cls(**data)


def parse_settings(data: Mapping[str, Any], source: str | None = None) -> WorkshopSettings:
    """Parse a settings dict (as loaded from YAML)."""
    return WorkshopSettings(
        database=_section(DatabaseSettings, data.get("database"), "database"),
        logging=_section(LoggingSettings, data.get("logging"), "logging"),
        work_orders=dict(data.get("work_orders") or {}),
        reporting=dict(data.get("reporting") or {}),
        source=source,
    )


def apply_env_overrides(settings: WorkshopSettings, environ: Mapping[str, str]) -> WorkshopSettings:
    """
    Override file values from the environment.

    DATABASE_URL        -> database.url
    WORKSHOP_SQL_ECHO   -> database.echo
    WORKSHOP_LOG_LEVEL  -> logging.level
    """
    database = settings.database
    if environ.get("DATABASE_URL"):
        database = replace(database, url=environ["DATABASE_URL"])
    if environ.get("WORKSHOP_SQL_ECHO"):
        database = replace(database, echo=environ["WORKSHOP_SQL_ECHO"].strip().lower() in _TRUE)

    logging_settings = settings.logging
    if environ.get("WORKSHOP_LOG_LEVEL"):
        logging_settings = replace(
            logging_settings, level=environ["WORKSHOP_LOG_LEVEL"].strip().upper()
        )

    return replace(settings, database=database, logging=logging_settings)
