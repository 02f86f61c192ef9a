"""
Reporting Configuration Schema.

Display precision, labels for catalog items deleted since they were sold,
and CSV formatting options for the financial report.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Self

from workshop_kernel.logging_config import get_logger

logger = get_logger("modules.reporting.config")


@dataclass
class ReportingConfig:
    """
    Configuration schema for the reporting module.

    Controls display precision, fallback names, and CSV output.
    """

    # Rounding precision for display (unit prices, money columns)
    display_precision: int = 2

    # Shown when a catalog item no longer exists
    unknown_service_label: str = "Unknown service"
    unknown_part_label: str = "Unknown spare part"

    # CSV export
    csv_delimiter: str = ";"
    csv_title: str = "Financial report"
    missing_value: str = "-"

    def __post_init__(self):
        if len(self.csv_delimiter) != 1:
            raise ValueError("csv_delimiter must be a single character")
        logger.info(
            "reporting_config_initialized",
            extra={
                "display_precision": self.display_precision,
                "csv_delimiter": self.csv_delimiter,
            },
        )

    @classmethod
    def with_defaults(cls) -> Self:
        """Create config with defaults."""
        return cls()

    @classmethod
    def from_dict(cls, data: dict) -> Self:
        """Create config from dictionary (e.g., loaded from a YAML file)."""
        logger.info(
            "reporting_config_loading_from_dict",
            extra={"keys": sorted(data.keys())},
        )
        return cls(**data)
