"""
Reporting-specific test fixtures.

Provides:
- ReportingConfig with defaults
- ReportingService wired to the test session and deterministic clock
"""

import pytest

from workshop_modules.reporting.config import ReportingConfig
from workshop_modules.reporting.service import ReportingService


@pytest.fixture
def reporting_config() -> ReportingConfig:
    return ReportingConfig.with_defaults()


@pytest.fixture
def reporting(session, clock, reporting_config) -> ReportingService:
    """ReportingService wired to the test session."""
    return ReportingService(session, clock, reporting_config)
