"""
Reporting Module (``workshop_modules.reporting``).

Read-only period financial report over completed work orders and incoming
service requests, with JSON rendering and CSV export.
"""

from workshop_modules.reporting.config import ReportingConfig
from workshop_modules.reporting.export import render_financial_report_csv, report_filename
from workshop_modules.reporting.models import (
    FinancialReport,
    PartBreakdownRow,
    ReportPeriod,
    ServiceBreakdownRow,
    ServiceRequestDetail,
    WorkOrderDetail,
)
from workshop_modules.reporting.service import ReportingService
from workshop_modules.reporting.statements import render_to_dict

__all__ = [
    "ReportingConfig",
    "ReportingService",
    "FinancialReport",
    "ReportPeriod",
    "ServiceBreakdownRow",
    "PartBreakdownRow",
    "WorkOrderDetail",
    "ServiceRequestDetail",
    "render_financial_report_csv",
    "report_filename",
    "render_to_dict",
]
