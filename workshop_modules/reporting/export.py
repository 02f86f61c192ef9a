"""
Financial report CSV export.

Renders a fully built ``FinancialReport`` as a spreadsheet-friendly CSV
document: UTF-8 with a byte order mark, ``;`` delimited, every cell
double-quoted, CRLF line endings.  Sections, in order: summary, services,
spare parts, work orders, service requests.

The report is complete before rendering starts; rendering never touches
the database, so a failed report produces no partial file.
"""

from __future__ import annotations

import csv
import io
import re
from datetime import datetime
from decimal import Decimal

from workshop_kernel.db.types import iso_instant
from workshop_kernel.logging_config import get_logger
from workshop_modules.reporting.config import ReportingConfig
from workshop_modules.reporting.models import FinancialReport

logger = get_logger("modules.reporting.export")

CSV_MEDIA_TYPE = "text/csv; charset=utf-8"


def _text(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, datetime):
        return iso_instant(value)
    return str(value)


def _date_or_missing(value: datetime | None, config: ReportingConfig) -> str:
    return iso_instant(value) if value is not None else config.missing_value


def report_rows(report: FinancialReport, config: ReportingConfig) -> list[list[str]]:
    """The report as a list of CSV rows (lists of cell strings)."""
    missing = config.missing_value
    rows: list[list[str]] = [
        [config.csv_title],
        [],
        ["Parameter", "Value"],
        ["Period start", _text(report.period.from_date)],
        ["Period end", _text(report.period.to_date)],
        ["Revenue", _text(report.revenue)],
        ["Completed orders", _text(report.completed_orders)],
        ["Incoming requests", _text(report.incoming_requests)],
    ]

    rows += [
        [],
        ["Services"],
        ["Name", "Description", "Base price", "Duration, min", "Active",
         "Quantity", "Unit price", "Total"],
    ]
    for item in report.services:
        service = item.service
        rows.append([
            item.name,
            _text(service.description if service else None),
            _text(service.base_price if service else None),
            _text(service.duration_min if service else None),
            _text(bool(service and service.is_active)),
            _text(item.quantity),
            _text(item.unit_price),
            _text(item.total),
        ])

    rows += [
        [],
        ["Spare parts"],
        ["Name", "Article", "Unit", "Price", "Active", "In stock",
         "Quantity", "Unit price", "Total"],
    ]
    for item in report.parts:
        part = item.part
        rows.append([
            item.name,
            _text(part.article if part else None),
            _text(part.unit if part else None),
            _text(part.price if part else None),
            _text(bool(part and part.is_active)),
            _text(part.stock_quantity if part else None),
            _text(item.quantity),
            _text(item.unit_price),
            _text(item.total),
        ])

    rows += [
        [],
        ["Work orders"],
        ["Number", "Client", "Phone", "Vehicle", "Status", "Planned date",
         "Completed date", "Services (qty)", "Parts (qty)", "Services total",
         "Parts total", "Total", "Request ID", "Request status",
         "Desired date", "Request created"],
    ]
    for order in report.work_orders_detailed:
        request = order.request
        rows.append([
            order.number,
            order.client.name,
            order.client.phone,
            order.vehicle.describe(),
            order.status,
            _date_or_missing(order.planned_date, config),
            _date_or_missing(order.completed_date, config),
            _text(order.services_count),
            _text(order.parts_count),
            _text(order.services_total),
            _text(order.parts_total),
            _text(order.total_cost),
            _text(request.id) if request else missing,
            request.status if request else missing,
            _date_or_missing(request.desired_date if request else None, config),
            _date_or_missing(request.created_at if request else None, config),
        ])

    rows += [
        [],
        ["Service requests"],
        ["Request ID", "Client", "Phone", "Vehicle", "Status", "Desired date",
         "Created", "Comment"],
    ]
    for request in report.service_requests_detailed:
        rows.append([
            _text(request.id),
            request.client.name,
            request.client.phone,
            request.vehicle.describe(),
            request.status,
            _date_or_missing(request.desired_date, config),
            _date_or_missing(request.created_at, config),
            _text(request.comment),
        ])

    return rows


def render_financial_report_csv(
    report: FinancialReport,
    config: ReportingConfig | None = None,
) -> bytes:
    """Encode the report as CSV bytes (UTF-8 with BOM)."""
    config = config or ReportingConfig.with_defaults()
    buffer = io.StringIO(newline="")
    writer = csv.writer(
        buffer,
        delimiter=config.csv_delimiter,
        quotechar='"',
        doublequote=True,
        quoting=csv.QUOTE_ALL,
        lineterminator="\r\n",
    )
    rows = report_rows(report, config)
    writer.writerows(rows)
    payload = buffer.getvalue().encode("utf-8-sig")

    logger.info(
        "financial_report_csv_rendered",
        extra={"rows": len(rows), "bytes": len(payload)},
    )
    return payload


_SEPARATORS = re.compile(r"[:\s]")
_UNSAFE = re.compile(r"[^\w.-]", re.ASCII)


def report_filename(report: FinancialReport) -> str:
    """``financial-report-<from>-<to>.csv`` with filesystem-safe characters."""
    stem = (
        f"financial-report-{iso_instant(report.period.from_date)}"
        f"-{iso_instant(report.period.to_date)}"
    )
    stem = _SEPARATORS.sub("-", stem)
    stem = _UNSAFE.sub("_", stem)
    return f"{stem}.csv"
