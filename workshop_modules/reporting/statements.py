"""
Pure financial report transformation functions.

These functions turn flat rows loaded by the reporting service into the
period report.  ZERO I/O. ZERO side effects.

All monetary values are Decimal.  All inputs/outputs are frozen dataclasses.

Functions in this module follow the kernel domain purity convention:
- No database access
- No clock access
- No file I/O
- Deterministic: same inputs always produce same outputs
"""

from __future__ import annotations

import dataclasses
from collections import defaultdict
from collections.abc import Iterable, Mapping
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID

from workshop_kernel.db.types import ZERO, display_money, parse_instant, safe_unit_price
from workshop_kernel.exceptions import InvalidDateError, InvalidPeriodError
from workshop_kernel.selectors.catalog_selector import ServiceInfo, SparePartInfo
from workshop_kernel.selectors.party_selector import UserInfo, VehicleInfo
from workshop_kernel.selectors.report_selector import OrderRow, ReportLineRow, RequestRow
from workshop_modules.reporting.config import ReportingConfig
from workshop_modules.reporting.models import (
    ClientSummary,
    FinancialReport,
    OriginRequestSummary,
    PartBreakdownRow,
    ReportPeriod,
    ServiceBreakdownRow,
    ServiceRequestDetail,
    VehicleSummary,
    WorkOrderDetail,
)

# =========================================================================
# 1. PERIOD
# =========================================================================


def parse_period(from_date: str | datetime, to_date: str | datetime) -> ReportPeriod:
    """
    Validate report bounds.  Strings are ISO-8601 instants; naive values
    are UTC.

    Raises:
        InvalidPeriodError: unparseable bound ("Invalid date format") or
            from after to ("invalid period").
    """
    try:
        start = parse_instant(from_date)
        end = parse_instant(to_date)
    except InvalidDateError as exc:
        raise InvalidPeriodError(str(from_date), str(to_date), "Invalid date format") from exc
    if start > end:
        raise InvalidPeriodError(str(from_date), str(to_date))
    return ReportPeriod(from_date=start, to_date=end)


# =========================================================================
# 2. BREAKDOWNS
# =========================================================================


def _aggregate(lines: Iterable[ReportLineRow]) -> dict[UUID, tuple[int, Decimal]]:
    """Sum quantity and total per catalog item."""
    sums: dict[UUID, list] = defaultdict(lambda: [0, ZERO])
    for line in lines:
        entry = sums[line.item_id]
        entry[0] += line.quantity
        entry[1] += line.total
    return {item_id: (qty, total) for item_id, (qty, total) in sums.items()}


def _by_quantity(row) -> tuple:
    return (-row.quantity, row.name, str(row.id))


def build_service_breakdown(
    lines: Iterable[ReportLineRow],
    catalog: Mapping[UUID, ServiceInfo],
    config: ReportingConfig,
) -> tuple[ServiceBreakdownRow, ...]:
    """
    Group service lines by service, most sold first.

    A service deleted from the catalog keeps its row, with a null catalog
    record and the configured "unknown" name.
    """
    places = config.display_precision
    rows = []
    for item_id, (quantity, total) in _aggregate(lines).items():
        info = catalog.get(item_id)
        rows.append(
            ServiceBreakdownRow(
                id=item_id,
                name=info.name if info else config.unknown_service_label,
                quantity=quantity,
                unit_price=safe_unit_price(total, quantity, places),
                total=display_money(total, places),
                service=info,
            )
        )
    return tuple(sorted(rows, key=_by_quantity))


def build_part_breakdown(
    lines: Iterable[ReportLineRow],
    catalog: Mapping[UUID, SparePartInfo],
    config: ReportingConfig,
) -> tuple[PartBreakdownRow, ...]:
    """Group part lines by spare part, most sold first."""
    places = config.display_precision
    rows = []
    for item_id, (quantity, total) in _aggregate(lines).items():
        info = catalog.get(item_id)
        rows.append(
            PartBreakdownRow(
                id=item_id,
                name=info.name if info else config.unknown_part_label,
                quantity=quantity,
                unit_price=safe_unit_price(total, quantity, places),
                total=display_money(total, places),
                part=info,
            )
        )
    return tuple(sorted(rows, key=_by_quantity))


# =========================================================================
# 3. DETAIL LISTINGS
# =========================================================================


def client_summary(user: UserInfo | None) -> ClientSummary:
    if user is None:
        return ClientSummary(name="", phone="")
    return ClientSummary(name=user.full_name, phone=user.phone or "")


def vehicle_summary(vehicle: VehicleInfo | None) -> VehicleSummary:
    if vehicle is None:
        return VehicleSummary(make="", model="", year=None, license_plate="")
    return VehicleSummary(
        make=vehicle.make or "",
        model=vehicle.model or "",
        year=vehicle.year,
        license_plate=vehicle.license_plate or "",
    )


def build_work_order_details(
    orders: Iterable[OrderRow],
    service_lines: Iterable[ReportLineRow],
    part_lines: Iterable[ReportLineRow],
    users: Mapping[UUID, UserInfo],
    vehicles: Mapping[UUID, VehicleInfo],
    requests: Mapping[UUID, RequestRow],
    config: ReportingConfig,
) -> tuple[WorkOrderDetail, ...]:
    """Flatten each order with its client, vehicle, line sums, and origin request."""
    places = config.display_precision
    services_by_order: dict[UUID, list[ReportLineRow]] = defaultdict(list)
    for line in service_lines:
        services_by_order[line.work_order_id].append(line)
    parts_by_order: dict[UUID, list[ReportLineRow]] = defaultdict(list)
    for line in part_lines:
        parts_by_order[line.work_order_id].append(line)

    details = []
    for order in orders:
        services = services_by_order.get(order.id, [])
        parts = parts_by_order.get(order.id, [])
        request = requests.get(order.request_id) if order.request_id else None
        details.append(
            WorkOrderDetail(
                id=order.id,
                number=order.number,
                status=order.status,
                planned_date=order.planned_date,
                completed_date=order.completed_date,
                total_labor_cost=display_money(order.total_labor_cost, places),
                total_parts_cost=display_money(order.total_parts_cost, places),
                total_cost=display_money(order.total_cost, places),
                client=client_summary(users.get(order.client_id)),
                vehicle=vehicle_summary(vehicles.get(order.vehicle_id)),
                services_count=sum(line.quantity for line in services),
                parts_count=sum(line.quantity for line in parts),
                services_total=display_money(sum((line.total for line in services), ZERO), places),
                parts_total=display_money(sum((line.total for line in parts), ZERO), places),
                request=(
                    OriginRequestSummary(
                        id=request.id,
                        status=request.status,
                        desired_date=request.desired_date,
                        created_at=request.created_at,
                    )
                    if request is not None
                    else None
                ),
            )
        )
    return tuple(details)


def build_request_details(
    requests: Iterable[RequestRow],
    users: Mapping[UUID, UserInfo],
    vehicles: Mapping[UUID, VehicleInfo],
) -> tuple[ServiceRequestDetail, ...]:
    """Flatten requests, oldest first."""
    ordered = sorted(requests, key=lambda r: (r.created_at, str(r.id)))
    return tuple(
        ServiceRequestDetail(
            id=request.id,
            status=request.status,
            desired_date=request.desired_date,
            created_at=request.created_at,
            comment=request.comment,
            client=client_summary(users.get(request.client_id)),
            vehicle=vehicle_summary(vehicles.get(request.vehicle_id)),
        )
        for request in ordered
    )


# =========================================================================
# 4. REPORT
# =========================================================================


def build_financial_report(
    period: ReportPeriod,
    orders: list[OrderRow],
    service_lines: list[ReportLineRow],
    part_lines: list[ReportLineRow],
    requests_in_period: list[RequestRow],
    services: Mapping[UUID, ServiceInfo],
    parts: Mapping[UUID, SparePartInfo],
    users: Mapping[UUID, UserInfo],
    vehicles: Mapping[UUID, VehicleInfo],
    order_requests: Mapping[UUID, RequestRow],
    config: ReportingConfig,
    generated_at: datetime | None = None,
) -> FinancialReport:
    """
    Assemble the period report.

    revenue is the sum of the cached grand totals of the completed orders;
    breakdowns are built from the same population's lines.
    """
    revenue = sum((order.total_cost for order in orders), ZERO)
    return FinancialReport(
        period=period,
        revenue=display_money(revenue, config.display_precision),
        completed_orders=len(orders),
        incoming_requests=len(requests_in_period),
        services=build_service_breakdown(service_lines, services, config),
        parts=build_part_breakdown(part_lines, parts, config),
        work_orders_detailed=build_work_order_details(
            orders, service_lines, part_lines, users, vehicles, order_requests, config,
        ),
        service_requests_detailed=build_request_details(requests_in_period, users, vehicles),
        generated_at=generated_at,
    )


# =========================================================================
# 5. RENDERER (dict/JSON output)
# =========================================================================


def render_to_dict(obj: object) -> dict | list | str | int | float | bool | None:
    """
    Convert any report dataclass to a plain dict for JSON serialization.

    Handles:
    - Decimal -> str (preserving precision)
    - UUID -> str
    - datetime/date -> ISO format string
    - Enum -> .value
    - Nested frozen dataclasses -> nested dicts
    - Tuples -> lists
    - None preserved
    """
    if obj is None:
        return None
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, bool):
        return obj
    if isinstance(obj, Decimal):
        return str(obj)
    if isinstance(obj, UUID):
        return str(obj)
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if isinstance(obj, (list, tuple)):
        return [render_to_dict(item) for item in obj]
    if isinstance(obj, dict):
        return {str(k): render_to_dict(v) for k, v in obj.items()}
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {
            f.name: render_to_dict(getattr(obj, f.name))
            for f in dataclasses.fields(obj)
        }
    if isinstance(obj, (str, int, float)):
        return obj
    return str(obj)
