"""Read-only query selectors."""

from workshop_kernel.selectors.base import BaseSelector
from workshop_kernel.selectors.catalog_selector import CatalogSelector, ServiceInfo, SparePartInfo
from workshop_kernel.selectors.party_selector import PartySelector, UserInfo, VehicleInfo
from workshop_kernel.selectors.report_selector import (
    OrderRow,
    ReportLineRow,
    ReportSelector,
    RequestRow,
)

__all__ = [
    "BaseSelector",
    "CatalogSelector",
    "ServiceInfo",
    "SparePartInfo",
    "PartySelector",
    "UserInfo",
    "VehicleInfo",
    "ReportSelector",
    "OrderRow",
    "ReportLineRow",
    "RequestRow",
]
