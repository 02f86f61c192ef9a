"""
Reporting Module Service (``workshop_modules.reporting.service``).

Responsibility
--------------
Builds the period financial report by bridging the kernel selectors
(``ReportSelector``, ``CatalogSelector``, ``PartySelector``) to the pure
transformation functions in ``statements.py``.  This is a **read-only**
service: it performs no writes and takes no locks.

Invariants enforced
-------------------
* Read-only -- no mutations.
* All monetary amounts use ``Decimal`` -- NEVER ``float``.
* Orders are counted by completion date, requests by creation date.

Failure modes
-------------
* Invalid period  -> ``InvalidPeriodError`` before any query runs.
* Selector query failure  -> ``PersistenceError`` (storage detail logged).

A report spanning an in-flight completion may or may not include that
order, depending on transaction visibility.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from workshop_kernel.domain.clock import Clock, SystemClock
from workshop_kernel.exceptions import PersistenceError
from workshop_kernel.logging_config import get_logger
from workshop_kernel.selectors.catalog_selector import CatalogSelector
from workshop_kernel.selectors.party_selector import PartySelector
from workshop_kernel.selectors.report_selector import ReportSelector
from workshop_modules.reporting.config import ReportingConfig
from workshop_modules.reporting.models import FinancialReport
from workshop_modules.reporting.statements import build_financial_report, parse_period

logger = get_logger("modules.reporting.service")


class ReportingService:
    """
    Financial report generation service.

    Guarantees
    ----------
    * Report generation delegates to pure functions in ``statements.py``;
      no arithmetic lives in this class.
    * Clock is injectable for deterministic testing.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        config: ReportingConfig | None = None,
    ):
        self._session = session
        self._clock = clock or SystemClock()
        self._config = config or ReportingConfig.with_defaults()
        self._reports = ReportSelector(session)
        self._catalog = CatalogSelector(session)
        self._parties = PartySelector(session)

    @property
    def config(self) -> ReportingConfig:
        return self._config

    def get_financial_report(
        self,
        from_date: str | datetime,
        to_date: str | datetime,
    ) -> FinancialReport:
        """
        Revenue, counts, breakdowns, and detail listings for [from, to].

        Raises:
            InvalidPeriodError: unparseable bounds or from after to.
            PersistenceError: storage failure.
        """
        period = parse_period(from_date, to_date)

        try:
            orders = self._reports.completed_orders(period.from_date, period.to_date)
            order_ids = [order.id for order in orders]
            service_lines = self._reports.service_lines(order_ids)
            part_lines = self._reports.part_lines(order_ids)
            requests_in_period = self._reports.requests_created(period.from_date, period.to_date)
            order_requests = self._reports.requests_by_ids(
                order.request_id for order in orders if order.request_id
            )

            services = self._catalog.services_by_ids(line.item_id for line in service_lines)
            parts = self._catalog.parts_by_ids(line.item_id for line in part_lines)
            users = self._parties.users_by_ids(
                [order.client_id for order in orders]
                + [request.client_id for request in requests_in_period]
            )
            vehicles = self._parties.vehicles_by_ids(
                [order.vehicle_id for order in orders]
                + [request.vehicle_id for request in requests_in_period]
            )
        except SQLAlchemyError as exc:
            logger.error(
                "financial_report_query_failed",
                extra={"from": period.from_date, "to": period.to_date},
                exc_info=True,
            )
            raise PersistenceError("build financial report") from exc

        report = build_financial_report(
            period=period,
            orders=orders,
            service_lines=service_lines,
            part_lines=part_lines,
            requests_in_period=requests_in_period,
            services=services,
            parts=parts,
            users=users,
            vehicles=vehicles,
            order_requests=order_requests,
            config=self._config,
            generated_at=self._clock.now(),
        )

        logger.info(
            "financial_report_generated",
            extra={
                "from": period.from_date,
                "to": period.to_date,
                "revenue": report.revenue,
                "completed_orders": report.completed_orders,
                "incoming_requests": report.incoming_requests,
            },
        )
        return report
