"""Financial report routes (ADMIN only)."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response

from workshop_api.dependencies import ReportingServiceDep, admin_only
from workshop_modules.reporting import render_financial_report_csv, render_to_dict, report_filename
from workshop_modules.reporting.export import CSV_MEDIA_TYPE

router = APIRouter(prefix="/reports", tags=["reports"], dependencies=[Depends(admin_only)])

FromDate = Annotated[str, Query(alias="fromDate")]
ToDate = Annotated[str, Query(alias="toDate")]


@router.get("/financial")
def financial_report(from_date: FromDate, to_date: ToDate, service: ReportingServiceDep) -> dict:
    return render_to_dict(service.get_financial_report(from_date, to_date))


@router.get("/financial/csv")
def financial_report_csv(
    from_date: FromDate, to_date: ToDate, service: ReportingServiceDep
) -> Response:
    # Rendered in full before the response starts; a failure never yields a partial file.
    report = service.get_financial_report(from_date, to_date)
    content = render_financial_report_csv(report, service.config)
    return Response(
        content=content,
        media_type=CSV_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{report_filename(report)}"'},
    )
