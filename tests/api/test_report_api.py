"""
Financial report routes (ADMIN only): JSON report and CSV download.
"""

from decimal import Decimal

import pytest

PERIOD = {"fromDate": "2025-01-01T00:00:00Z", "toDate": "2025-01-31T23:59:59Z"}


@pytest.fixture
def completed_order(work_orders, draft_order, oil_change, oil_filter):
    work_orders.add_service_line(draft_order.id, oil_change.id, quantity=2)
    work_orders.add_part_line(draft_order.id, oil_filter.id)
    return work_orders.update_status(draft_order.id, "COMPLETED")


class TestFinancialReportJson:

    def test_admin_gets_report(self, api, as_admin, completed_order):
        response = api.get("/reports/financial", params=PERIOD, headers=as_admin)

        assert response.status_code == 200
        body = response.json()
        assert Decimal(body["revenue"]) == Decimal("220")
        assert body["completed_orders"] == 1
        assert body["incoming_requests"] == 1
        assert body["services"][0]["name"] == "Oil change"
        assert body["work_orders_detailed"][0]["number"] == "WO-000001"

    @pytest.mark.parametrize("role_fixture", ["as_worker", "as_client"])
    def test_non_admin_forbidden(self, api, request, role_fixture):
        headers = request.getfixturevalue(role_fixture)
        response = api.get("/reports/financial", params=PERIOD, headers=headers)
        assert response.status_code == 403

    def test_reversed_period(self, api, as_admin):
        response = api.get(
            "/reports/financial",
            params={"fromDate": "2025-02-01T00:00:00Z", "toDate": "2025-01-01T00:00:00Z"},
            headers=as_admin,
        )
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_PERIOD"

    def test_missing_bounds(self, api, as_admin):
        response = api.get("/reports/financial", params={"fromDate": PERIOD["fromDate"]},
                           headers=as_admin)
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"
        assert response.json()["error"]["message"].startswith("query.toDate")


class TestFinancialReportCsv:

    def test_download(self, api, as_admin, completed_order):
        response = api.get("/reports/financial/csv", params=PERIOD, headers=as_admin)

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert response.headers["content-disposition"] == (
            'attachment; filename="financial-report-2025-01-01T00-00-00.000Z'
            '-2025-01-31T23-59-59.000Z.csv"'
        )
        assert response.content.startswith(b"\xef\xbb\xbf")
        text = response.content.decode("utf-8-sig")
        assert '"Revenue";"220.00"' in text
        assert '"WO-000001"' in text

    def test_invalid_period_returns_error_body(self, api, as_admin):
        response = api.get("/reports/financial/csv",
                           params={"fromDate": "yesterday", "toDate": "today"},
                           headers=as_admin)
        assert response.status_code == 400
        assert response.headers["content-type"].startswith("application/json")
        assert response.json()["error"]["kind"] == "BAD_REQUEST"
