"""
Work order routes: role gate, status codes, error bodies, and payload shape.
"""

from decimal import Decimal
from uuid import uuid4

import pytest


def _create(api, headers, request_id, **extra):
    return api.post("/work-orders", json={"requestId": str(request_id), **extra}, headers=headers)


class TestRoleGate:

    def test_client_cannot_create(self, api, as_client, service_request):
        response = _create(api, as_client, service_request.id)
        assert response.status_code == 403
        assert response.json()["error"]["code"] == "ROLE_NOT_PERMITTED"
        assert response.json()["error"]["kind"] == "FORBIDDEN"

    def test_missing_role_forbidden(self, api):
        response = api.get("/work-orders")
        assert response.status_code == 403

    def test_malformed_actor_id_forbidden(self, api):
        response = api.get("/work-orders",
                           headers={"X-Actor-Id": "not-a-uuid", "X-Actor-Role": "ADMIN"})
        assert response.status_code == 403

    def test_role_header_is_case_insensitive(self, api, worker):
        response = api.get("/work-orders",
                           headers={"X-Actor-Id": str(worker.id), "X-Actor-Role": "worker"})
        assert response.status_code == 200


class TestCreate:

    def test_create_returns_201_and_view(self, api, as_worker, service_request):
        response = _create(api, as_worker, service_request.id)

        assert response.status_code == 201
        body = response.json()
        assert body["number"] == "WO-000001"
        assert body["status"] == "DRAFT"
        assert body["request_id"] == str(service_request.id)
        assert body["planned_date"] == "2025-01-10T09:00:00+00:00"
        assert Decimal(body["total_cost"]) == Decimal("0")
        assert body["services"] == []

    def test_snake_case_body_accepted(self, api, as_admin, service_request):
        response = api.post("/work-orders", json={"request_id": str(service_request.id)},
                            headers=as_admin)
        assert response.status_code == 201

    def test_explicit_null_planned_date(self, api, as_admin, service_request):
        response = _create(api, as_admin, service_request.id, plannedDate=None)
        assert response.json()["planned_date"] is None

    def test_duplicate_is_bad_request(self, api, as_admin, service_request):
        _create(api, as_admin, service_request.id)
        response = _create(api, as_admin, service_request.id)

        assert response.status_code == 400
        assert response.json() == {
            "error": {
                "code": "DUPLICATE_WORK_ORDER",
                "kind": "BAD_REQUEST",
                "message": "Work order already exists for this request",
            }
        }

    def test_unknown_request_is_not_found(self, api, as_admin):
        response = _create(api, as_admin, uuid4())
        assert response.status_code == 404
        assert response.json()["error"]["message"] == "Service request not found"

    def test_invalid_uuid_is_validation_error(self, api, as_admin):
        response = api.post("/work-orders", json={"requestId": "nope"}, headers=as_admin)

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "VALIDATION_ERROR"
        assert error["message"].startswith("requestId")

    def test_unknown_field_rejected(self, api, as_admin, service_request):
        response = _create(api, as_admin, service_request.id, priority="high")
        assert response.status_code == 400


class TestLines:

    def test_add_and_remove_lines(self, api, as_admin, draft_order, oil_change, diagnostics,
                                  oil_filter):
        url = f"/work-orders/{draft_order.id}"
        api.post(f"{url}/services", json={"serviceId": str(oil_change.id)}, headers=as_admin)
        api.post(f"{url}/services", json={"serviceId": str(diagnostics.id), "quantity": 3},
                 headers=as_admin)
        response = api.post(f"{url}/parts", json={"partId": str(oil_filter.id)},
                            headers=as_admin)

        assert response.status_code == 201
        body = response.json()
        assert Decimal(body["total_labor_cost"]) == Decimal("250")
        assert Decimal(body["total_parts_cost"]) == Decimal("20")
        assert Decimal(body["total_cost"]) == Decimal("270")

        part_row = body["parts"][0]["id"]
        response = api.delete(f"{url}/parts/{part_row}", headers=as_admin)
        assert response.status_code == 200
        assert Decimal(response.json()["total_cost"]) == Decimal("250")

    def test_zero_quantity_rejected(self, api, as_admin, draft_order, oil_change):
        response = api.post(f"/work-orders/{draft_order.id}/services",
                            json={"serviceId": str(oil_change.id), "quantity": 0},
                            headers=as_admin)
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    def test_inactive_service_not_found(self, api, as_admin, draft_order, make_service):
        retired = make_service("Retired", "5.00", is_active=False)
        response = api.post(f"/work-orders/{draft_order.id}/services",
                            json={"serviceId": str(retired.id)}, headers=as_admin)
        assert response.status_code == 404
        assert response.json()["error"]["message"] == "Service not found"

    def test_unknown_line(self, api, as_admin, draft_order):
        response = api.delete(f"/work-orders/{draft_order.id}/services/{uuid4()}",
                              headers=as_admin)
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "LINE_NOT_FOUND"


class TestStatusAndUpdate:

    def test_status_change(self, api, as_admin, draft_order):
        response = api.patch(f"/work-orders/{draft_order.id}/status",
                             json={"status": "COMPLETED"}, headers=as_admin)

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "COMPLETED"
        assert body["completed_date"] == "2025-01-01T12:00:00+00:00"

    def test_unknown_status_value(self, api, as_admin, draft_order):
        response = api.patch(f"/work-orders/{draft_order.id}/status",
                             json={"status": "ARCHIVED"}, headers=as_admin)
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    def test_closed_order_not_editable(self, api, as_admin, draft_order, oil_change):
        api.patch(f"/work-orders/{draft_order.id}/status", json={"status": "CANCELLED"},
                  headers=as_admin)
        response = api.post(f"/work-orders/{draft_order.id}/services",
                            json={"serviceId": str(oil_change.id)}, headers=as_admin)
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "WORK_ORDER_NOT_EDITABLE"

    def test_bulk_update(self, api, as_admin, draft_order, worker, oil_change, oil_filter):
        response = api.patch(
            f"/work-orders/{draft_order.id}",
            json={
                "responsibleWorkerId": str(worker.id),
                "plannedDate": None,
                "services": [{"serviceId": str(oil_change.id), "quantity": 2}],
                "parts": [{"partId": str(oil_filter.id), "quantity": 3}],
            },
            headers=as_admin,
        )

        assert response.status_code == 200
        body = response.json()
        assert body["responsible_worker_id"] == str(worker.id)
        assert body["planned_date"] is None
        assert Decimal(body["total_cost"]) == Decimal("260")

    def test_empty_bulk_update(self, api, as_admin, draft_order):
        response = api.patch(f"/work-orders/{draft_order.id}", json={}, headers=as_admin)
        assert response.status_code == 400
        assert response.json()["error"]["message"] == "No fields to update"


class TestQueriesAndDelete:

    def test_get_unknown(self, api, as_admin):
        response = api.get(f"/work-orders/{uuid4()}", headers=as_admin)
        assert response.status_code == 404
        assert response.json()["error"]["kind"] == "NOT_FOUND"

    def test_list_with_filters(self, api, as_worker, draft_order, client_user):
        response = api.get("/work-orders", params={"status": "DRAFT"}, headers=as_worker)
        assert [o["id"] for o in response.json()] == [str(draft_order.id)]

        response = api.get("/work-orders", params={"clientId": str(uuid4())}, headers=as_worker)
        assert response.json() == []

        response = api.get("/work-orders", params={"clientId": str(client_user.id)},
                           headers=as_worker)
        assert len(response.json()) == 1

    def test_my_work_orders(self, api, as_client, draft_order, make_user):
        response = api.get("/work-orders/my", headers=as_client)
        assert response.status_code == 200
        assert [o["number"] for o in response.json()] == ["WO-000001"]

        stranger = make_user()
        response = api.get("/work-orders/my",
                           headers={"X-Actor-Id": str(stranger.id), "X-Actor-Role": "CLIENT"})
        assert response.json() == []

    def test_my_work_orders_requires_identity(self, api):
        response = api.get("/work-orders/my", headers={"X-Actor-Role": "CLIENT"})
        assert response.status_code == 403

    def test_delete(self, api, as_admin, draft_order):
        response = api.delete(f"/work-orders/{draft_order.id}", headers=as_admin)
        assert response.status_code == 204
        assert api.get(f"/work-orders/{draft_order.id}", headers=as_admin).status_code == 404

    @pytest.mark.parametrize("status", ["COMPLETED", "CANCELLED"])
    def test_closed_order_cannot_be_deleted(self, api, as_admin, draft_order, status):
        api.patch(f"/work-orders/{draft_order.id}/status", json={"status": status},
                  headers=as_admin)
        response = api.delete(f"/work-orders/{draft_order.id}", headers=as_admin)
        assert response.status_code == 400


class TestRequestContext:

    def test_request_id_echoed(self, api, as_admin):
        response = api.get("/work-orders", headers={**as_admin, "X-Request-Id": "trace-123"})
        assert response.headers["X-Request-Id"] == "trace-123"

    def test_request_id_generated(self, api, as_admin):
        response = api.get("/work-orders", headers=as_admin)
        assert response.headers["X-Request-Id"]
