"""Health endpoints, request ids and tenant resolution by the middleware."""

from httpx import AsyncClient

from app.api.v1.dependencies import get_employee_service
from tests.conftest import TENANT_HEADERS
from tests.factories import make_employee


async def test_liveness(client: AsyncClient) -> None:
    response = await client.get("/api/v1/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


async def test_request_id_is_echoed(client: AsyncClient) -> None:
    response = await client.get("/api/v1/health", headers={"X-Request-ID": "abc-123"})

    assert response.headers["X-Request-ID"] == "abc-123"


async def test_unsafe_request_id_is_replaced(client: AsyncClient) -> None:
    response = await client.get("/api/v1/health", headers={"X-Request-ID": "bad id; drop"})

    assert response.headers["X-Request-ID"] != "bad id; drop"
    assert len(response.headers["X-Request-ID"]) == 36


async def test_missing_tenant_header(client: AsyncClient) -> None:
    response = await client.get("/api/v1/employees")

    assert response.status_code == 400
    assert response.json()["error"] == "TENANT_REQUIRED"


async def test_unknown_tenant(client: AsyncClient) -> None:
    response = await client.get("/api/v1/employees", headers={"X-Tenant-Slug": "ghost"})

    assert response.status_code == 404
    assert response.json()["error"] == "TENANT_NOT_FOUND"


async def test_suspended_tenant_is_refused(client: AsyncClient) -> None:
    response = await client.get("/api/v1/employees", headers={"X-Tenant-Slug": "frozen"})

    assert response.status_code == 403
    assert response.json()["error"] == "TENANT_SUSPENDED"


async def test_tenant_slug_is_case_insensitive(client: AsyncClient, override) -> None:
    svc = override(get_employee_service)
    svc.get_employee.return_value = make_employee()

    response = await client.get("/api/v1/employees/emp-1", headers={"X-Tenant-Slug": " ACME "})

    assert response.status_code == 200
    assert response.json()["employee_code"] == "EMP000001"


async def test_tenant_routes_pass_caller_id(client: AsyncClient, override) -> None:
    svc = override(get_employee_service)
    svc.offboard_employee.return_value = make_employee(status="terminated")

    response = await client.post(
        "/api/v1/employees/emp-1/offboard",
        json={"last_working_date": "2030-06-30", "reason": "resignation"},
        headers=TENANT_HEADERS,
    )

    assert response.status_code == 200
    assert svc.offboard_employee.await_args.kwargs["performed_by"] == "user-hr"
