"""Tenant-scoped HR routes with their services replaced by mocks."""

from datetime import UTC, date, datetime
from decimal import Decimal

from httpx import AsyncClient

from app.api.v1.dependencies import (
    get_attendance_service,
    get_employee_service,
    get_holiday_service,
    get_leave_service,
    get_optional_holiday_service,
)
from app.application.dtos.holiday import OptionalHolidayView
from app.domain.exceptions import (
    BusinessRuleException,
    ConflictException,
    ResourceNotFoundException,
)
from tests.conftest import TENANT_HEADERS
from tests.factories import (
    make_attendance,
    make_employee,
    make_holiday,
    make_leave_request,
    make_opt_in,
)

ONBOARD_BODY = {
    "email": "Ada@Example.com",
    "first_name": "Ada",
    "last_name": "Lovelace",
    "department_id": "dep-1",
    "designation_id": "des-1",
    "joining_date": "2030-01-15",
}


async def test_onboard_employee(client: AsyncClient, override) -> None:
    svc = override(get_employee_service)
    svc.onboard_employee.return_value = make_employee()

    response = await client.post("/api/v1/employees", json=ONBOARD_BODY, headers=TENANT_HEADERS)

    assert response.status_code == 201
    assert response.json()["full_name"] == "Ada Lovelace"
    data = svc.onboard_employee.await_args.args[0]
    assert data.employment_type == "full_time"
    assert data.joining_date == date(2030, 1, 15)


async def test_onboard_rejects_invalid_email(client: AsyncClient, override) -> None:
    override(get_employee_service)

    response = await client.post(
        "/api/v1/employees", json=ONBOARD_BODY | {"email": "nope"}, headers=TENANT_HEADERS
    )

    assert response.status_code == 422


async def test_employee_not_found(client: AsyncClient, override) -> None:
    svc = override(get_employee_service)
    svc.get_employee.side_effect = ResourceNotFoundException("Employee", "missing")

    response = await client.get("/api/v1/employees/missing", headers=TENANT_HEADERS)

    assert response.status_code == 404
    assert response.json()["error"] == "RESOURCE_NOT_FOUND"


async def test_check_in(client: AsyncClient, override) -> None:
    svc = override(get_attendance_service)
    svc.check_in.return_value = make_attendance()

    response = await client.post(
        "/api/v1/attendance/check-in",
        json={"employee_id": "emp-1", "work_mode": "remote"},
        headers=TENANT_HEADERS,
    )

    assert response.status_code == 201
    assert response.json()["status"] == "present"
    svc.check_in.assert_awaited_once_with("emp-1", location=None, work_mode="remote", notes=None)


async def test_check_in_twice(client: AsyncClient, override) -> None:
    svc = override(get_attendance_service)
    svc.check_in.side_effect = ConflictException("Already checked in today")

    response = await client.post(
        "/api/v1/attendance/check-in", json={"employee_id": "emp-1"}, headers=TENANT_HEADERS
    )

    assert response.status_code == 409


async def test_check_out_reports_hours(client: AsyncClient, override) -> None:
    svc = override(get_attendance_service)
    svc.check_out.return_value = make_attendance(
        check_out=datetime(2030, 3, 4, 19, tzinfo=UTC), work_minutes=630, overtime_minutes=150
    )

    response = await client.post(
        "/api/v1/attendance/check-out", json={"employee_id": "emp-1"}, headers=TENANT_HEADERS
    )

    assert response.status_code == 200
    body = response.json()
    assert body["work_hours"] == 10.5
    assert body["overtime_hours"] == 2.5


async def test_request_leave(client: AsyncClient, override) -> None:
    svc = override(get_leave_service)
    svc.request_leave.return_value = make_leave_request()

    response = await client.post(
        "/api/v1/leave/requests",
        json={
            "employee_id": "emp-1",
            "leave_type_id": "lt-annual",
            "from_date": "2030-03-04",
            "to_date": "2030-03-06",
        },
        headers=TENANT_HEADERS,
    )

    assert response.status_code == 201
    assert Decimal(response.json()["days"]) == Decimal("3")
    assert svc.request_leave.await_args.kwargs["performed_by"] == "user-hr"


async def test_request_leave_rejects_bad_half_day_period(client: AsyncClient, override) -> None:
    override(get_leave_service)

    response = await client.post(
        "/api/v1/leave/requests",
        json={
            "employee_id": "emp-1",
            "leave_type_id": "lt-annual",
            "from_date": "2030-03-04",
            "to_date": "2030-03-04",
            "is_half_day": True,
            "half_day_period": "evening",
        },
        headers=TENANT_HEADERS,
    )

    assert response.status_code == 422


async def test_list_holidays_for_year(client: AsyncClient, override) -> None:
    svc = override(get_holiday_service)
    svc.list_holidays.return_value = [make_holiday()]

    response = await client.get("/api/v1/holidays?year=2030", headers=TENANT_HEADERS)

    assert response.status_code == 200
    assert [h["name"] for h in response.json()] == ["New Year"]


async def test_list_optional_holidays(client: AsyncClient, override) -> None:
    svc = override(get_optional_holiday_service)
    svc.list_optional_holidays.return_value = [
        OptionalHolidayView(
            holiday=make_holiday(type="optional"),
            opted=False,
            opted_at=None,
            can_opt=True,
            can_cancel=False,
        )
    ]

    response = await client.get(
        "/api/v1/holidays/optional?employee_id=emp-1&year=2030", headers=TENANT_HEADERS
    )

    assert response.status_code == 200
    (view,) = response.json()
    assert view["holiday"]["type"] == "optional"
    assert view["can_opt"] is True
    svc.list_optional_holidays.assert_awaited_once_with("emp-1", 2030)


async def test_opted_holidays_report_quota(client: AsyncClient, override) -> None:
    svc = override(get_optional_holiday_service)
    svc.quota = 2
    svc.get_opted_holidays.return_value = [make_opt_in()]

    response = await client.get(
        "/api/v1/holidays/optional/opted?employee_id=emp-1", headers=TENANT_HEADERS
    )

    assert response.status_code == 200
    body = response.json()
    assert (body["quota"], body["used"]) == (2, 1)


async def test_opt_in(client: AsyncClient, override) -> None:
    svc = override(get_optional_holiday_service)
    svc.opt_in.return_value = make_opt_in()

    response = await client.post(
        "/api/v1/holidays/hol-1/opt-in", json={"employee_id": "emp-1"}, headers=TENANT_HEADERS
    )

    assert response.status_code == 201
    assert response.json()["status"] == "OPTED"
    svc.opt_in.assert_awaited_once_with("emp-1", "hol-1")


async def test_opt_in_over_quota(client: AsyncClient, override) -> None:
    svc = override(get_optional_holiday_service)
    svc.opt_in.side_effect = BusinessRuleException("All 2 optional holidays for 2030 are used")

    response = await client.post(
        "/api/v1/holidays/hol-1/opt-in", json={"employee_id": "emp-1"}, headers=TENANT_HEADERS
    )

    assert response.status_code == 422
    assert response.json()["error"] == "BUSINESS_RULE_VIOLATION"


async def test_cancel_opt_in(client: AsyncClient, override) -> None:
    svc = override(get_optional_holiday_service)
    svc.cancel_opt_in.return_value = make_opt_in(status="CANCELLED")

    response = await client.delete(
        "/api/v1/holidays/hol-1/opt-in?employee_id=emp-1", headers=TENANT_HEADERS
    )

    assert response.status_code == 200
    assert response.json()["status"] == "CANCELLED"
    svc.cancel_opt_in.assert_awaited_once_with("emp-1", "hol-1")
