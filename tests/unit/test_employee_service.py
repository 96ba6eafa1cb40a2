"""Unit tests for EmployeeService (onboarding, updates, offboarding, reporting chain)."""

from datetime import date
from unittest.mock import AsyncMock

import pytest

from app.application.dtos.employee import OffboardEmployeeInput, OnboardEmployeeInput
from app.application.use_cases.employees.employee_operations import (
    EmployeeService,
    next_employee_code,
)
from app.domain.events import Queue, Topic
from app.domain.exceptions import (
    BusinessRuleException,
    ConflictException,
    ResourceNotFoundException,
    ValidationException,
)
from tests.factories import make_department, make_designation, make_employee, make_role


def _onboard_input(**overrides) -> OnboardEmployeeInput:
    values = {
        "email": "  Grace@Example.com ",
        "first_name": "Grace",
        "last_name": "Hopper",
        "department_id": "dep-1",
        "designation_id": "des-1",
        "joining_date": date(2030, 2, 1),
        "employment_type": "full_time",
        "work_location": "office",
    }
    values.update(overrides)
    return OnboardEmployeeInput(**values)


@pytest.fixture
def repos() -> dict[str, AsyncMock]:
    employee_repo = AsyncMock()
    employee_repo.email_exists.return_value = False
    employee_repo.get_by_code.return_value = None
    employee_repo.get_last_code.return_value = "EMP000041"
    department_repo = AsyncMock()
    department_repo.get_by_id.return_value = make_department()
    designation_repo = AsyncMock()
    designation_repo.get_by_id.return_value = make_designation()
    role_repo = AsyncMock()
    role_repo.get_default.return_value = make_role()
    return {
        "employee": employee_repo,
        "department": department_repo,
        "designation": designation_repo,
        "role": role_repo,
    }


@pytest.fixture
def publisher() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def service(repos: dict[str, AsyncMock], publisher: AsyncMock) -> EmployeeService:
    return EmployeeService(
        repos["employee"],
        repos["department"],
        repos["designation"],
        repos["role"],
        publisher,
    )


class TestNextEmployeeCode:
    def test_first_code(self) -> None:
        assert next_employee_code(None, "EMP", 6) == "EMP000001"

    def test_increments_numeric_suffix(self) -> None:
        assert next_employee_code("EMP000041", "EMP", 6) == "EMP000042"

    def test_non_numeric_suffix_restarts(self) -> None:
        assert next_employee_code("EMPX", "EMP", 4) == "EMP0001"


async def test_onboard_generates_code_and_normalizes_email(
    service: EmployeeService, repos: dict[str, AsyncMock], publisher: AsyncMock
) -> None:
    repos["employee"].create_employee.return_value = make_employee(
        id="emp-42", employee_code="EMP000042"
    )

    result = await service.onboard_employee(_onboard_input(), performed_by="admin")

    assert result.id == "emp-42"
    kwargs = repos["employee"].create_employee.await_args.kwargs
    assert kwargs["email"] == "grace@example.com"
    assert kwargs["employee_code"] == "EMP000042"
    assert kwargs["role_id"] == "role-employee"
    assert kwargs["performed_by"] == "admin"
    topic, event_type, payload = publisher.publish_to_topic.await_args.args
    assert topic == Topic.EMPLOYEE_EVENTS
    assert event_type == "employee.onboarded"
    assert payload["employeeCode"] == "EMP000042"
    assert payload["departmentName"] == "Engineering"


async def test_onboard_rejects_inactive_department(
    service: EmployeeService, repos: dict[str, AsyncMock]
) -> None:
    repos["department"].get_by_id.return_value = make_department(is_active=False)

    with pytest.raises(ValidationException) as exc_info:
        await service.onboard_employee(_onboard_input())

    assert exc_info.value.details["field"] == "department_id"
    repos["employee"].create_employee.assert_not_awaited()


async def test_onboard_rejects_duplicate_email(
    service: EmployeeService, repos: dict[str, AsyncMock]
) -> None:
    repos["employee"].email_exists.return_value = True

    with pytest.raises(ConflictException):
        await service.onboard_employee(_onboard_input())


async def test_onboard_rejects_existing_explicit_code(
    service: EmployeeService, repos: dict[str, AsyncMock]
) -> None:
    repos["employee"].get_by_code.return_value = make_employee()

    with pytest.raises(ConflictException) as exc_info:
        await service.onboard_employee(_onboard_input(employee_code="EMP000001"))

    assert exc_info.value.details["employee_code"] == "EMP000001"


async def test_onboard_requires_code_when_auto_generation_disabled(
    repos: dict[str, AsyncMock],
) -> None:
    service = EmployeeService(
        repos["employee"],
        repos["department"],
        repos["designation"],
        repos["role"],
        auto_generate_code=False,
    )

    with pytest.raises(ValidationException, match="Employee code is required"):
        await service.onboard_employee(_onboard_input())


async def test_onboard_rejects_inactive_manager(
    service: EmployeeService, repos: dict[str, AsyncMock]
) -> None:
    repos["employee"].get_by_id.return_value = make_employee(id="mgr", status="offboarded")

    with pytest.raises(ValidationException) as exc_info:
        await service.onboard_employee(_onboard_input(reporting_to_id="mgr"))

    assert exc_info.value.details["field"] == "reporting_to_id"


async def test_event_bus_failure_does_not_fail_onboarding(
    service: EmployeeService, repos: dict[str, AsyncMock], publisher: AsyncMock
) -> None:
    from app.domain.exceptions import EventBusException

    repos["employee"].create_employee.return_value = make_employee()
    publisher.publish_to_topic.side_effect = EventBusException("down", "oms-employee-events")

    result = await service.onboard_employee(_onboard_input())

    assert result.id == "emp-1"


async def test_get_employee_not_found(
    service: EmployeeService, repos: dict[str, AsyncMock]
) -> None:
    repos["employee"].get_by_id.return_value = None

    with pytest.raises(ResourceNotFoundException):
        await service.get_employee("missing")


async def test_update_rejects_unknown_fields(service: EmployeeService) -> None:
    with pytest.raises(ValidationException, match="email"):
        await service.update_employee("emp-1", {"email": "x@example.com"})


async def test_update_rejects_self_reporting(
    service: EmployeeService, repos: dict[str, AsyncMock]
) -> None:
    repos["employee"].get_by_id.return_value = make_employee()

    with pytest.raises(ValidationException, match="themselves"):
        await service.update_employee("emp-1", {"reporting_to_id": "emp-1"})


async def test_update_department_emits_department_changed(
    service: EmployeeService, repos: dict[str, AsyncMock], publisher: AsyncMock
) -> None:
    repos["employee"].get_by_id.return_value = make_employee()
    repos["employee"].update_employee.return_value = make_employee(department_id="dep-2")

    updated = await service.update_employee(
        "emp-1", {"department_id": "dep-2"}, performed_by="hr"
    )

    assert updated.department_id == "dep-2"
    queue, event_type, payload = publisher.send_to_queue.await_args.args
    assert queue == Queue.EMPLOYEE_DEPARTMENT_CHANGED
    assert event_type == "employee.department_changed"
    assert payload["previousDepartmentId"] == "dep-1"
    assert payload["newDepartmentId"] == "dep-2"


async def test_offboard_refuses_with_direct_reports(
    service: EmployeeService, repos: dict[str, AsyncMock]
) -> None:
    repos["employee"].get_by_id.return_value = make_employee()
    repos["employee"].count_active_direct_reports.return_value = 2

    with pytest.raises(BusinessRuleException) as exc_info:
        await service.offboard_employee(
            "emp-1", OffboardEmployeeInput(date(2030, 5, 31), "resignation")
        )

    assert exc_info.value.details["direct_reports"] == 2
    repos["employee"].offboard_employee.assert_not_awaited()


async def test_offboard_twice_is_rejected(
    service: EmployeeService, repos: dict[str, AsyncMock]
) -> None:
    repos["employee"].get_by_id.return_value = make_employee(status="offboarded")

    with pytest.raises(BusinessRuleException, match="already offboarded"):
        await service.offboard_employee(
            "emp-1", OffboardEmployeeInput(date(2030, 5, 31), "resignation")
        )


async def test_offboard_success(
    service: EmployeeService, repos: dict[str, AsyncMock], publisher: AsyncMock
) -> None:
    repos["employee"].get_by_id.return_value = make_employee()
    repos["employee"].count_active_direct_reports.return_value = 0
    repos["employee"].offboard_employee.return_value = make_employee(status="offboarded")

    result = await service.offboard_employee(
        "emp-1", OffboardEmployeeInput(date(2030, 5, 31), "resignation"), performed_by="hr"
    )

    assert result.status == "offboarded"
    _, event_type, payload = publisher.publish_to_topic.await_args.args
    assert event_type == "employee.offboarded"
    assert payload["lastWorkingDate"] == "2030-05-31"


async def test_reporting_chain_stops_on_cycle(
    service: EmployeeService, repos: dict[str, AsyncMock]
) -> None:
    employees = {
        "a": make_employee(id="a", reporting_to_id="b"),
        "b": make_employee(id="b", reporting_to_id="c"),
        "c": make_employee(id="c", reporting_to_id="a"),
    }
    repos["employee"].get_by_id.side_effect = lambda employee_id: employees.get(employee_id)

    chain = await service.get_reporting_chain("a")

    assert [e.id for e in chain] == ["b", "c"]


async def test_reporting_chain_stops_on_missing_manager(
    service: EmployeeService, repos: dict[str, AsyncMock]
) -> None:
    employees = {"a": make_employee(id="a", reporting_to_id="gone")}
    repos["employee"].get_by_id.side_effect = lambda employee_id: employees.get(employee_id)

    assert await service.get_reporting_chain("a") == []
