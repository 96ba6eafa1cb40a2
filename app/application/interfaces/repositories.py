"""Repository interfaces (ports) for the application layer.

Protocols define contracts that infrastructure implementations must fulfill (DIP).
All types reference application DTOs only; no infrastructure imports.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Protocol

from app.domain.enums import TenantStatus

if TYPE_CHECKING:
    from app.application.dtos.attendance import (
        AttendanceFilters,
        AttendanceResult,
        BreakResult,
    )
    from app.application.dtos.billing import InvoiceResult, PaymentResult, UsageRecordResult
    from app.application.dtos.common import Page
    from app.application.dtos.employee import (
        DepartmentResult,
        DesignationResult,
        EmployeeFilters,
        EmployeeResult,
        EmployeeStats,
        OffboardEmployeeInput,
        OnboardEmployeeInput,
        RoleResult,
    )
    from app.application.dtos.holiday import HolidayInput, HolidayResult, OptedHolidayResult
    from app.application.dtos.leave import (
        LeaveBalanceResult,
        LeaveRequestFilters,
        LeaveRequestInput,
        LeaveRequestResult,
        LeaveTypeInput,
        LeaveTypeResult,
    )
    from app.application.dtos.tenant import TenantInfo


# Master database


class ITenantRepository(Protocol):
    """Protocol for the tenant registry (master database)."""

    async def get_by_id(self, tenant_id: str) -> TenantInfo | None:
        """Return tenant by ID."""

    async def get_by_slug(self, slug: str) -> TenantInfo | None:
        """Return tenant by slug."""

    async def create_tenant(
        self,
        slug: str,
        name: str,
        database_name: str,
        status: TenantStatus = TenantStatus.TRIAL,
        plan: str = "starter",
        database_host: str | None = None,
        database_port: int | None = None,
    ) -> TenantInfo:
        """Register a tenant. Duplicate slug raises ConflictException."""

    async def update_status(self, tenant_id: str, status: TenantStatus) -> TenantInfo | None:
        """Set tenant status; None when the tenant does not exist."""

    async def update_plan(self, tenant_id: str, plan: str) -> TenantInfo | None: ...

    async def list_tenants(
        self, status: TenantStatus | None = None, skip: int = 0, limit: int = 100
    ) -> list[TenantInfo]:
        """List tenants, optionally by status."""


class IInvoiceRepository(Protocol):
    """Protocol for invoices and payments (master database)."""

    async def get_by_id(self, invoice_id: str) -> InvoiceResult | None: ...

    async def get_by_number(self, invoice_number: str) -> InvoiceResult | None: ...

    async def get_last_number(self, prefix: str) -> str | None:
        """Highest invoice number starting with prefix."""

    async def create_invoice(self, **fields: Any) -> InvoiceResult: ...

    async def update_invoice(
        self, invoice_id: str, changes: dict[str, Any]
    ) -> InvoiceResult | None: ...

    async def list_for_tenant(
        self, tenant_id: str, status: str | None = None, page: int = 1, page_size: int = 20
    ) -> Page[InvoiceResult]:
        """Tenant invoices, newest first."""

    async def list_overdue(self, now: datetime) -> list[InvoiceResult]:
        """SENT invoices with due_date before now."""

    async def create_payment(self, **fields: Any) -> PaymentResult: ...

    async def list_payments(self, invoice_id: str) -> list[PaymentResult]: ...


class IUsageRepository(Protocol):
    """Protocol for monthly usage rows (master database)."""

    async def add_quantity(
        self,
        tenant_id: str,
        metric_id: str,
        period_start: date,
        period_end: date,
        quantity: int,
        unit_price: Decimal,
    ) -> UsageRecordResult:
        """Add quantity to the month's row, creating it when missing."""

    async def set_quantity(
        self,
        tenant_id: str,
        metric_id: str,
        period_start: date,
        period_end: date,
        quantity: int,
        unit_price: Decimal,
    ) -> UsageRecordResult:
        """Replace the month's quantity (gauges such as head count)."""

    async def list_for_period(
        self, tenant_id: str, period_start: date, period_end: date
    ) -> list[UsageRecordResult]:
        """Rows whose month lies within [period_start, period_end]."""

    async def mark_invoiced(
        self, tenant_id: str, period_start: date, invoice_id: str, invoiced_at: datetime
    ) -> int:
        """Flag the month's uninvoiced rows; returns how many changed."""


# Tenant databases


class IRoleRepository(Protocol):
    async def get_by_id(self, role_id: str) -> RoleResult | None: ...

    async def get_default(self) -> RoleResult | None:
        """Role flagged is_default (assigned when onboarding without a role)."""


class IDepartmentRepository(Protocol):
    async def get_by_id(self, department_id: str) -> DepartmentResult | None: ...

    async def get_by_code(self, code: str) -> DepartmentResult | None: ...

    async def create_department(
        self,
        code: str,
        name: str,
        description: str | None = None,
        parent_id: str | None = None,
        head_id: str | None = None,
        performed_by: str | None = None,
    ) -> DepartmentResult: ...

    async def list_departments(self, include_inactive: bool = False) -> list[DepartmentResult]: ...

    async def update_department(
        self, department_id: str, changes: dict[str, Any], performed_by: str | None = None
    ) -> DepartmentResult | None: ...


class IDesignationRepository(Protocol):
    async def get_by_id(self, designation_id: str) -> DesignationResult | None: ...

    async def get_by_code(self, code: str) -> DesignationResult | None: ...

    async def create_designation(
        self,
        code: str,
        name: str,
        level: int = 1,
        description: str | None = None,
        performed_by: str | None = None,
    ) -> DesignationResult: ...

    async def list_designations(
        self, include_inactive: bool = False
    ) -> list[DesignationResult]: ...

    async def update_designation(
        self, designation_id: str, changes: dict[str, Any], performed_by: str | None = None
    ) -> DesignationResult | None: ...


class IEmployeeRepository(Protocol):
    """Protocol for employees (joined with their user for names and email)."""

    async def get_by_id(self, employee_id: str) -> EmployeeResult | None: ...

    async def get_by_user_id(self, user_id: str) -> EmployeeResult | None: ...

    async def get_by_code(self, employee_code: str) -> EmployeeResult | None: ...

    async def get_last_code(self, prefix: str) -> str | None:
        """Highest generated code: prefix followed only by digits."""

    async def email_exists(self, email: str) -> bool: ...

    async def create_employee(
        self,
        data: OnboardEmployeeInput,
        email: str,
        employee_code: str,
        role_id: str,
        performed_by: str | None = None,
    ) -> EmployeeResult:
        """Create the user and the employee in the current transaction."""

    async def list_employees(
        self, filters: EmployeeFilters, page: int = 1, page_size: int = 20
    ) -> Page[EmployeeResult]: ...

    async def update_employee(
        self, employee_id: str, changes: dict[str, Any], performed_by: str | None = None
    ) -> EmployeeResult | None: ...

    async def offboard_employee(
        self,
        employee_id: str,
        data: OffboardEmployeeInput,
        performed_by: str | None,
        offboarded_at: datetime,
    ) -> EmployeeResult:
        """Mark offboarded and deactivate the linked user."""

    async def count_active_direct_reports(self, employee_id: str) -> int: ...

    async def count_active_in_department(self, department_id: str) -> int: ...

    async def get_direct_reports(self, employee_id: str) -> list[EmployeeResult]: ...

    async def get_stats(self, recent_since: date) -> EmployeeStats: ...


class IAttendanceRepository(Protocol):
    async def get_by_id(self, attendance_id: str) -> AttendanceResult | None: ...

    async def get_for_day(self, employee_id: str, day: date) -> AttendanceResult | None: ...

    async def create_attendance(self, **fields: Any) -> AttendanceResult: ...

    async def update_attendance(
        self, attendance_id: str, changes: dict[str, Any]
    ) -> AttendanceResult: ...

    async def list_attendance(
        self, filters: AttendanceFilters, page: int = 1, page_size: int = 20
    ) -> Page[AttendanceResult]: ...

    async def list_for_employee_range(
        self, employee_id: str, start: date, end: date
    ) -> list[AttendanceResult]: ...

    async def list_for_department_day(
        self, department_id: str, day: date
    ) -> list[AttendanceResult]: ...

    async def get_break(self, break_id: str) -> BreakResult | None: ...

    async def get_active_break(self, attendance_id: str) -> BreakResult | None: ...

    async def list_breaks(self, attendance_id: str) -> list[BreakResult]: ...

    async def start_break(
        self, attendance_id: str, break_type: str, start_time: datetime
    ) -> BreakResult: ...

    async def end_break(
        self, break_id: str, end_time: datetime, duration_minutes: int
    ) -> BreakResult: ...

    async def completed_break_minutes(self, attendance_id: str) -> int:
        """Sum of durations of ended breaks."""

    async def upsert_leave_day(
        self,
        employee_id: str,
        day: date,
        leave_request_id: str,
        performed_by: str | None = None,
    ) -> None:
        """Create or overwrite the day as on_leave for the request."""

    async def delete_for_leave(self, leave_request_id: str) -> int:
        """Delete attendance rows created for a leave request; return count."""


class ILeaveTypeRepository(Protocol):
    async def get_by_id(self, leave_type_id: str) -> LeaveTypeResult | None: ...

    async def get_by_code(self, code: str) -> LeaveTypeResult | None: ...

    async def create_type(self, data: LeaveTypeInput) -> LeaveTypeResult: ...

    async def list_types(self, include_inactive: bool = False) -> list[LeaveTypeResult]: ...

    async def update_type(
        self, leave_type_id: str, changes: dict[str, Any]
    ) -> LeaveTypeResult | None: ...


class ILeaveBalanceRepository(Protocol):
    async def get_balance(
        self, employee_id: str, leave_type_id: str, year: int
    ) -> LeaveBalanceResult | None: ...

    async def list_balances(self, employee_id: str, year: int) -> list[LeaveBalanceResult]: ...

    async def create_balance(
        self, employee_id: str, leave_type_id: str, year: int, total_days: Decimal
    ) -> LeaveBalanceResult: ...

    async def change_balance(
        self,
        balance_id: str,
        *,
        pending: Decimal = Decimal("0"),
        used: Decimal = Decimal("0"),
        adjustment: Decimal = Decimal("0"),
    ) -> LeaveBalanceResult:
        """Increment (or decrement, with negative values) balance counters."""

    async def add_adjustment(
        self, balance_id: str, days: Decimal, reason: str, adjusted_by: str
    ) -> None: ...


class ILeaveRequestRepository(Protocol):
    async def get_by_id(self, request_id: str) -> LeaveRequestResult | None: ...

    async def create_request(
        self,
        data: LeaveRequestInput,
        days: Decimal,
        status: str,
        approver_id: str | None = None,
        performed_by: str | None = None,
    ) -> LeaveRequestResult: ...

    async def update_request(
        self, request_id: str, changes: dict[str, Any]
    ) -> LeaveRequestResult: ...

    async def find_overlapping(
        self, employee_id: str, from_date: date, to_date: date
    ) -> LeaveRequestResult | None:
        """A pending or approved request intersecting [from_date, to_date]."""

    async def list_requests(
        self, filters: LeaveRequestFilters, page: int = 1, page_size: int = 20
    ) -> Page[LeaveRequestResult]: ...

    async def list_pending_for_employees(
        self, employee_ids: list[str]
    ) -> list[LeaveRequestResult]: ...

    async def approved_in_range(
        self, employee_id: str, start: date, end: date
    ) -> list[LeaveRequestResult]:
        """Approved requests intersecting [start, end]."""


class IHolidayRepository(Protocol):
    async def get_by_id(self, holiday_id: str) -> HolidayResult | None: ...

    async def find_by_name_and_date(self, name: str, day: date) -> HolidayResult | None: ...

    async def create_holiday(
        self, data: HolidayInput, performed_by: str | None = None
    ) -> HolidayResult: ...

    async def update_holiday(
        self, holiday_id: str, changes: dict[str, Any], performed_by: str | None = None
    ) -> HolidayResult | None: ...

    async def delete_holiday(self, holiday_id: str) -> bool: ...

    async def list_holidays(
        self, year: int | None = None, holiday_type: str | None = None
    ) -> list[HolidayResult]: ...

    async def list_in_range(self, start: date, end: date) -> list[HolidayResult]:
        """Holidays in [start, end], ordered by date."""


class IOptionalHolidayRepository(Protocol):
    async def find(self, employee_id: str, holiday_id: str) -> OptedHolidayResult | None:
        """The employee's row for the holiday in any status."""

    async def list_opted(self, employee_id: str, year: int) -> list[OptedHolidayResult]:
        """OPTED rows for the year, most recent opt-in first."""

    async def count_opted(self, employee_id: str, year: int) -> int: ...

    async def create_opt_in(
        self, employee_id: str, holiday_id: str, year: int, opted_at: datetime
    ) -> OptedHolidayResult: ...

    async def update_opt_in(
        self, opt_in_id: str, changes: dict[str, Any]
    ) -> OptedHolidayResult | None: ...
