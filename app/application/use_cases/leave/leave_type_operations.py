"""Leave types and yearly balances."""

from __future__ import annotations

import logging
from dataclasses import replace
from decimal import Decimal
from typing import Any

from app.application.dtos.leave import LeaveBalanceResult, LeaveTypeInput, LeaveTypeResult
from app.application.interfaces.repositories import (
    ILeaveBalanceRepository,
    ILeaveTypeRepository,
)
from app.application.use_cases.employees.organization_operations import normalize_code
from app.domain.exceptions import (
    ConflictException,
    ResourceNotFoundException,
    ValidationException,
)
from app.shared.utils.datetime import utc_now

logger = logging.getLogger(__name__)


class LeaveTypeService:
    """Leave type catalogue plus balance initialization and adjustment."""

    def __init__(
        self,
        type_repo: ILeaveTypeRepository,
        balance_repo: ILeaveBalanceRepository,
        *,
        default_color: str = "#3B82F6",
    ) -> None:
        self.type_repo = type_repo
        self.balance_repo = balance_repo
        self.default_color = default_color

    async def create_leave_type(self, data: LeaveTypeInput) -> LeaveTypeResult:
        code = normalize_code(data.code)
        if data.default_days_per_year < 0:
            raise ValidationException(
                "Default days per year cannot be negative", field="default_days_per_year"
            )
        if await self.type_repo.get_by_code(code):
            raise ConflictException(f"Leave type with code '{code}' already exists", code=code)
        created = await self.type_repo.create_type(
            replace(data, code=code, color=data.color or self.default_color)
        )
        logger.info("Leave type created: %s (%s)", created.id, code)
        return created

    async def list_leave_types(self, include_inactive: bool = False) -> list[LeaveTypeResult]:
        return await self.type_repo.list_types(include_inactive=include_inactive)

    async def get_leave_type(self, leave_type_id: str) -> LeaveTypeResult:
        leave_type = await self.type_repo.get_by_id(leave_type_id)
        if not leave_type:
            raise ResourceNotFoundException("leave_type", leave_type_id)
        return leave_type

    async def update_leave_type(
        self, leave_type_id: str, changes: dict[str, Any]
    ) -> LeaveTypeResult:
        if "code" in changes:
            raise ValidationException("Leave type code cannot be changed", field="code")
        updated = await self.type_repo.update_type(leave_type_id, changes)
        if not updated:
            raise ResourceNotFoundException("leave_type", leave_type_id)
        return updated

    async def initialize_balances(
        self, employee_id: str, year: int
    ) -> list[LeaveBalanceResult]:
        """Ensure a balance per active leave type; existing rows are kept."""
        balances: list[LeaveBalanceResult] = []
        for leave_type in await self.type_repo.list_types(include_inactive=False):
            existing = await self.balance_repo.get_balance(employee_id, leave_type.id, year)
            if existing is None:
                existing = await self.balance_repo.create_balance(
                    employee_id=employee_id,
                    leave_type_id=leave_type.id,
                    year=year,
                    total_days=leave_type.default_days_per_year,
                )
            balances.append(existing)
        logger.debug(
            "Leave balances initialized: %s %d (%d types)", employee_id, year, len(balances)
        )
        return balances

    async def get_balances(
        self, employee_id: str, year: int | None = None
    ) -> list[LeaveBalanceResult]:
        target = year or utc_now().year
        await self.initialize_balances(employee_id, target)
        return await self.balance_repo.list_balances(employee_id, target)

    async def adjust_balance(
        self,
        employee_id: str,
        leave_type_id: str,
        year: int,
        days: Decimal,
        reason: str,
        adjusted_by: str,
    ) -> LeaveBalanceResult:
        """Add (or remove, when negative) days and record why."""
        if days == 0:
            raise ValidationException("Adjustment must not be zero", field="days")
        if not reason.strip():
            raise ValidationException("Adjustment reason is required", field="reason")
        await self.initialize_balances(employee_id, year)
        balance = await self.balance_repo.get_balance(employee_id, leave_type_id, year)
        if balance is None:
            raise ResourceNotFoundException(
                "leave_balance", f"{employee_id}:{leave_type_id}:{year}"
            )
        updated = await self.balance_repo.change_balance(balance.id, adjustment=days)
        await self.balance_repo.add_adjustment(
            balance.id, days=days, reason=reason, adjusted_by=adjusted_by
        )
        logger.info(
            "Leave balance adjusted: %s %s %+.1f (%s)",
            employee_id,
            leave_type_id,
            days,
            reason,
        )
        return updated
