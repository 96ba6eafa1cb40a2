"""DTOs for holiday use cases (no dependency on ORM)."""

from dataclasses import dataclass, field
from datetime import date, datetime

from app.domain.enums import HolidayType


@dataclass(frozen=True)
class HolidayResult:
    id: str
    name: str
    date: date
    type: str
    description: str | None
    is_recurring: bool
    applies_to_all: bool
    department_ids: list[str] = field(default_factory=list)

    def applies_to(self, department_id: str | None) -> bool:
        """True when the holiday covers the department (or no department is given)."""
        if department_id is None or self.applies_to_all:
            return True
        return department_id in self.department_ids

    def is_day_off(
        self, department_id: str | None, opted_ids: frozenset[str] = frozenset()
    ) -> bool:
        """Optional holidays are days off only for employees who opted in."""
        if not self.applies_to(department_id):
            return False
        return self.type != HolidayType.OPTIONAL.value or self.id in opted_ids


@dataclass(frozen=True)
class HolidayInput:
    name: str
    date: date
    type: str = "public"
    description: str | None = None
    is_recurring: bool = False
    applies_to_all: bool = True
    department_ids: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class BulkResult:
    created: int
    skipped: int


@dataclass(frozen=True)
class OptedHolidayResult:
    id: str
    employee_id: str
    holiday_id: str
    year: int
    status: str
    opted_at: datetime
    cancelled_at: datetime | None = None


@dataclass(frozen=True)
class OptionalHolidayView:
    """An optional holiday as one employee sees it."""

    holiday: HolidayResult
    opted: bool
    opted_at: datetime | None
    can_opt: bool
    can_cancel: bool
