"""Holiday API schemas."""

import datetime as dt
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from app.application.dtos.holiday import HolidayInput
from app.domain.enums import HolidayType


class HolidayCreateRequest(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    name: str = Field(..., min_length=1, max_length=255)
    date: dt.date
    type: HolidayType = HolidayType.PUBLIC
    description: str | None = None
    is_recurring: bool = False
    applies_to_all: bool = True
    department_ids: list[str] = Field(default_factory=list)

    def to_input(self) -> HolidayInput:
        return HolidayInput(**self.model_dump())


class HolidayBulkCreateRequest(BaseModel):
    holidays: list[HolidayCreateRequest] = Field(..., min_length=1, max_length=500)


class HolidayUpdateRequest(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    name: str | None = Field(default=None, min_length=1, max_length=255)
    date: dt.date | None = None
    type: HolidayType | None = None
    description: str | None = None
    is_recurring: bool | None = None
    applies_to_all: bool | None = None
    department_ids: list[str] | None = None

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class HolidayResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    date: dt.date
    type: str
    description: str | None
    is_recurring: bool
    applies_to_all: bool
    department_ids: list[str]


class IsHolidayResponse(BaseModel):
    date: dt.date
    is_holiday: bool


class OptionalHolidayResponse(BaseModel):
    """An optional holiday with the employee's choice."""

    model_config = ConfigDict(from_attributes=True)

    holiday: HolidayResponse
    opted: bool
    opted_at: dt.datetime | None
    can_opt: bool
    can_cancel: bool


class OptedHolidayResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    employee_id: str
    holiday_id: str
    year: int
    status: str
    opted_at: dt.datetime
    cancelled_at: dt.datetime | None


class OptedHolidaysResponse(BaseModel):
    quota: int
    used: int
    opted: list[OptedHolidayResponse]


class OptInRequest(BaseModel):
    employee_id: str = Field(..., min_length=1)
