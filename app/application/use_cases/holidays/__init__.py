"""Holiday use cases."""

from app.application.use_cases.holidays.holiday_operations import HolidayService
from app.application.use_cases.holidays.optional_holiday_operations import (
    OptionalHolidayService,
    opted_holiday_ids,
)

__all__ = ["HolidayService", "OptionalHolidayService", "opted_holiday_ids"]
