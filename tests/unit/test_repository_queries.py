"""Repository statements checked against a mocked AsyncSession."""

from datetime import UTC, date, datetime
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

from sqlalchemy.dialects import postgresql

from app.infrastructure.persistence.models.attendance import Attendance
from app.infrastructure.persistence.models.usage import UsageRecord
from app.infrastructure.persistence.repositories import (
    AttendanceRepository,
    EmployeeRepository,
    UsageRepository,
)


def _session() -> MagicMock:
    db = MagicMock()
    db.execute = AsyncMock(return_value=MagicMock())
    db.flush = AsyncMock()
    return db


def _compiled(db: MagicMock):
    statement = db.execute.await_args.args[0]
    return statement.compile(dialect=postgresql.dialect())


async def test_leave_cleanup_keeps_worked_days() -> None:
    db = _session()
    db.execute.return_value.rowcount = 2

    removed = await AttendanceRepository(db).delete_for_leave("lr-1")

    sql = str(_compiled(db))
    assert removed == 2
    assert "attendance.leave_request_id" in sql
    assert "attendance.check_in IS NULL" in sql


async def test_leave_day_does_not_overwrite_check_in() -> None:
    db = _session()
    worked = Attendance(
        employee_id="emp-1",
        date=date(2030, 3, 4),
        status="present",
        check_in=datetime(2030, 3, 4, 9, tzinfo=UTC),
    )
    db.execute.return_value.scalar_one_or_none.return_value = worked

    await AttendanceRepository(db).upsert_leave_day("emp-1", date(2030, 3, 4), "lr-1")

    assert worked.status == "present"
    assert worked.leave_request_id is None
    db.add.assert_not_called()
    db.flush.assert_not_awaited()


async def test_leave_day_marks_empty_row_on_leave() -> None:
    db = _session()
    holiday_row = Attendance(employee_id="emp-1", date=date(2030, 3, 4), status="holiday")
    db.execute.return_value.scalar_one_or_none.return_value = holiday_row

    await AttendanceRepository(db).upsert_leave_day("emp-1", date(2030, 3, 4), "lr-1", "hr")

    assert (holiday_row.status, holiday_row.leave_request_id) == ("on_leave", "lr-1")
    db.flush.assert_awaited_once()


async def test_last_code_only_considers_generated_codes() -> None:
    db = _session()
    db.execute.return_value.scalar_one_or_none.return_value = "EMP000041"

    assert await EmployeeRepository(db).get_last_code("EMP") == "EMP000041"

    compiled = _compiled(db)
    assert "employee.employee_code ~" in str(compiled)
    assert "^EMP[0-9]+$" in compiled.params.values()


async def test_usage_accumulates_into_locked_month_row() -> None:
    db = _session()
    row = UsageRecord(
        tenant_id="tnt-1",
        metric_id="api_calls",
        quantity=100,
        period_start=date(2030, 3, 1),
        period_end=date(2030, 3, 31),
        unit_price=Decimal("0.001"),
        invoiced=False,
    )
    db.execute.return_value.scalar_one_or_none.return_value = row
    repo = UsageRepository(db)

    await repo.add_quantity(
        "tnt-1", "api_calls", date(2030, 3, 1), date(2030, 3, 31), 50, Decimal("0.001")
    )
    assert row.quantity == 150
    assert "FOR UPDATE" in str(_compiled(db))

    await repo.set_quantity(
        "tnt-1", "api_calls", date(2030, 3, 1), date(2030, 3, 31), 7, Decimal("0.001")
    )
    assert row.quantity == 7
    db.add.assert_not_called()


async def test_mark_invoiced_skips_invoiced_rows() -> None:
    db = _session()
    db.execute.return_value.rowcount = 3

    count = await UsageRepository(db).mark_invoiced(
        "tnt-1", date(2030, 3, 1), "inv-1", datetime(2030, 4, 1, tzinfo=UTC)
    )

    assert count == 3
    sql = str(_compiled(db))
    assert sql.startswith("UPDATE usage_record")
    assert "usage_record.invoiced IS false" in sql
