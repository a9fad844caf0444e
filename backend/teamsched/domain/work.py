"""Actual-work queries and labor forecasting.

Work history is a read-only snapshot; nothing here mutates it.
"""

from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING

from teamsched.domain.intervals import as_day, contains, contains_half_open, daterange, midnight
from teamsched.domain.resolution import (
    hours_worked_on,
    last_work_date,
    resolve_workday,
    standard_workday_length,
)
from teamsched.domain.timeline import assignment_on, has_labor_code

if TYPE_CHECKING:
    from collections.abc import Iterable

    from teamsched.domain.intervals import DayLike
    from teamsched.schemas.employee import Employee
    from teamsched.schemas.work import CompareCode, LaborCode

__all__ = [
    "forecast_hours",
    "hours_worked_on",
    "last_work_date",
    "worked_hours",
    "worked_hours_for_labor",
]


def worked_hours(employee: Employee, start: DayLike, end: DayLike) -> float:
    """Hours recorded in ``[start, end)``."""
    return sum(wk.hours for wk in employee.work if contains_half_open(start, end, wk.date_worked))


def worked_hours_for_labor(
    employee: Employee,
    charge_number: str,
    extension: str,
    start: DayLike,
    end: DayLike,
) -> float:
    """Hours charged to one labor code in ``[start, end)``."""
    return sum(
        wk.hours
        for wk in employee.work
        if contains_half_open(start, end, wk.date_worked)
        and wk.charge_number.casefold() == charge_number.casefold()
        and wk.extension.casefold() == extension.casefold()
    )


def forecast_hours(
    employee: Employee,
    labor_code: LaborCode,
    start: DayLike,
    end: DayLike,
    compare_codes: Iterable[CompareCode],
    hour_offset: float = 0.0,
) -> float:
    """Standard hours expected against ``labor_code`` in ``[start, end)``.

    Only days after the last recorded work count, and only when nothing was
    worked that day, the labor code is open, the resolved workday carries a
    non-leave code and the covering assignment holds the labor code.
    """
    if not has_labor_code(employee, labor_code.charge_number, labor_code.extension):
        return 0.0
    if labor_code.end_date < as_day(start) or labor_code.start_date > as_day(end):
        return 0.0

    work_codes = {cc.code.casefold() for cc in compare_codes if not cc.is_leave}
    last_work = last_work_date(employee)
    total = 0.0
    for current in daterange(start, as_day(end) - timedelta(days=1)):
        if midnight(current) <= last_work:
            continue
        if hours_worked_on(employee, current) > 0.0:
            continue
        if not contains(labor_code.start_date, labor_code.end_date, current):
            continue
        workday = resolve_workday(employee, current, hour_offset)
        if workday is None or workday.code.casefold() not in work_codes:
            continue
        assignment = assignment_on(employee, current)
        if assignment is None or not any(
            lc.matches(labor_code.charge_number, labor_code.extension) for lc in assignment.labor_codes
        ):
            continue
        total += standard_workday_length(employee, current)
    return total
