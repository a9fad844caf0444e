"""Leave ledger: the authoritative day-by-day leave record and annual balances."""

from __future__ import annotations

from datetime import date, datetime
from typing import TYPE_CHECKING

from teamsched.domain.intervals import as_day, as_utc, contains_half_open
from teamsched.exceptions import InvalidInputError, NotFoundError
from teamsched.models.enums import LeaveStatus
from teamsched.schemas.leave import AnnualLeave, LeaveDay

if TYPE_CHECKING:
    from teamsched.domain.intervals import DayLike
    from teamsched.schemas.employee import Employee

DEFAULT_ANNUAL_HOURS = 120.0
VACATION_CODE = "V"

_LEGACY_DATE_FORMAT = "%m/%d/%Y"


def _sort(employee: Employee) -> None:
    employee.leaves.sort(key=lambda lv: (lv.leave_date, lv.id))


def _next_leave_id(employee: Employee) -> int:
    return max((lv.id for lv in employee.leaves), default=0) + 1


def find_leave(employee: Employee, leave_id: int) -> LeaveDay | None:
    for leave in employee.leaves:
        if leave.id == leave_id:
            return leave
    return None


# ---------------------------------------------------------------------------
# Entries
# ---------------------------------------------------------------------------


def upsert_leave(
    employee: Employee,
    leave_date: DayLike,
    code: str,
    hours: float,
    status: LeaveStatus | str,
    request_id: str = "",
    leave_id: int = 0,
) -> LeaveDay:
    """Insert or update the entry for (date, code), or for ``leave_id``.

    A match keeps its id and takes the new status and hours; the request
    link only changes when one is given.
    """
    when = as_utc(leave_date)
    try:
        status = LeaveStatus(str(status).upper())
    except ValueError:
        raise InvalidInputError(f"Invalid leave status: {status!r}") from None
    for leave in employee.leaves:
        same_slot = as_day(leave.leave_date) == as_day(when) and leave.code.casefold() == code.casefold()
        if same_slot or (leave_id > 0 and leave.id == leave_id):
            leave.status = status
            leave.hours = hours
            if request_id:
                leave.request_id = request_id
            return leave

    leave = LeaveDay(
        id=_next_leave_id(employee),
        leave_date=when,
        code=code,
        hours=hours,
        status=status,
        request_id=request_id,
    )
    employee.leaves.append(leave)
    _sort(employee)
    return leave


def update_leave(employee: Employee, leave_id: int, field: str, value: str) -> LeaveDay:
    """Change one field of a ledger entry and return its prior state."""
    if leave_id <= 0:
        raise InvalidInputError(f"Invalid leave id: {leave_id}")
    leave = find_leave(employee, leave_id)
    if leave is None:
        raise NotFoundError("Leave", leave_id)
    prior = leave.model_copy()

    match field.lower():
        case "date":
            try:
                parsed = datetime.strptime(value, _LEGACY_DATE_FORMAT).date()
            except ValueError:
                raise InvalidInputError(f"Invalid leave date: {value!r}") from None
            leave.leave_date = as_utc(parsed)
            _sort(employee)
        case "code":
            leave.code = value
        case "hours":
            try:
                leave.hours = float(value)
            except ValueError:
                raise InvalidInputError(f"Invalid leave hours: {value!r}") from None
        case "status":
            try:
                leave.status = LeaveStatus(value.upper())
            except ValueError:
                raise InvalidInputError(f"Invalid leave status: {value!r}") from None
        case "requestid":
            leave.request_id = value
        case _:
            raise InvalidInputError(f"Unknown leave field: {field!r}")
    return prior


def delete_leave(employee: Employee, leave_id: int) -> LeaveDay | None:
    """Remove one entry by id, returning it (or None when absent)."""
    leave = find_leave(employee, leave_id)
    if leave is not None:
        employee.leaves.remove(leave)
    return leave


def delete_leave_range(employee: Employee, start: DayLike, end: DayLike) -> list[LeaveDay]:
    """Remove entries dated in ``[start, end)`` and return them."""
    removed = [lv for lv in employee.leaves if contains_half_open(start, end, lv.leave_date)]
    employee.leaves = [lv for lv in employee.leaves if not contains_half_open(start, end, lv.leave_date)]
    return removed


def remove_request_leaves(employee: Employee, request_id: str) -> list[LeaveDay]:
    """Drop the non-ACTUAL entries owned by a request."""
    removed = [lv for lv in employee.leaves if lv.request_id == request_id and not lv.is_actual]
    removed_ids = {lv.id for lv in removed}
    employee.leaves = [lv for lv in employee.leaves if lv.id not in removed_ids]
    return removed


def hours_in_range(
    employee: Employee,
    start: DayLike,
    end: DayLike,
    status: LeaveStatus | str | None = None,
    code: str | None = None,
) -> float:
    """Sum hours for entries in ``[start, end)`` matching the optional filters."""
    total = 0.0
    for leave in employee.leaves:
        if not contains_half_open(start, end, leave.leave_date):
            continue
        if status is not None and leave.status != str(status).upper():
            continue
        if code is not None and leave.code.casefold() != code.casefold():
            continue
        total += leave.hours
    return total


def leave_hours(employee: Employee, start: DayLike, end: DayLike) -> float:
    """Confirmed leave of any code in ``[start, end)``."""
    return hours_in_range(employee, start, end, status=LeaveStatus.ACTUAL)


def pto_hours(employee: Employee, start: DayLike, end: DayLike) -> float:
    """Confirmed vacation in ``[start, end)``."""
    return hours_in_range(employee, start, end, status=LeaveStatus.ACTUAL, code=VACATION_CODE)


# ---------------------------------------------------------------------------
# Balances
# ---------------------------------------------------------------------------


def _sort_balances(employee: Employee) -> None:
    employee.balances.sort(key=lambda b: b.year)


def find_balance(employee: Employee, year: int) -> AnnualLeave | None:
    for balance in employee.balances:
        if balance.year == year:
            return balance
    return None


def ensure_year_balance(
    employee: Employee,
    year: int,
    default_annual: float = DEFAULT_ANNUAL_HOURS,
) -> AnnualLeave:
    """Create the balance for ``year`` if missing.

    The prior year's allotment carries forward with its unused hours
    (annual + carryover - ACTUAL vacation taken). Without a prior balance the
    allotment starts at ``default_annual`` with nothing carried.
    """
    existing = find_balance(employee, year)
    if existing is not None:
        return existing

    prior = find_balance(employee, year - 1)
    if prior is None or prior.annual == 0.0:
        balance = AnnualLeave(year=year, annual=default_annual, carryover=0.0)
    else:
        used = pto_hours(employee, date(year - 1, 1, 1), date(year, 1, 1))
        balance = AnnualLeave(year=year, annual=prior.annual, carryover=prior.annual + prior.carryover - used)
    employee.balances.append(balance)
    _sort_balances(employee)
    return balance


def set_balance(employee: Employee, year: int, annual: float, carryover: float) -> AnnualLeave:
    """Administrative correction of a year's balance."""
    balance = find_balance(employee, year)
    if balance is None:
        balance = AnnualLeave(year=year)
        employee.balances.append(balance)
        _sort_balances(employee)
    balance.annual = annual
    balance.carryover = carryover
    return balance


def remaining_hours(employee: Employee, year: int) -> float:
    """Hours left in ``year``: allotment plus carryover minus vacation taken."""
    balance = find_balance(employee, year)
    if balance is None:
        return 0.0
    return balance.annual + balance.carryover - pto_hours(employee, date(year, 1, 1), date(year + 1, 1, 1))
