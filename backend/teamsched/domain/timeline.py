"""Assignment timeline: ordered, contiguous work placements for one employee.

All operations mutate the employee in place. Requests that cannot apply
(unknown ids, removing the first assignment) are silent no-ops.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import TYPE_CHECKING

from teamsched.domain.intervals import as_day, contains, overlaps
from teamsched.schemas.schedule import OPEN_END, Assignment, EmployeeLaborCode

if TYPE_CHECKING:
    from teamsched.domain.intervals import DayLike
    from teamsched.schemas.employee import Employee

# The first assignment anchors the employee's history and is never removed.
ANCHOR_ASSIGNMENT_ID = 1

DEFAULT_WORK_CODE = "D"
DEFAULT_WORK_HOURS = 8.0


def _sort(employee: Employee) -> None:
    employee.assignments.sort(key=lambda a: (a.start_date, a.id))


# ---------------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------------


def append_assignment(employee: Employee, site: str, workcenter: str, start: DayLike) -> Assignment:
    """Start a new assignment, closing the current one the day before.

    The new assignment runs open-ended with a Monday-Friday, eight-hour
    schedule at ``workcenter``.
    """
    start_date = as_day(start)
    next_id = max((a.id for a in employee.assignments), default=0) + 1

    _sort(employee)
    if employee.assignments:
        employee.assignments[-1].end_date = start_date - timedelta(days=1)

    assignment = Assignment(
        id=next_id,
        site=site,
        workcenter=workcenter,
        start_date=start_date,
        end_date=OPEN_END,
    )
    schedule = assignment.add_schedule(7)
    for index, workday in enumerate(schedule.workdays):
        if index not in (0, 6):
            workday.code = DEFAULT_WORK_CODE
            workday.workcenter = workcenter
            workday.hours = DEFAULT_WORK_HOURS

    employee.assignments.append(assignment)
    _sort(employee)
    return assignment


def remove_assignment(employee: Employee, assignment_id: int) -> Assignment | None:
    """Splice out an assignment; its predecessor absorbs its end date."""
    if assignment_id <= ANCHOR_ASSIGNMENT_ID:
        return None
    _sort(employee)
    position = next((i for i, a in enumerate(employee.assignments) if a.id == assignment_id), None)
    if position is None:
        return None
    removed = employee.assignments.pop(position)
    if position > 0:
        employee.assignments[position - 1].end_date = removed.end_date
    return removed


def purge_before(employee: Employee, day: DayLike) -> bool:
    """Drop history older than ``day``.

    Returns True when the employee's last assignment ended before ``day``,
    meaning the whole record can be archived.
    """
    cutoff = as_day(day)
    employee.variations = [v for v in employee.variations if v.end_date >= cutoff]
    employee.leaves = [lv for lv in employee.leaves if as_day(lv.leave_date) >= cutoff]
    employee.requests = [r for r in employee.requests if r.end_date >= cutoff]
    employee.balances = [b for b in employee.balances if b.year >= cutoff.year]

    if not employee.assignments:
        return True
    _sort(employee)
    return employee.assignments[-1].end_date < cutoff


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


def assignment_on(employee: Employee, day: DayLike) -> Assignment | None:
    """The assignment whose inclusive range contains ``day``."""
    found = None
    for assignment in employee.assignments:
        if contains(assignment.start_date, assignment.end_date, day):
            found = assignment
    return found


def is_active(employee: Employee, day: DayLike) -> bool:
    """True when an assignment at the employee's home site covers ``day``."""
    return any(
        a.site.casefold() == employee.site_id.casefold() and contains(a.start_date, a.end_date, day)
        for a in employee.assignments
    )


def at_site(employee: Employee, site: str, start: DayLike, end: DayLike) -> bool:
    return any(
        a.site.casefold() == site.casefold() and overlaps(a.start_date, a.end_date, start, end)
        for a in employee.assignments
    )


def is_assigned(employee: Employee, site: str, workcenter: str, start: DayLike, end: DayLike) -> bool:
    return any(
        a.site.casefold() == site.casefold()
        and a.workcenter.casefold() == workcenter.casefold()
        and overlaps(a.start_date, a.end_date, start, end)
        for a in employee.assignments
    )


def is_contiguous(employee: Employee) -> bool:
    """Each assignment starts the day after its predecessor ends."""
    ordered = sorted(employee.assignments, key=lambda a: (a.start_date, a.id))
    for previous, current in zip(ordered, ordered[1:], strict=False):
        if previous.end_date + timedelta(days=1) != current.start_date:
            return False
    return all(a.start_date <= a.end_date for a in ordered)


# ---------------------------------------------------------------------------
# Labor codes
# ---------------------------------------------------------------------------


def has_labor_code(employee: Employee, charge_number: str, extension: str) -> bool:
    return any(lc.matches(charge_number, extension) for a in employee.assignments for lc in a.labor_codes)


def add_labor_code(
    employee: Employee,
    charge_number: str,
    extension: str,
    on: date | None = None,
) -> Assignment | None:
    """Attach a labor code to the assignment covering ``on`` (default: the latest)."""
    if on is not None:
        assignment = assignment_on(employee, on)
    else:
        _sort(employee)
        assignment = employee.assignments[-1] if employee.assignments else None
    if assignment is None:
        return None
    if not any(lc.matches(charge_number, extension) for lc in assignment.labor_codes):
        assignment.labor_codes.append(EmployeeLaborCode(charge_number=charge_number, extension=extension))
    return assignment


def delete_labor_code(employee: Employee, charge_number: str, extension: str) -> None:
    for assignment in employee.assignments:
        assignment.labor_codes = [lc for lc in assignment.labor_codes if not lc.matches(charge_number, extension)]
