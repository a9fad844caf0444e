"""Schedule resolution: what an employee was (or should be) doing on a day.

Resolution runs a fixed pipeline of resolver functions over a shared
context. Each resolver may replace the working answer or stop the pipeline,
so the precedence order is exactly the order of the tuple:

    assignment -> variation -> actual-work suppression -> leave

The payroll view swaps the last two stages for an ACTUAL-only leave overlay,
and request materialisation stops after the variation stage.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import TYPE_CHECKING

from teamsched.domain.intervals import (
    EPOCH,
    as_day,
    as_utc,
    contains,
    daterange,
    has_time_of_day,
    midnight,
    same_day,
    week_bounds,
)
from teamsched.domain.timeline import assignment_on
from teamsched.schemas.schedule import Workday

if TYPE_CHECKING:
    from collections.abc import Sequence

    from teamsched.domain.intervals import DayLike
    from teamsched.schemas.employee import Employee
    from teamsched.schemas.schedule import Assignment

DEFAULT_STANDARD_HOURS = 8.0
COMPRESSED_STANDARD_HOURS = 10.0
FULL_WEEK_DAYS = 5


@dataclass
class ResolutionContext:
    """Working state threaded through the resolver pipeline."""

    employee: Employee
    day: date
    hour_offset: float = 0.0
    assignment: Assignment | None = None
    workday: Workday | None = None
    stopped: bool = False
    trace: list[str] = field(default_factory=list)


Resolver = Callable[[ResolutionContext], None]


# ---------------------------------------------------------------------------
# Work history lookups
# ---------------------------------------------------------------------------


def hours_worked_on(employee: Employee, day: DayLike) -> float:
    return sum(wk.hours for wk in employee.work if same_day(wk.date_worked, day))


def last_work_date(employee: Employee) -> datetime:
    """Midnight UTC of the latest day with recorded work, or the epoch."""
    if not employee.work:
        return EPOCH
    return midnight(max(wk.date_worked for wk in employee.work))


# ---------------------------------------------------------------------------
# Policies
# ---------------------------------------------------------------------------


def leave_displaces_schedule(
    leave_hours: float,
    leave_at: datetime,
    standard_hours: float,
    last_work: datetime,
) -> bool:
    """Whether a leave entry replaces the scheduled workday.

    A leave of more than half a standard day always wins. A shorter, partial
    leave only wins once recorded work has moved past its timestamp.
    """
    return leave_hours > standard_hours / 2 or as_utc(leave_at) < as_utc(last_work)


# ---------------------------------------------------------------------------
# Resolvers
# ---------------------------------------------------------------------------


def resolve_assignment(ctx: ResolutionContext) -> None:
    assignment = assignment_on(ctx.employee, ctx.day)
    ctx.assignment = assignment
    if assignment is not None:
        ctx.workday = assignment.workday_for(ctx.day)
        ctx.trace.append(f"assignment:{assignment.id}")


def resolve_variation(ctx: ResolutionContext) -> None:
    site = ctx.assignment.site if ctx.assignment is not None else ""
    for variation in ctx.employee.variations:
        if not contains(variation.start_date, variation.end_date, ctx.day):
            continue
        workday = variation.workday_for(site, ctx.day)
        if workday is not None:
            ctx.workday = workday
            ctx.trace.append(f"variation:{variation.id}")


def suppress_for_actual_work(ctx: ResolutionContext) -> None:
    """A worked day cannot also be a leave day."""
    if hours_worked_on(ctx.employee, ctx.day) > 0.0:
        ctx.stopped = True
        ctx.trace.append("worked")


def resolve_leave(ctx: ResolutionContext) -> None:
    standard = ctx.assignment.standard_workday() if ctx.assignment is not None else DEFAULT_STANDARD_HOURS
    last_work = last_work_date(ctx.employee)
    shift = timedelta(hours=ctx.hour_offset)
    for leave in ctx.employee.leaves:
        leave_at = leave.leave_date
        if has_time_of_day(leave_at):
            leave_at = leave_at + shift
        if as_day(leave_at) != ctx.day:
            continue
        if leave_displaces_schedule(leave.hours, leave_at, standard, last_work):
            ctx.workday = Workday(code=leave.code, hours=leave.hours)
            ctx.trace.append(f"leave:{leave.id}")


def resolve_actual_leave(ctx: ResolutionContext) -> None:
    """Overlay confirmed leave, merging several entries on one day."""
    merged: Workday | None = None
    largest = 0.0
    for leave in ctx.employee.leaves:
        if not leave.is_actual or not same_day(leave.leave_date, ctx.day):
            continue
        if merged is None:
            merged = Workday(code=leave.code, hours=leave.hours)
            largest = leave.hours
            continue
        merged.hours += leave.hours
        if leave.hours > largest:
            merged.code = leave.code
            largest = leave.hours
    if merged is not None:
        ctx.workday = merged
        ctx.trace.append("actual-leave")


WORKDAY_PIPELINE: tuple[Resolver, ...] = (
    resolve_assignment,
    resolve_variation,
    suppress_for_actual_work,
    resolve_leave,
)
ACTUAL_PIPELINE: tuple[Resolver, ...] = (resolve_assignment, resolve_variation, resolve_actual_leave)
SCHEDULE_PIPELINE: tuple[Resolver, ...] = (resolve_assignment, resolve_variation)


def run_pipeline(
    pipeline: Sequence[Resolver],
    employee: Employee,
    day: DayLike,
    hour_offset: float = 0.0,
) -> ResolutionContext:
    ctx = ResolutionContext(employee=employee, day=as_day(day), hour_offset=hour_offset)
    for resolver in pipeline:
        resolver(ctx)
        if ctx.stopped:
            break
    return ctx


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def resolve_workday(employee: Employee, day: DayLike, hour_offset: float = 0.0) -> Workday | None:
    """The intended workday, including leave where it displaces the schedule."""
    return run_pipeline(WORKDAY_PIPELINE, employee, day, hour_offset).workday


def resolve_actual_workday(employee: Employee, day: DayLike, hour_offset: float = 0.0) -> Workday | None:
    """The workday as payroll sees it: schedule overlaid with ACTUAL leave only."""
    return run_pipeline(ACTUAL_PIPELINE, employee, day, hour_offset).workday


def resolve_without_leave(employee: Employee, day: DayLike, hour_offset: float = 0.0) -> Workday | None:
    """The scheduled workday ignoring the ledger entirely."""
    return run_pipeline(SCHEDULE_PIPELINE, employee, day, hour_offset).workday


def standard_workday_length(employee: Employee, day: DayLike) -> float:
    """Ten hours when the week around ``day`` has fewer than five coded days."""
    sunday, saturday = week_bounds(day)
    count = 0
    for current in daterange(sunday, saturday):
        workday = resolve_workday(employee, current)
        if workday is not None and workday.code:
            count += 1
    return COMPRESSED_STANDARD_HOURS if count < FULL_WEEK_DAYS else DEFAULT_STANDARD_HOURS


def primary_assignment(employee: Employee, start: DayLike, end: DayLike) -> tuple[str, str]:
    """Most frequent (workcenter, code) scheduled over ``[start, end)``."""
    counts: Counter[tuple[str, str]] = Counter()
    last = as_day(end) - timedelta(days=1)
    for current in daterange(start, last):
        workday = resolve_without_leave(employee, current)
        if workday is None or (not workday.workcenter and not workday.code):
            continue
        counts[(workday.workcenter, workday.code)] += 1
    if not counts:
        return "", ""
    return counts.most_common(1)[0][0]
