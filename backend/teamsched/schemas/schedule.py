# ruff: noqa: TC003
from __future__ import annotations

from datetime import date, timedelta

from pydantic import BaseModel, Field

# Far-future end date marking an assignment that is still active.
OPEN_END = date(9999, 12, 30)
NO_ROTATION = date(1970, 1, 1)

# ---------------------------------------------------------------------------
# Weekly templates
# ---------------------------------------------------------------------------


class Workday(BaseModel):
    """One day of a schedule template, or the resolved answer for a date."""

    id: int = 0
    workcenter: str = ""
    code: str = ""
    hours: float = 0.0


def weekday_index(day: date) -> int:
    """Template slot for a date: 0 is Sunday, 6 is Saturday."""
    return (day.weekday() + 1) % 7


class Schedule(BaseModel):
    """A seven-day work pattern."""

    id: int = 0
    workdays: list[Workday] = Field(default_factory=list)

    def workday_at(self, index: int) -> Workday | None:
        if not self.workdays:
            return None
        return self.workdays[index % len(self.workdays)].model_copy()

    def working_days(self) -> int:
        return sum(1 for wd in self.workdays if wd.code)


def blank_schedule(schedule_id: int = 0, days: int = 7) -> Schedule:
    return Schedule(id=schedule_id, workdays=[Workday(id=i) for i in range(days)])


# ---------------------------------------------------------------------------
# Assignments and variations
# ---------------------------------------------------------------------------


class EmployeeLaborCode(BaseModel):
    """A charge number an assignment may bill against."""

    charge_number: str
    extension: str = ""

    def matches(self, charge_number: str, extension: str) -> bool:
        return (
            self.charge_number.casefold() == charge_number.casefold()
            and self.extension.casefold() == extension.casefold()
        )


class Assignment(BaseModel):
    """A dated work placement: site, work center and schedule templates."""

    id: int
    site: str
    workcenter: str
    start_date: date
    end_date: date = OPEN_END
    rotation_date: date = NO_ROTATION
    rotation_days: int = 0
    schedules: list[Schedule] = Field(default_factory=list)
    labor_codes: list[EmployeeLaborCode] = Field(default_factory=list)

    @property
    def is_open(self) -> bool:
        return self.end_date == OPEN_END

    def add_schedule(self, days: int = 7) -> Schedule:
        next_id = max((s.id for s in self.schedules), default=-1) + 1
        schedule = blank_schedule(next_id, days)
        self.schedules.append(schedule)
        return schedule

    def workday_for(self, day: date) -> Workday | None:
        """Base workday from the templates.

        Without a rotation the first schedule is read by weekday. With a
        rotation the cycle is counted from the Sunday on or before
        rotation_date; the position picks the schedule (one per seven days)
        and the weekday picks the slot.
        """
        if not self.schedules:
            return None
        if self.rotation_days <= 0 or len(self.schedules) == 1:
            return self.schedules[0].workday_at(weekday_index(day))
        anchor = self.rotation_date - timedelta(days=weekday_index(self.rotation_date))
        index = (day - anchor).days % self.rotation_days
        schedule = self.schedules[(index // 7) % len(self.schedules)]
        return schedule.workday_at(weekday_index(day))

    def standard_workday(self) -> float:
        """Ten hours for compressed schedules, otherwise eight."""
        if not self.schedules:
            return 8.0
        average = sum(s.working_days() for s in self.schedules) / len(self.schedules)
        return 10.0 if average < 5 else 8.0


class Variation(BaseModel):
    """A temporary override of an assignment's schedule at one site."""

    id: int
    site: str
    mids: bool = False
    start_date: date
    end_date: date
    schedule: Schedule = Field(default_factory=blank_schedule)

    def workday_for(self, site: str, day: date) -> Workday | None:
        if self.site.casefold() != site.casefold():
            return None
        return self.schedule.workday_at(weekday_index(day))
