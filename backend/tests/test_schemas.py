from __future__ import annotations

from datetime import UTC, date, datetime

import pytest
from pydantic import ValidationError

from teamsched.models import LeaveStatus, RequestStatus
from teamsched.schemas.employee import EmployeeName
from teamsched.schemas.leave import LeaveDay, LeaveRequest
from teamsched.schemas.schedule import Assignment, Schedule, Variation, Workday, weekday_index
from teamsched.schemas.work import Work


def _schedule(working_days: int) -> Schedule:
    return Schedule(workdays=[Workday(id=i, code="D" if 0 < i <= working_days else "") for i in range(7)])


def test_employee_name_renderings() -> None:
    assert EmployeeName(first="Jane", last="Doe").last_first_mi == "Doe, Jane"
    assert EmployeeName(first="Jane", middle="Quinn", last="Doe").last_first_mi == "Doe, Jane Q"


def test_weekday_index_starts_on_sunday() -> None:
    assert weekday_index(date(2024, 3, 3)) == 0
    assert weekday_index(date(2024, 3, 9)) == 6


def test_assignment_defaults() -> None:
    assignment = Assignment(id=1, site="HQ", workcenter="OPS", start_date=date(2024, 1, 1))
    assert assignment.is_open
    assert assignment.rotation_days == 0
    assert assignment.workday_for(date(2024, 3, 4)) is None
    schedule = assignment.add_schedule()
    assert len(schedule.workdays) == 7


def test_standard_workday_from_templates() -> None:
    assignment = Assignment(id=1, site="HQ", workcenter="OPS", start_date=date(2024, 1, 1))
    assignment.schedules = [_schedule(5)]
    assert assignment.standard_workday() == 8.0
    assignment.schedules = [_schedule(4), _schedule(4)]
    assert assignment.standard_workday() == 10.0


def test_variation_site_match_is_case_insensitive() -> None:
    variation = Variation(
        id=1, site="HQ", start_date=date(2024, 3, 4), end_date=date(2024, 3, 8), schedule=_schedule(5)
    )
    assert variation.workday_for("hq", date(2024, 3, 4)) is not None
    assert variation.workday_for("REMOTE", date(2024, 3, 4)) is None


def test_leave_day_normalises_dates_and_status() -> None:
    leave = LeaveDay(leave_date=date(2024, 3, 4), code="V", hours=8.0, status=" requested ")
    assert leave.leave_date == datetime(2024, 3, 4, tzinfo=UTC)
    assert leave.status == LeaveStatus.REQUESTED

    naive = LeaveDay(leave_date=datetime(2024, 3, 4, 9), code="V")
    assert naive.leave_date.tzinfo is not None


def test_leave_day_rejects_unknown_status() -> None:
    with pytest.raises(ValidationError):
        LeaveDay(leave_date=date(2024, 3, 4), code="V", status="PENDING")


def test_leave_request_status_and_approval() -> None:
    request = LeaveRequest(
        id="req-1",
        employee_id="emp-1",
        primary_code="V",
        start_date=date(2024, 3, 4),
        end_date=date(2024, 3, 8),
        status="approved",
        approved_by="boss",
        approval_date=datetime(2024, 2, 1, tzinfo=UTC),
    )
    assert request.status == RequestStatus.APPROVED
    request.clear_approval()
    assert (request.approved_by, request.approval_date) == ("", None)


def test_work_date_is_utc() -> None:
    assert Work(date_worked=date(2024, 3, 4)).date_worked == datetime(2024, 3, 4, tzinfo=UTC)
