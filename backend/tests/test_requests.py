"""Tests for the leave request workflow and its ledger side effects."""

from __future__ import annotations

from datetime import UTC, date, datetime

import pytest

from teamsched.domain.ledger import upsert_leave
from teamsched.domain.requests import (
    approve_request,
    change_dates,
    change_end_date,
    change_primary_code,
    change_start_date,
    delete_leave_request,
    edit_requested_day,
    new_leave_request,
    submit_request,
    unapprove_request,
    update_leave_request,
)
from teamsched.exceptions import InvalidInputError, NotFoundError
from teamsched.models.enums import LeaveStatus, RequestStatus
from teamsched.schemas.employee import Employee
from teamsched.schemas.schedule import Schedule, Workday

REQUEST_ID = "req-1"
APPROVER = "supervisor@example.com"
APPROVED_AT = datetime(2024, 2, 20, 15, 0, tzinfo=UTC)

MONDAY = date(2024, 3, 4)
FRIDAY = date(2024, 3, 8)


def _new_vacation(employee: Employee, start: date = MONDAY, end: date = FRIDAY, code: str = "V") -> None:
    new_leave_request(employee, code, start, end, request_id=REQUEST_ID)


def _approved_vacation(employee: Employee) -> None:
    _new_vacation(employee)
    submit_request(employee, REQUEST_ID)
    approve_request(employee, REQUEST_ID, APPROVER, now=APPROVED_AT)


def _ledger_days(employee: Employee, request_id: str = REQUEST_ID) -> list[date]:
    return [lv.leave_date.date() for lv in employee.leaves if lv.request_id == request_id]


# ---------------------------------------------------------------------------
# Creation and materialisation
# ---------------------------------------------------------------------------


def test_new_request_is_draft_with_materialised_days(employee: Employee) -> None:
    request = new_leave_request(employee, "V", MONDAY, FRIDAY)

    assert request.status == RequestStatus.DRAFT
    assert request.employee_id == employee.id
    assert employee.find_request(request.id) is request
    assert len(request.requested_days) == 5
    assert {(d.code, d.hours, d.status, d.request_id) for d in request.requested_days} == {
        ("V", 8.0, LeaveStatus.DRAFT, request.id)
    }
    assert employee.leaves == []


def test_materialisation_skips_days_off(employee: Employee) -> None:
    request = new_leave_request(employee, "V", FRIDAY, date(2024, 3, 11))
    assert [d.leave_date.date() for d in request.requested_days] == [FRIDAY, date(2024, 3, 11)]


def test_zero_hour_workday_uses_standard_length(employee: Employee) -> None:
    employee.assignments[0].schedules = [
        Schedule(workdays=[Workday(id=i, code="D" if 1 <= i <= 4 else "", hours=0.0) for i in range(7)])
    ]
    request = new_leave_request(employee, "V", MONDAY, FRIDAY)
    assert [d.hours for d in request.requested_days] == [10.0, 10.0, 10.0, 10.0]


def test_holiday_requests_are_eight_hours(employee: Employee) -> None:
    employee.assignments[0].schedules = [
        Schedule(workdays=[Workday(id=i, code="D" if 1 <= i <= 4 else "", hours=10.0) for i in range(7)])
    ]
    request = new_leave_request(employee, "h", MONDAY, MONDAY)
    assert [d.hours for d in request.requested_days] == [8.0]


def test_new_request_rejects_inverted_range(employee: Employee) -> None:
    with pytest.raises(InvalidInputError):
        new_leave_request(employee, "V", FRIDAY, MONDAY)


def test_unknown_request_raises_not_found(employee: Employee) -> None:
    with pytest.raises(NotFoundError):
        submit_request(employee, "missing")


# ---------------------------------------------------------------------------
# Submit, approve, unapprove
# ---------------------------------------------------------------------------


def test_submit_marks_days_requested(employee: Employee) -> None:
    _new_vacation(employee)

    update = submit_request(employee, REQUEST_ID)

    assert update.request.status == RequestStatus.REQUESTED
    assert {d.status for d in update.request.requested_days} == {LeaveStatus.REQUESTED}
    assert update.message == (
        "Leave Request: Leave Request from Doe, Jane submitted for approval.  "
        "Requested Leave Date: 04 Mar 24 - 08 Mar 24."
    )


def test_approve_posts_days_to_ledger(employee: Employee) -> None:
    _new_vacation(employee)
    submit_request(employee, REQUEST_ID)

    update = approve_request(employee, REQUEST_ID, APPROVER, now=APPROVED_AT)

    assert update.message == "Leave Request: Leave Request approved."
    assert update.request.status == RequestStatus.APPROVED
    assert update.request.approved_by == APPROVER
    assert update.request.approval_date == APPROVED_AT
    assert len(employee.leaves) == 5
    assert {(lv.status, lv.request_id) for lv in employee.leaves} == {(LeaveStatus.APPROVED, REQUEST_ID)}


def test_approve_requires_requested_state(employee: Employee) -> None:
    _new_vacation(employee)
    with pytest.raises(InvalidInputError):
        approve_request(employee, REQUEST_ID, APPROVER)

    submit_request(employee, REQUEST_ID)
    with pytest.raises(InvalidInputError):
        approve_request(employee, REQUEST_ID, "  ")


def test_approved_request_cannot_be_resubmitted(employee: Employee) -> None:
    _approved_vacation(employee)
    with pytest.raises(InvalidInputError):
        submit_request(employee, REQUEST_ID)


def test_approve_leaves_actual_entries_untouched(employee: Employee) -> None:
    upsert_leave(employee, date(2024, 3, 5), "V", 8.0, LeaveStatus.ACTUAL)

    _approved_vacation(employee)

    actual = [lv for lv in employee.leaves if lv.is_actual]
    assert len(employee.leaves) == 5
    assert len(actual) == 1
    assert actual[0].request_id == ""
    assert date(2024, 3, 5) not in _ledger_days(employee)


def test_unapprove_requires_comment(employee: Employee) -> None:
    _approved_vacation(employee)
    with pytest.raises(InvalidInputError):
        unapprove_request(employee, REQUEST_ID, "")


def test_unapprove_requires_approved_state(employee: Employee) -> None:
    _new_vacation(employee)
    with pytest.raises(InvalidInputError):
        unapprove_request(employee, REQUEST_ID, "Coverage needed")


def test_unapprove_returns_request_to_draft(employee: Employee) -> None:
    _approved_vacation(employee)

    update = unapprove_request(employee, REQUEST_ID, "Coverage needed")

    request = update.request
    assert update.message == "Leave Request: Leave Request unapproved.\nComment: Coverage needed"
    assert request.status == RequestStatus.DRAFT
    assert request.approved_by == ""
    assert request.approval_date is None
    assert [c.comment for c in request.comments] == ["Coverage needed"]
    assert {d.status for d in request.requested_days} == {LeaveStatus.REQUESTED}
    assert {lv.status for lv in employee.leaves} == {LeaveStatus.REQUESTED}


# ---------------------------------------------------------------------------
# Date changes
# ---------------------------------------------------------------------------


def test_end_to_end_shrinking_an_approved_request(employee: Employee) -> None:
    _new_vacation(employee)
    assert len(employee.requests[0].requested_days) == 5
    update_leave_request(employee, REQUEST_ID, "requested", "")
    update_leave_request(employee, REQUEST_ID, "approve", APPROVER)
    assert _ledger_days(employee) == [MONDAY, date(2024, 3, 5), date(2024, 3, 6), date(2024, 3, 7), FRIDAY]

    update = update_leave_request(employee, REQUEST_ID, "end", "2024-03-06")

    assert update.message == ""
    assert update.request.status == RequestStatus.APPROVED
    assert update.request.approved_by == APPROVER
    assert [d.leave_date.date() for d in update.request.requested_days] == [MONDAY, date(2024, 3, 5), date(2024, 3, 6)]
    assert _ledger_days(employee) == [MONDAY, date(2024, 3, 5), date(2024, 3, 6)]
    assert {lv.status for lv in employee.leaves} == {LeaveStatus.APPROVED}


def test_extending_end_date_needs_reapproval(employee: Employee) -> None:
    _approved_vacation(employee)

    update = change_end_date(employee, REQUEST_ID, date(2024, 3, 12))

    request = update.request
    assert update.message == "Leave Request from Doe, Jane: Ending Date changed needs reapproval"
    assert request.status == RequestStatus.REQUESTED
    assert request.approved_by == ""
    assert request.approval_date is None
    assert len(request.requested_days) == 7
    assert _ledger_days(employee) == []


def test_earlier_start_date_needs_reapproval(employee: Employee) -> None:
    _approved_vacation(employee)

    update = change_start_date(employee, REQUEST_ID, date(2024, 3, 1))

    assert update.message == "Leave Request from Doe, Jane: Starting date changed needs reapproval"
    assert update.request.status == RequestStatus.REQUESTED
    assert update.request.start_date == date(2024, 3, 1)


def test_moving_both_dates_needs_reapproval(employee: Employee) -> None:
    _approved_vacation(employee)

    update = change_dates(employee, REQUEST_ID, date(2024, 3, 11), date(2024, 3, 15))

    assert update.message == "Leave Request from Doe, Jane: dates changed needs reapproval"
    assert update.request.status == RequestStatus.REQUESTED


def test_later_start_within_range_keeps_approval(employee: Employee) -> None:
    _approved_vacation(employee)

    update = change_start_date(employee, REQUEST_ID, date(2024, 3, 6))

    assert update.message == ""
    assert update.request.status == RequestStatus.APPROVED
    assert _ledger_days(employee) == [date(2024, 3, 6), date(2024, 3, 7), FRIDAY]


def test_draft_date_change_has_no_notice(employee: Employee) -> None:
    _new_vacation(employee)

    update = change_end_date(employee, REQUEST_ID, date(2024, 3, 12))

    assert update.message == ""
    assert update.request.status == RequestStatus.DRAFT
    assert len(update.request.requested_days) == 7


def test_date_change_rejects_inverted_range(employee: Employee) -> None:
    _new_vacation(employee)
    with pytest.raises(InvalidInputError):
        change_end_date(employee, REQUEST_ID, date(2024, 3, 1))


# ---------------------------------------------------------------------------
# Field edits
# ---------------------------------------------------------------------------


def test_change_primary_code_updates_field_only(employee: Employee) -> None:
    _new_vacation(employee)

    update = change_primary_code(employee, REQUEST_ID, "S")

    assert update.request.primary_code == "S"
    assert {d.code for d in update.request.requested_days} == {"V"}


def test_edit_requested_day(employee: Employee) -> None:
    _approved_vacation(employee)

    edit_requested_day(employee, REQUEST_ID, date(2024, 3, 5), "S", 4.0)
    edit_requested_day(employee, REQUEST_ID, date(2024, 3, 6), "", 8.0)
    update = edit_requested_day(employee, REQUEST_ID, date(2024, 3, 2), "V", 8.0)

    days = {d.leave_date.date(): d for d in update.request.requested_days}
    assert (days[date(2024, 3, 5)].code, days[date(2024, 3, 5)].hours) == ("S", 4.0)
    assert days[date(2024, 3, 6)].hours == 0.0
    assert update.request.requested_days[0].leave_date.date() == date(2024, 3, 2)
    assert {lv.code for lv in employee.leaves} == {"V"}
    assert len(employee.leaves) == 5


# ---------------------------------------------------------------------------
# Dispatcher
# ---------------------------------------------------------------------------


def test_dispatcher_field_aliases(employee: Employee) -> None:
    _new_vacation(employee)

    update_leave_request(employee, REQUEST_ID, "StartDate", "2024-03-05")
    update_leave_request(employee, REQUEST_ID, "enddate", "2024-03-07")
    update_leave_request(employee, REQUEST_ID, "primarycode", "S")
    update = update_leave_request(employee, REQUEST_ID, "requestday", "2024-03-06|V|4")

    request = update.request
    assert (request.start_date, request.end_date, request.primary_code) == (
        date(2024, 3, 5),
        date(2024, 3, 7),
        "S",
    )
    day = next(d for d in request.requested_days if d.leave_date.date() == date(2024, 3, 6))
    assert (day.code, day.hours) == ("V", 4.0)

    update = update_leave_request(employee, REQUEST_ID, "dates", "2024-03-11|2024-03-12")
    assert (update.request.start_date, update.request.end_date) == (date(2024, 3, 11), date(2024, 3, 12))


def test_dispatcher_unapprove_takes_comment(employee: Employee) -> None:
    _approved_vacation(employee)
    update = update_leave_request(employee, REQUEST_ID, "unapprove", "Short staffed")
    assert update.request.status == RequestStatus.DRAFT
    assert update.request.comments[-1].comment == "Short staffed"


@pytest.mark.parametrize(
    ("field", "value"),
    [
        ("start", "03/05/2024"),
        ("end", ""),
        ("dates", "2024-03-05"),
        ("day", "2024-03-05|V"),
        ("day", "2024-03-05|V|many"),
        ("colour", "blue"),
    ],
)
def test_dispatcher_rejects_bad_input(employee: Employee, field: str, value: str) -> None:
    _new_vacation(employee)
    with pytest.raises(InvalidInputError):
        update_leave_request(employee, REQUEST_ID, field, value)


# ---------------------------------------------------------------------------
# Deletion
# ---------------------------------------------------------------------------


def test_delete_request_removes_pending_ledger_entries(employee: Employee) -> None:
    _approved_vacation(employee)

    update = delete_leave_request(employee, REQUEST_ID)

    assert update.request.id == REQUEST_ID
    assert employee.requests == []
    assert employee.leaves == []


def test_delete_request_protects_actual_entries(employee: Employee) -> None:
    _approved_vacation(employee)
    upsert_leave(employee, MONDAY, "V", 8.0, LeaveStatus.ACTUAL)

    delete_leave_request(employee, REQUEST_ID)

    assert len(employee.leaves) == 1
    assert employee.leaves[0].is_actual
    assert employee.leaves[0].leave_date.date() == MONDAY


def test_delete_unknown_request_raises_not_found(employee: Employee) -> None:
    with pytest.raises(NotFoundError):
        delete_leave_request(employee, "missing")
