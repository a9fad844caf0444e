"""Leave request workflow.

A request moves DRAFT -> REQUESTED -> APPROVED. The only way back from
APPROVED to REQUESTED is a date change that leaves the original range;
that is applied automatically and never requested directly. Unapproving
returns a request to DRAFT.

Every date change re-materialises the request's days from the schedule
(ignoring leave, so the request never blocks itself) and, while the request
stays approved, re-posts them into the ledger. Ledger entries marked ACTUAL
are history and are never removed on the request's behalf.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import date, datetime
from typing import TYPE_CHECKING

from teamsched.domain.intervals import as_day, as_utc, daterange
from teamsched.domain.ledger import remove_request_leaves, upsert_leave
from teamsched.domain.resolution import resolve_without_leave, standard_workday_length
from teamsched.exceptions import InvalidInputError, NotFoundError
from teamsched.models.base import now_utc
from teamsched.models.enums import LeaveStatus, RequestStatus
from teamsched.schemas.leave import LeaveDay, LeaveRequest, LeaveRequestComment

if TYPE_CHECKING:
    from collections.abc import Callable

    from teamsched.domain.intervals import DayLike
    from teamsched.schemas.employee import Employee

HOLIDAY_CODE = "H"
HOLIDAY_HOURS = 8.0

_ISO_DAY = "%Y-%m-%d"
_NOTICE_DAY = "%d %b %y"


@dataclass
class RequestUpdate:
    """Outcome of a workflow step: a notice to deliver ("" for none) and the request."""

    message: str
    request: LeaveRequest


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _get_request(employee: Employee, request_id: str) -> LeaveRequest:
    request = employee.find_request(request_id)
    if request is None:
        raise NotFoundError("Leave request", request_id)
    return request


def _parse_day(value: str) -> date:
    try:
        return datetime.strptime(value.strip(), _ISO_DAY).date()
    except ValueError:
        raise InvalidInputError(f"Invalid date {value!r}, expected YYYY-MM-DD") from None


def _parse_hours(value: str) -> float:
    if not value.strip():
        return 0.0
    try:
        return float(value)
    except ValueError:
        raise InvalidInputError(f"Invalid hours {value!r}") from None


def _day_status(request: LeaveRequest) -> LeaveStatus:
    return LeaveStatus(request.status.value)


def _outside(request: LeaveRequest, day: date) -> bool:
    return day < request.start_date or day > request.end_date


def _sort_requests(employee: Employee) -> None:
    employee.requests.sort(key=lambda r: (r.start_date, r.end_date, r.id))


def materialize_days(employee: Employee, request: LeaveRequest, hour_offset: float = 0.0) -> list[LeaveDay]:
    """Rebuild the request's days from the days the employee would have worked.

    Days without a scheduled code are skipped. A zero-hour workday takes the
    standard workday length; holiday requests are always eight hours.
    """
    standard = standard_workday_length(employee, request.start_date)
    status = _day_status(request)
    holiday = request.primary_code.casefold() == HOLIDAY_CODE.casefold()
    days: list[LeaveDay] = []
    for current in daterange(request.start_date, request.end_date):
        workday = resolve_without_leave(employee, current, hour_offset)
        if workday is None or not workday.code:
            continue
        hours = workday.hours or standard
        if holiday:
            hours = HOLIDAY_HOURS
        days.append(
            LeaveDay(
                leave_date=as_utc(current),
                code=request.primary_code,
                hours=hours,
                status=status,
                request_id=request.id,
            )
        )
    request.requested_days = days
    return days


def post_to_ledger(employee: Employee, request: LeaveRequest) -> None:
    """Replace the ledger entries owned by the request with its current days.

    An ACTUAL entry already recorded for the same date and code is kept as is.
    """
    remove_request_leaves(employee, request.id)
    actual = {(lv.leave_date, lv.code.casefold()) for lv in employee.leaves if lv.is_actual}
    for day in request.requested_days:
        if not day.code or (day.leave_date, day.code.casefold()) in actual:
            continue
        upsert_leave(
            employee,
            day.leave_date,
            day.code,
            day.hours,
            _day_status(request),
            request_id=request.id,
        )


def _change_range(
    employee: Employee,
    request: LeaveRequest,
    new_start: date,
    new_end: date,
    label: str,
    hour_offset: float,
) -> str:
    if new_start > new_end:
        raise InvalidInputError("Leave request start date must not be after its end date")
    message = ""
    if _outside(request, new_start) or _outside(request, new_end):
        if request.status == RequestStatus.APPROVED:
            request.status = RequestStatus.REQUESTED
            request.clear_approval()
            message = f"Leave Request from {employee.name.last_first}: {label} changed needs reapproval"
        remove_request_leaves(employee, request.id)
    request.start_date = new_start
    request.end_date = new_end
    materialize_days(employee, request, hour_offset)
    if request.status == RequestStatus.APPROVED:
        post_to_ledger(employee, request)
    _sort_requests(employee)
    return message


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------


def new_leave_request(
    employee: Employee,
    code: str,
    start: DayLike,
    end: DayLike,
    hour_offset: float = 0.0,
    *,
    request_id: str | None = None,
    now: datetime | None = None,
) -> LeaveRequest:
    """Create a DRAFT request and materialise its days."""
    start_date, end_date = as_day(start), as_day(end)
    if start_date > end_date:
        raise InvalidInputError("Leave request start date must not be after its end date")
    request = LeaveRequest(
        id=request_id or uuid.uuid4().hex,
        employee_id=employee.id,
        request_date=now or now_utc(),
        primary_code=code,
        start_date=start_date,
        end_date=end_date,
        status=RequestStatus.DRAFT,
    )
    materialize_days(employee, request, hour_offset)
    employee.requests.append(request)
    _sort_requests(employee)
    return request


def delete_leave_request(employee: Employee, request_id: str) -> RequestUpdate:
    """Remove the request and every non-ACTUAL ledger entry it owns."""
    request = _get_request(employee, request_id)
    employee.requests = [r for r in employee.requests if r.id != request_id]
    remove_request_leaves(employee, request_id)
    return RequestUpdate(message="", request=request)


# ---------------------------------------------------------------------------
# Date and code changes
# ---------------------------------------------------------------------------


def change_start_date(
    employee: Employee, request_id: str, start: DayLike, hour_offset: float = 0.0
) -> RequestUpdate:
    request = _get_request(employee, request_id)
    message = _change_range(employee, request, as_day(start), request.end_date, "Starting date", hour_offset)
    return RequestUpdate(message=message, request=request)


def change_end_date(employee: Employee, request_id: str, end: DayLike, hour_offset: float = 0.0) -> RequestUpdate:
    request = _get_request(employee, request_id)
    message = _change_range(employee, request, request.start_date, as_day(end), "Ending Date", hour_offset)
    return RequestUpdate(message=message, request=request)


def change_dates(
    employee: Employee,
    request_id: str,
    start: DayLike,
    end: DayLike,
    hour_offset: float = 0.0,
) -> RequestUpdate:
    request = _get_request(employee, request_id)
    message = _change_range(employee, request, as_day(start), as_day(end), "dates", hour_offset)
    return RequestUpdate(message=message, request=request)


def change_primary_code(employee: Employee, request_id: str, code: str) -> RequestUpdate:
    request = _get_request(employee, request_id)
    request.primary_code = code
    return RequestUpdate(message="", request=request)


def edit_requested_day(
    employee: Employee,
    request_id: str,
    day: DayLike,
    code: str,
    hours: float,
) -> RequestUpdate:
    """Set the code and hours of one requested day; the ledger is not touched."""
    request = _get_request(employee, request_id)
    target = as_day(day)
    hours = hours if code else 0.0
    for leave in request.requested_days:
        if as_day(leave.leave_date) == target:
            leave.code = code
            leave.hours = hours
            break
    else:
        request.requested_days.append(
            LeaveDay(
                leave_date=as_utc(target),
                code=code,
                hours=hours,
                status=_day_status(request),
                request_id=request.id,
            )
        )
        request.requested_days.sort(key=lambda lv: lv.leave_date)
    return RequestUpdate(message="", request=request)


# ---------------------------------------------------------------------------
# Approval workflow
# ---------------------------------------------------------------------------


def submit_request(employee: Employee, request_id: str) -> RequestUpdate:
    """DRAFT -> REQUESTED, with a notice for the approver."""
    request = _get_request(employee, request_id)
    if request.status == RequestStatus.APPROVED:
        raise InvalidInputError("Approved leave requests cannot be resubmitted")
    request.status = RequestStatus.REQUESTED
    request.mark_days(LeaveStatus.REQUESTED)
    message = (
        f"Leave Request: Leave Request from {employee.name.last_first} submitted for approval.  "
        f"Requested Leave Date: {request.start_date.strftime(_NOTICE_DAY)} - "
        f"{request.end_date.strftime(_NOTICE_DAY)}."
    )
    return RequestUpdate(message=message, request=request)


def approve_request(
    employee: Employee,
    request_id: str,
    approver: str,
    *,
    now: datetime | None = None,
) -> RequestUpdate:
    """REQUESTED -> APPROVED; the request's days are posted into the ledger."""
    request = _get_request(employee, request_id)
    if not approver.strip():
        raise InvalidInputError("An approver is required")
    if request.status != RequestStatus.REQUESTED:
        raise InvalidInputError("Only requested leave can be approved")
    request.approved_by = approver
    request.approval_date = now or now_utc()
    request.status = RequestStatus.APPROVED
    request.mark_days(LeaveStatus.APPROVED)
    post_to_ledger(employee, request)
    return RequestUpdate(message="Leave Request: Leave Request approved.", request=request)


def unapprove_request(
    employee: Employee,
    request_id: str,
    comment: str,
    *,
    now: datetime | None = None,
) -> RequestUpdate:
    """APPROVED -> DRAFT with a mandatory comment explaining why."""
    request = _get_request(employee, request_id)
    if not comment.strip():
        raise InvalidInputError("A comment is required to unapprove a leave request")
    if request.status != RequestStatus.APPROVED:
        raise InvalidInputError("Only approved leave requests can be unapproved")
    request.clear_approval()
    request.status = RequestStatus.DRAFT
    request.mark_days(LeaveStatus.REQUESTED)
    for leave in employee.leaves:
        if leave.request_id == request.id and not leave.is_actual:
            leave.status = LeaveStatus.REQUESTED
    request.comments.append(LeaveRequestComment(comment_date=now or now_utc(), comment=comment))
    return RequestUpdate(message=f"Leave Request: Leave Request unapproved.\nComment: {comment}", request=request)


# ---------------------------------------------------------------------------
# Field dispatcher
# ---------------------------------------------------------------------------


def _split(value: str, parts: int, shape: str) -> list[str]:
    pieces = value.split("|")
    if len(pieces) != parts:
        raise InvalidInputError(f"Expected {shape}, got {value!r}")
    return pieces


def update_leave_request(
    employee: Employee,
    request_id: str,
    field: str,
    value: str,
    hour_offset: float = 0.0,
) -> RequestUpdate:
    """Apply a named change to a request.

    ``field`` is one of start/startdate, end/enddate, dates
    ("YYYY-MM-DD|YYYY-MM-DD"), code/primarycode, requested, approve (value is
    the approver), unapprove (value is the comment) and day/requestday
    ("YYYY-MM-DD|code|hours").
    """

    def _dates_from(raw: str) -> RequestUpdate:
        start, end = _split(raw, 2, "start|end")
        return change_dates(employee, request_id, _parse_day(start), _parse_day(end), hour_offset)

    def _day_from(raw: str) -> RequestUpdate:
        day, code, hours = _split(raw, 3, "date|code|hours")
        return edit_requested_day(employee, request_id, _parse_day(day), code, _parse_hours(hours))

    handlers: dict[str, Callable[[], RequestUpdate]] = {
        "start": lambda: change_start_date(employee, request_id, _parse_day(value), hour_offset),
        "end": lambda: change_end_date(employee, request_id, _parse_day(value), hour_offset),
        "dates": lambda: _dates_from(value),
        "code": lambda: change_primary_code(employee, request_id, value),
        "requested": lambda: submit_request(employee, request_id),
        "approve": lambda: approve_request(employee, request_id, value),
        "unapprove": lambda: unapprove_request(employee, request_id, value),
        "day": lambda: _day_from(value),
    }
    aliases = {"startdate": "start", "enddate": "end", "primarycode": "code", "requestday": "day"}

    key = field.strip().lower()
    handler = handlers.get(aliases.get(key, key))
    if handler is None:
        raise InvalidInputError(f"Unknown leave request field: {field!r}")
    return handler()
