# ruff: noqa: TC003
from __future__ import annotations

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator

from teamsched.domain.intervals import as_utc
from teamsched.models.base import now_utc
from teamsched.models.enums import LeaveStatus, RequestStatus


def _upper(value: Any) -> Any:
    if isinstance(value, str):
        return value.strip().upper()
    return value


class LeaveDay(BaseModel):
    """A day-level leave record in the ledger or in a request."""

    id: int = 0
    leave_date: datetime
    code: str
    hours: float = 0.0
    status: LeaveStatus = LeaveStatus.DRAFT
    request_id: str = ""

    @field_validator("status", mode="before")
    @classmethod
    def _normalize_status(cls, value: Any) -> Any:
        return _upper(value)

    @field_validator("leave_date", mode="before")
    @classmethod
    def _date_to_midnight(cls, value: Any) -> Any:
        if isinstance(value, date) and not isinstance(value, datetime):
            return as_utc(value)
        return value

    @field_validator("leave_date")
    @classmethod
    def _ensure_utc(cls, value: datetime) -> datetime:
        return as_utc(value)

    @property
    def is_actual(self) -> bool:
        return self.status == LeaveStatus.ACTUAL


class AnnualLeave(BaseModel):
    """Annual leave allotment and the hours carried in from the prior year."""

    year: int
    annual: float = 0.0
    carryover: float = 0.0


class LeaveRequestComment(BaseModel):
    comment_date: datetime = Field(default_factory=now_utc)
    comment: str


class LeaveRequest(BaseModel):
    """A proposal for leave over an inclusive date range."""

    id: str
    employee_id: str
    request_date: datetime = Field(default_factory=now_utc)
    primary_code: str
    start_date: date
    end_date: date
    status: RequestStatus = RequestStatus.DRAFT
    approved_by: str = ""
    approval_date: datetime | None = None
    requested_days: list[LeaveDay] = Field(default_factory=list)
    comments: list[LeaveRequestComment] = Field(default_factory=list)

    @field_validator("status", mode="before")
    @classmethod
    def _normalize_status(cls, value: Any) -> Any:
        return _upper(value)

    def clear_approval(self) -> None:
        self.approved_by = ""
        self.approval_date = None

    def mark_days(self, status: LeaveStatus) -> None:
        for day in self.requested_days:
            day.status = status
