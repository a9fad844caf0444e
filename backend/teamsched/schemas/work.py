# ruff: noqa: TC003
from __future__ import annotations

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, field_validator

from teamsched.domain.intervals import as_utc


class Work(BaseModel):
    """Hours actually charged on a day, supplied by timekeeping."""

    date_worked: datetime
    charge_number: str = ""
    extension: str = ""
    pay_code: int = 0
    hours: float = 0.0

    @field_validator("date_worked", mode="before")
    @classmethod
    def _date_to_midnight(cls, value: Any) -> Any:
        if isinstance(value, date) and not isinstance(value, datetime):
            return as_utc(value)
        return value

    @field_validator("date_worked")
    @classmethod
    def _ensure_utc(cls, value: datetime) -> datetime:
        return as_utc(value)


class LaborCode(BaseModel):
    """A team-level charge number with the period it may be charged."""

    charge_number: str
    extension: str = ""
    start_date: date
    end_date: date


class CompareCode(BaseModel):
    """A workday code and whether it denotes leave rather than work."""

    code: str
    is_leave: bool = False
