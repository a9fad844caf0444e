# ruff: noqa: TC003
from __future__ import annotations

from datetime import date, datetime
from typing import TYPE_CHECKING

from teamsched.config import get_settings
from teamsched.domain import ledger
from teamsched.exceptions import NotFoundError
from teamsched.models.enums import AuditAction, AuditCategory, AuditEntityType, LeaveStatus
from teamsched.services.audit import get_audit_recorder, model_to_audit_dict
from teamsched.services.employee import load_employee, save_employee

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from teamsched.schemas.leave import AnnualLeave, LeaveDay
    from teamsched.services.audit import AuditRecorder


async def record_leave(
    session: AsyncSession,
    employee_id: str,
    leave_date: date | datetime,
    code: str,
    hours: float,
    status: LeaveStatus | str = LeaveStatus.ACTUAL,
    *,
    request_id: str = "",
    actor: str = "",
    recorder: AuditRecorder | None = None,
) -> LeaveDay:
    """Upsert a ledger entry for (date, code)."""
    recorder = recorder or get_audit_recorder()
    employee = await load_employee(session, employee_id)
    prior = {lv.id: model_to_audit_dict(lv) for lv in employee.leaves}

    leave = ledger.upsert_leave(employee, leave_date, code, hours, status, request_id=request_id)
    await save_employee(session, employee)
    await session.flush()

    before_dict = prior.get(leave.id)
    await recorder.record(
        session,
        employee=employee,
        entity_type=AuditEntityType.LEAVE,
        entity_id=leave.id,
        action=AuditAction.UPDATE if before_dict is not None else AuditAction.CREATE,
        actor=actor,
        title="Leave recorded",
        category=AuditCategory.DEBUG,
        before_json=before_dict,
        after_json=model_to_audit_dict(leave),
    )
    await session.commit()
    return leave


async def delete_leave(
    session: AsyncSession,
    employee_id: str,
    leave_id: int,
    *,
    actor: str = "",
    recorder: AuditRecorder | None = None,
) -> LeaveDay:
    """Remove one ledger entry. Raises NotFoundError for an unknown id."""
    recorder = recorder or get_audit_recorder()
    employee = await load_employee(session, employee_id)

    removed = ledger.delete_leave(employee, leave_id)
    if removed is None:
        raise NotFoundError("Leave", leave_id)
    await save_employee(session, employee)
    await session.flush()

    await recorder.record(
        session,
        employee=employee,
        entity_type=AuditEntityType.LEAVE,
        entity_id=removed.id,
        action=AuditAction.DELETE,
        actor=actor,
        title="Leave deleted",
        before_json=model_to_audit_dict(removed),
    )
    await session.commit()
    return removed


async def ensure_balances(
    session: AsyncSession,
    employee_id: str,
    year: int,
    *,
    default_annual: float | None = None,
    actor: str = "",
    recorder: AuditRecorder | None = None,
) -> AnnualLeave:
    """Make sure the employee has a balance for ``year``, creating it with carryover."""
    recorder = recorder or get_audit_recorder()
    if default_annual is None:
        default_annual = get_settings().default_annual_leave_hours
    employee = await load_employee(session, employee_id)

    existing = ledger.find_balance(employee, year)
    if existing is not None:
        return existing

    balance = ledger.ensure_year_balance(employee, year, default_annual)
    await save_employee(session, employee)
    await session.flush()

    await recorder.record(
        session,
        employee=employee,
        entity_type=AuditEntityType.BALANCE,
        entity_id=year,
        action=AuditAction.CREATE,
        actor=actor,
        title="Annual leave balance created",
        message=f"{balance.annual:g} hours, {balance.carryover:g} carried over",
        after_json=model_to_audit_dict(balance),
    )
    await session.commit()
    return balance
