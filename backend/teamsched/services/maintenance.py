"""Scheduled upkeep: year-start balances and purging of old history."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import TYPE_CHECKING

from teamsched.config import get_settings
from teamsched.domain import ledger, timeline
from teamsched.models.enums import AuditAction, AuditCategory, AuditEntityType
from teamsched.services.audit import get_audit_recorder
from teamsched.services.employee import archive_employee, list_employee_ids, load_employee, save_employee

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from teamsched.services.audit import AuditRecorder

logger = logging.getLogger(__name__)

SYSTEM_ACTOR = "system"


# ---------------------------------------------------------------------------
# Result dataclasses
# ---------------------------------------------------------------------------


@dataclass
class BalanceRunResult:
    """Summary of a year-start balance run."""

    year: int
    processed: int = 0
    created: int = 0
    skipped: int = 0
    errors: int = 0


@dataclass
class PurgeRunResult:
    """Summary of a purge run."""

    before: date
    processed: int = 0
    purged: int = 0
    archived: int = 0
    errors: int = 0


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


async def run_year_start_balances(
    session: AsyncSession,
    year: int,
    *,
    default_annual: float | None = None,
    recorder: AuditRecorder | None = None,
) -> BalanceRunResult:
    """Create the ``year`` balance, with carryover, for every employee missing one.

    Safe to re-run: employees that already have the balance are skipped.
    Each employee is committed separately so one failure does not stop the run.
    """
    recorder = recorder or get_audit_recorder()
    if default_annual is None:
        default_annual = get_settings().default_annual_leave_hours
    result = BalanceRunResult(year=year)

    for employee_id in await list_employee_ids(session):
        result.processed += 1
        try:
            employee = await load_employee(session, employee_id)
            if ledger.find_balance(employee, year) is not None:
                result.skipped += 1
                continue

            balance = ledger.ensure_year_balance(employee, year, default_annual)
            await save_employee(session, employee)
            await session.flush()
            await recorder.record(
                session,
                employee=employee,
                entity_type=AuditEntityType.BALANCE,
                entity_id=year,
                action=AuditAction.CREATE,
                actor=SYSTEM_ACTOR,
                title="Annual leave balance created",
                message=f"{balance.annual:g} hours, {balance.carryover:g} carried over",
                category=AuditCategory.DEBUG,
                after_json=balance.model_dump(mode="json"),
            )
            await session.commit()
            result.created += 1
        except Exception:
            logger.exception("Error creating %d balance for employee=%s", year, employee_id)
            await session.rollback()
            result.errors += 1

    return result


async def run_purge(
    session: AsyncSession,
    before: date,
    *,
    recorder: AuditRecorder | None = None,
) -> PurgeRunResult:
    """Drop history older than ``before`` and archive separated employees."""
    recorder = recorder or get_audit_recorder()
    result = PurgeRunResult(before=before)

    for employee_id in await list_employee_ids(session):
        result.processed += 1
        try:
            employee = await load_employee(session, employee_id)
            if timeline.purge_before(employee, before):
                await archive_employee(
                    session,
                    employee,
                    actor=SYSTEM_ACTOR,
                    action=AuditAction.PURGE,
                    recorder=recorder,
                )
                result.archived += 1
                continue

            await save_employee(session, employee)
            await session.flush()
            await recorder.record(
                session,
                employee=employee,
                entity_type=AuditEntityType.EMPLOYEE,
                entity_id=employee.id,
                action=AuditAction.PURGE,
                actor=SYSTEM_ACTOR,
                title="History purged",
                message=f"Records before {before.isoformat()} removed",
                category=AuditCategory.DEBUG,
            )
            await session.commit()
            result.purged += 1
        except Exception:
            logger.exception("Error purging employee=%s before %s", employee_id, before)
            await session.rollback()
            result.errors += 1

    return result
