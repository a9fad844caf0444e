# ruff: noqa: TC003
from __future__ import annotations

import logging
from datetime import date
from typing import TYPE_CHECKING

from teamsched.domain import timeline
from teamsched.models.enums import AuditAction, AuditEntityType
from teamsched.services.audit import get_audit_recorder, model_to_audit_dict
from teamsched.services.employee import load_employee, save_employee

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from teamsched.schemas.schedule import Assignment
    from teamsched.services.audit import AuditRecorder

logger = logging.getLogger(__name__)


async def add_assignment(
    session: AsyncSession,
    employee_id: str,
    site: str,
    workcenter: str,
    start: date,
    *,
    actor: str = "",
    recorder: AuditRecorder | None = None,
) -> Assignment:
    """Start a new assignment, closing the current one the day before ``start``."""
    recorder = recorder or get_audit_recorder()
    employee = await load_employee(session, employee_id)

    assignment = timeline.append_assignment(employee, site, workcenter, start)
    await save_employee(session, employee)
    await session.flush()

    await recorder.record(
        session,
        employee=employee,
        entity_type=AuditEntityType.ASSIGNMENT,
        entity_id=assignment.id,
        action=AuditAction.CREATE,
        actor=actor,
        title="Assignment added",
        message=f"{site}/{workcenter} from {start.isoformat()}",
        after_json=model_to_audit_dict(assignment),
    )
    await session.commit()
    return assignment


async def remove_assignment(
    session: AsyncSession,
    employee_id: str,
    assignment_id: int,
    *,
    actor: str = "",
    recorder: AuditRecorder | None = None,
) -> Assignment | None:
    """Remove an assignment; returns None (and writes nothing) when it cannot be removed."""
    recorder = recorder or get_audit_recorder()
    employee = await load_employee(session, employee_id)

    removed = timeline.remove_assignment(employee, assignment_id)
    if removed is None:
        logger.info("Assignment %s of employee %s not removed", assignment_id, employee_id)
        return None
    await save_employee(session, employee)
    await session.flush()

    await recorder.record(
        session,
        employee=employee,
        entity_type=AuditEntityType.ASSIGNMENT,
        entity_id=removed.id,
        action=AuditAction.DELETE,
        actor=actor,
        title="Assignment removed",
        before_json=model_to_audit_dict(removed),
    )
    await session.commit()
    return removed
