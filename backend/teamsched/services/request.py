# ruff: noqa: TC003
from __future__ import annotations

import logging
from datetime import date
from typing import TYPE_CHECKING

from teamsched.domain import requests as workflow
from teamsched.models.enums import AuditAction, AuditCategory, AuditEntityType
from teamsched.services.audit import get_audit_recorder, model_to_audit_dict
from teamsched.services.employee import load_employee, save_employee
from teamsched.services.notification import get_notifier

if TYPE_CHECKING:
    from collections.abc import Iterable

    from sqlalchemy.ext.asyncio import AsyncSession

    from teamsched.domain.requests import RequestUpdate
    from teamsched.schemas.leave import LeaveRequest
    from teamsched.schemas.work import Work
    from teamsched.services.audit import AuditRecorder
    from teamsched.services.notification import Notifier

logger = logging.getLogger(__name__)

# Field name -> (audit action, category, title). Unlisted fields are INFO updates.
_FIELD_AUDIT: dict[str, tuple[AuditAction, AuditCategory, str]] = {
    "requested": (AuditAction.SUBMIT, AuditCategory.INFO, "Leave request submitted"),
    "approve": (AuditAction.APPROVE, AuditCategory.INFO, "Leave request approved"),
    "unapprove": (AuditAction.UNAPPROVE, AuditCategory.INFO, "Leave request unapproved"),
    "code": (AuditAction.UPDATE, AuditCategory.DEBUG, "Leave request code changed"),
    "primarycode": (AuditAction.UPDATE, AuditCategory.DEBUG, "Leave request code changed"),
    "day": (AuditAction.UPDATE, AuditCategory.DEBUG, "Leave request day edited"),
    "requestday": (AuditAction.UPDATE, AuditCategory.DEBUG, "Leave request day edited"),
}


async def create_leave_request(
    session: AsyncSession,
    employee_id: str,
    code: str,
    start: date,
    end: date,
    *,
    actor: str = "",
    hour_offset: float = 0.0,
    work: Iterable[Work] | None = None,
    recorder: AuditRecorder | None = None,
) -> LeaveRequest:
    """Create a DRAFT request for the employee and persist it."""
    recorder = recorder or get_audit_recorder()
    employee = await load_employee(session, employee_id, work=work)

    request = workflow.new_leave_request(employee, code, start, end, hour_offset)
    await save_employee(session, employee)
    await session.flush()

    await recorder.record(
        session,
        employee=employee,
        entity_type=AuditEntityType.LEAVE_REQUEST,
        entity_id=request.id,
        action=AuditAction.CREATE,
        actor=actor,
        title="Leave request created",
        after_json=model_to_audit_dict(request),
    )
    await session.commit()
    logger.info("Created leave request %s for employee %s", request.id, employee_id)
    return request


async def update_leave_request(
    session: AsyncSession,
    employee_id: str,
    request_id: str,
    field: str,
    value: str,
    *,
    actor: str = "",
    hour_offset: float = 0.0,
    work: Iterable[Work] | None = None,
    recorder: AuditRecorder | None = None,
    notifier: Notifier | None = None,
) -> RequestUpdate:
    """Apply a named change, persist it and deliver any resulting notice.

    The notice is sent only after the change has been committed.
    """
    recorder = recorder or get_audit_recorder()
    notifier = notifier or get_notifier()
    employee = await load_employee(session, employee_id, work=work)
    before_dict = model_to_audit_dict(employee.find_request(request_id))

    update = workflow.update_leave_request(employee, request_id, field, value, hour_offset)
    await save_employee(session, employee)
    await session.flush()

    action, category, title = _FIELD_AUDIT.get(
        field.strip().lower(), (AuditAction.UPDATE, AuditCategory.INFO, "Leave request updated")
    )
    await recorder.record(
        session,
        employee=employee,
        entity_type=AuditEntityType.LEAVE_REQUEST,
        entity_id=request_id,
        action=action,
        actor=actor,
        title=title,
        message=update.message,
        category=category,
        before_json=before_dict,
        after_json=model_to_audit_dict(update.request),
    )
    await session.commit()

    if update.message:
        await notifier.notify(employee, update.message)
    return update


async def delete_leave_request(
    session: AsyncSession,
    employee_id: str,
    request_id: str,
    *,
    actor: str = "",
    recorder: AuditRecorder | None = None,
) -> LeaveRequest:
    """Delete a request and the pending ledger entries it owns."""
    recorder = recorder or get_audit_recorder()
    employee = await load_employee(session, employee_id)

    update = workflow.delete_leave_request(employee, request_id)
    await save_employee(session, employee)
    await session.flush()

    await recorder.record(
        session,
        employee=employee,
        entity_type=AuditEntityType.LEAVE_REQUEST,
        entity_id=request_id,
        action=AuditAction.DELETE,
        actor=actor,
        title="Leave request deleted",
        before_json=model_to_audit_dict(update.request),
    )
    await session.commit()
    logger.info("Deleted leave request %s for employee %s", request_id, employee_id)
    return update.request
