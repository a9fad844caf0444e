"""Employee document store: load, save and lifecycle of the aggregate."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlmodel import col

from teamsched.domain.migration import expand_legacy_payload
from teamsched.exceptions import ConflictError, NotFoundError
from teamsched.models.base import now_utc
from teamsched.models.document import EmployeeDocument
from teamsched.models.enums import AuditAction, AuditEntityType
from teamsched.schemas.employee import Employee
from teamsched.services.audit import get_audit_recorder

if TYPE_CHECKING:
    from collections.abc import Iterable

    from sqlalchemy.ext.asyncio import AsyncSession

    from teamsched.schemas.work import Work
    from teamsched.services.audit import AuditRecorder

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _to_payload(employee: Employee) -> dict[str, Any]:
    return employee.model_dump(mode="json")


async def _get_document_or_404(session: AsyncSession, employee_id: str) -> EmployeeDocument:
    result = await session.execute(
        select(EmployeeDocument)
        .where(col(EmployeeDocument.id) == employee_id)
        .execution_options(populate_existing=True)
    )
    document = result.scalar_one_or_none()
    if document is None:
        raise NotFoundError("Employee", employee_id)
    return document


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


async def load_employee(
    session: AsyncSession,
    employee_id: str,
    *,
    work: Iterable[Work] | None = None,
) -> Employee:
    """Decode the stored aggregate and attach the caller's work history.

    Legacy documents are expanded here, once; the expanded form is written
    back on the next save.
    """
    document = await _get_document_or_404(session, employee_id)
    employee = Employee.model_validate(document.payload)
    employee.revision = document.version
    employee.work = list(work or [])
    expand_legacy_payload(employee)
    return employee


async def save_employee(session: AsyncSession, employee: Employee) -> Employee:
    """Write the aggregate back if nobody else has saved it since it was loaded.

    The caller owns the transaction. A stale ``revision`` rolls the session
    back and raises ConflictError.
    """
    result = await session.execute(
        update(EmployeeDocument)
        .where(
            col(EmployeeDocument.id) == employee.id,
            col(EmployeeDocument.version) == employee.revision,
        )
        .values(
            team_id=employee.team_id,
            site_id=employee.site_id,
            payload=_to_payload(employee),
            version=employee.revision + 1,
            updated_at=now_utc(),
        )
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        await session.rollback()
        raise ConflictError(f"Employee {employee.id} was changed by another writer (revision {employee.revision})")
    employee.revision += 1
    return employee


async def create_employee(
    session: AsyncSession,
    employee: Employee,
    *,
    actor: str = "",
    recorder: AuditRecorder | None = None,
) -> Employee:
    """Store a new aggregate at version 1."""
    recorder = recorder or get_audit_recorder()
    if await session.get(EmployeeDocument, employee.id) is not None:
        raise ConflictError(f"Employee {employee.id} already exists")
    document = EmployeeDocument(
        id=employee.id,
        team_id=employee.team_id,
        site_id=employee.site_id,
        payload=_to_payload(employee),
        version=1,
    )
    session.add(document)
    try:
        await session.flush()
    except IntegrityError:
        await session.rollback()
        raise ConflictError(f"Employee {employee.id} already exists") from None
    employee.revision = document.version

    await recorder.record(
        session,
        employee=employee,
        entity_type=AuditEntityType.EMPLOYEE,
        entity_id=employee.id,
        action=AuditAction.CREATE,
        actor=actor,
        title="Employee created",
        message=employee.name.last_first,
        after_json=_to_payload(employee),
    )
    await session.commit()
    logger.info("Created employee %s", employee.id)
    return employee


async def list_employee_ids(
    session: AsyncSession,
    *,
    team_id: str | None = None,
    site_id: str | None = None,
) -> list[str]:
    query = select(EmployeeDocument.id).order_by(col(EmployeeDocument.id))
    if team_id is not None:
        query = query.where(col(EmployeeDocument.team_id) == team_id)
    if site_id is not None:
        query = query.where(col(EmployeeDocument.site_id) == site_id)
    result = await session.execute(query)
    return list(result.scalars().all())


async def archive_employee(
    session: AsyncSession,
    employee: Employee,
    *,
    actor: str = "",
    action: AuditAction = AuditAction.DELETE,
    recorder: AuditRecorder | None = None,
) -> None:
    """Remove the stored document, keeping its final state in the audit log."""
    recorder = recorder or get_audit_recorder()
    result = await session.execute(
        delete(EmployeeDocument)
        .where(col(EmployeeDocument.id) == employee.id)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        raise NotFoundError("Employee", employee.id)

    await recorder.record(
        session,
        employee=employee,
        entity_type=AuditEntityType.EMPLOYEE,
        entity_id=employee.id,
        action=action,
        actor=actor,
        title="Employee archived",
        message=employee.name.last_first,
        before_json=_to_payload(employee),
    )
    await session.commit()
    logger.info("Archived employee %s", employee.id)
