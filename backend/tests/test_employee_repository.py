"""Tests for the employee document store."""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import select
from sqlmodel import col

from teamsched.domain.timeline import append_assignment
from teamsched.exceptions import ConflictError, NotFoundError
from teamsched.models import AuditLog, EmployeeDocument
from teamsched.schemas.work import Work
from teamsched.services.employee import (
    archive_employee,
    create_employee,
    list_employee_ids,
    load_employee,
    save_employee,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    from teamsched.schemas.employee import Employee


# ---------------------------------------------------------------------------
# Create / load / save
# ---------------------------------------------------------------------------


async def test_create_and_load_round_trip(db_session: AsyncSession, employee: Employee) -> None:
    created = await create_employee(db_session, employee, actor="admin")
    assert created.revision == 1

    loaded = await load_employee(db_session, employee.id)

    assert loaded.revision == 1
    assert loaded.name.last_first == "Doe, Jane"
    assert loaded.assignments == employee.assignments


async def test_create_duplicate_raises_conflict(db_session: AsyncSession, employee: Employee) -> None:
    await create_employee(db_session, employee)
    with pytest.raises(ConflictError) as exc_info:
        await create_employee(db_session, employee.model_copy(deep=True))
    assert exc_info.value.status_code == 409


async def test_load_missing_raises_not_found(db_session: AsyncSession) -> None:
    with pytest.raises(NotFoundError):
        await load_employee(db_session, "nobody")


async def test_save_bumps_revision(db_session: AsyncSession, employee: Employee) -> None:
    await create_employee(db_session, employee)
    loaded = await load_employee(db_session, employee.id)

    append_assignment(loaded, "HQ", "LAB", date(2024, 6, 1))
    await save_employee(db_session, loaded)
    await db_session.commit()

    assert loaded.revision == 2
    reloaded = await load_employee(db_session, employee.id)
    assert reloaded.revision == 2
    assert [a.workcenter for a in reloaded.assignments] == ["OPS", "LAB"]


async def test_stale_revision_raises_conflict(
    session_factory: async_sessionmaker[AsyncSession],
    employee: Employee,
) -> None:
    async with session_factory() as session:
        await create_employee(session, employee)

    async with session_factory() as first, session_factory() as second:
        mine = await load_employee(first, employee.id)
        theirs = await load_employee(second, employee.id)

        append_assignment(mine, "HQ", "LAB", date(2024, 6, 1))
        await save_employee(first, mine)
        await first.commit()

        append_assignment(theirs, "HQ", "QA", date(2024, 7, 1))
        with pytest.raises(ConflictError):
            await save_employee(second, theirs)

    async with session_factory() as session:
        stored = await load_employee(session, employee.id)
    assert [a.workcenter for a in stored.assignments] == ["OPS", "LAB"]


async def test_work_history_is_attached_not_stored(db_session: AsyncSession, employee: Employee) -> None:
    await create_employee(db_session, employee)
    work = [Work(date_worked=date(2024, 3, 4), charge_number="CN-100", hours=8.0)]

    loaded = await load_employee(db_session, employee.id, work=work)
    await save_employee(db_session, loaded)
    await db_session.commit()

    assert loaded.work == work
    document = await db_session.get(EmployeeDocument, employee.id, populate_existing=True)
    assert document is not None
    assert "work" not in document.payload


async def test_load_expands_legacy_document(db_session: AsyncSession) -> None:
    db_session.add(
        EmployeeDocument(
            id="emp-legacy",
            site_id="HQ",
            payload={
                "id": "emp-legacy",
                "site_id": "HQ",
                "data": {
                    "assignments": [{"id": 1, "site": "HQ", "workcenter": "OPS", "start_date": "2020-01-01"}],
                    "labor_codes": [{"charge_number": "CN-100", "extension": ""}],
                },
            },
        )
    )
    await db_session.commit()

    loaded = await load_employee(db_session, "emp-legacy")
    assert loaded.data is None
    assert loaded.assignments[0].labor_codes[0].charge_number == "CN-100"

    await save_employee(db_session, loaded)
    await db_session.commit()
    document = await db_session.get(EmployeeDocument, "emp-legacy", populate_existing=True)
    assert document is not None
    assert document.payload["data"] is None
    assert document.payload["assignments"][0]["labor_codes"] == [{"charge_number": "CN-100", "extension": ""}]


# ---------------------------------------------------------------------------
# Listing and archiving
# ---------------------------------------------------------------------------


async def test_list_employee_ids_filters(
    db_session: AsyncSession,
    employee_factory: Callable[..., Employee],
) -> None:
    await create_employee(db_session, employee_factory("emp-2"))
    await create_employee(db_session, employee_factory("emp-1"))
    other = employee_factory("emp-3")
    other.team_id = "team-2"
    await create_employee(db_session, other)

    assert await list_employee_ids(db_session) == ["emp-1", "emp-2", "emp-3"]
    assert await list_employee_ids(db_session, team_id="team-2") == ["emp-3"]
    assert await list_employee_ids(db_session, site_id="REMOTE") == []


async def test_archive_employee(db_session: AsyncSession, employee: Employee) -> None:
    await create_employee(db_session, employee)

    await archive_employee(db_session, employee, actor="admin")

    with pytest.raises(NotFoundError):
        await load_employee(db_session, employee.id)
    result = await db_session.execute(
        select(AuditLog).where(col(AuditLog.employee_id) == employee.id).order_by(col(AuditLog.created_at))
    )
    actions = [entry.action for entry in result.scalars().all()]
    assert actions == ["CREATE", "DELETE"]


async def test_archive_missing_employee_raises_not_found(db_session: AsyncSession, employee: Employee) -> None:
    with pytest.raises(NotFoundError):
        await archive_employee(db_session, employee)
