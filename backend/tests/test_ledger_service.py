"""Tests for the persisted ledger and assignment operations."""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING

import pytest

from teamsched.exceptions import NotFoundError
from teamsched.models import LeaveStatus
from teamsched.services.assignment import add_assignment, remove_assignment
from teamsched.services.employee import create_employee, load_employee
from teamsched.services.ledger import delete_leave, ensure_balances, record_leave

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from teamsched.schemas.employee import Employee


@pytest.fixture
async def stored_employee(db_session: AsyncSession, employee: Employee) -> Employee:
    return await create_employee(db_session, employee)


async def test_record_leave_upserts(db_session: AsyncSession, stored_employee: Employee) -> None:
    first = await record_leave(db_session, stored_employee.id, date(2024, 3, 4), "V", 8.0)
    second = await record_leave(db_session, stored_employee.id, date(2024, 3, 4), "v", 4.0, "approved")

    assert second.id == first.id
    stored = await load_employee(db_session, stored_employee.id)
    assert len(stored.leaves) == 1
    assert (stored.leaves[0].hours, stored.leaves[0].status) == (4.0, LeaveStatus.APPROVED)


async def test_delete_leave(db_session: AsyncSession, stored_employee: Employee) -> None:
    leave = await record_leave(db_session, stored_employee.id, date(2024, 3, 4), "V", 8.0)

    removed = await delete_leave(db_session, stored_employee.id, leave.id)

    assert removed.id == leave.id
    with pytest.raises(NotFoundError):
        await delete_leave(db_session, stored_employee.id, leave.id)


async def test_ensure_balances_carries_over(db_session: AsyncSession, stored_employee: Employee) -> None:
    first = await ensure_balances(db_session, stored_employee.id, 2024)
    for day in range(4, 9):
        await record_leave(db_session, stored_employee.id, date(2024, 3, day), "V", 8.0, LeaveStatus.ACTUAL)

    following = await ensure_balances(db_session, stored_employee.id, 2025)
    again = await ensure_balances(db_session, stored_employee.id, 2025)

    assert (first.annual, first.carryover) == (120.0, 0.0)
    assert (following.annual, following.carryover) == (120.0, 80.0)
    assert again == following
    stored = await load_employee(db_session, stored_employee.id)
    assert [b.year for b in stored.balances] == [2024, 2025]


async def test_assignment_add_and_remove(db_session: AsyncSession, stored_employee: Employee) -> None:
    added = await add_assignment(db_session, stored_employee.id, "HQ", "LAB", date(2024, 6, 1))
    assert added.id == 2

    assert await remove_assignment(db_session, stored_employee.id, 1) is None
    removed = await remove_assignment(db_session, stored_employee.id, 2)

    assert removed is not None
    stored = await load_employee(db_session, stored_employee.id)
    assert len(stored.assignments) == 1
    assert stored.assignments[0].is_open
