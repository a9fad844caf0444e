from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from teamsched.config import reset_settings
from teamsched.db import build_engine, create_tables
from teamsched.domain.timeline import append_assignment
from teamsched.schemas.employee import Employee, EmployeeName
from teamsched.services.audit import set_audit_recorder
from teamsched.services.notification import InMemoryNotifier, set_notifier

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable, Iterator

    from sqlalchemy.ext.asyncio import AsyncEngine

EMPLOYEE_ID = "emp-1001"
SITE = "HQ"
WORKCENTER = "OPS"
HIRE_DATE = date(2024, 1, 1)


def make_employee(employee_id: str = EMPLOYEE_ID, *, first: str = "Jane", last: str = "Doe") -> Employee:
    """An employee with one open Monday-Friday, eight-hour assignment from 2024-01-01."""
    employee = Employee(
        id=employee_id,
        team_id="team-1",
        site_id=SITE,
        email=f"{first.lower()}@example.com",
        name=EmployeeName(first=first, last=last),
    )
    append_assignment(employee, SITE, WORKCENTER, HIRE_DATE)
    return employee


@pytest.fixture
def employee() -> Employee:
    return make_employee()


@pytest.fixture
def employee_factory() -> Callable[..., Employee]:
    return make_employee


@pytest.fixture(autouse=True)
def _reset_collaborators() -> Iterator[None]:
    """Fresh settings, audit recorder and notifier for every test."""
    reset_settings()
    set_audit_recorder(None)
    set_notifier(InMemoryNotifier())
    yield
    reset_settings()
    set_audit_recorder(None)
    set_notifier(InMemoryNotifier())


@pytest.fixture
async def engine() -> AsyncIterator[AsyncEngine]:
    """A private in-memory SQLite database with the tables created."""
    _engine = build_engine("sqlite+aiosqlite://")
    await create_tables(_engine)
    yield _engine
    await _engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory: async_sessionmaker[AsyncSession]) -> AsyncIterator[AsyncSession]:
    async with session_factory() as session:
        yield session
