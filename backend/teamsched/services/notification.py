# ruff: noqa: TC003
from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from pydantic import BaseModel, Field

from teamsched.models.base import now_utc

if TYPE_CHECKING:
    from teamsched.schemas.employee import Employee

logger = logging.getLogger(__name__)


class Notice(BaseModel):
    """A message addressed to an employee."""

    employee_id: str
    email: str = ""
    recipient: str = ""
    message: str
    sent_at: datetime = Field(default_factory=now_utc)


@runtime_checkable
class Notifier(Protocol):
    """Interface for delivering workflow notices."""

    async def notify(self, employee: Employee, message: str) -> None:
        """Deliver ``message`` about ``employee``."""
        ...


class InMemoryNotifier:
    """Outbox stub for development and tests."""

    def __init__(self) -> None:
        self.outbox: list[Notice] = []

    async def notify(self, employee: Employee, message: str) -> None:
        notice = Notice(
            employee_id=employee.id,
            email=employee.email,
            recipient=employee.name.last_first,
            message=message,
        )
        self.outbox.append(notice)
        logger.info("Queued notice for employee %s", employee.id)

    def clear(self) -> None:
        self.outbox.clear()


_notifier: Notifier = InMemoryNotifier()


def get_notifier() -> Notifier:
    return _notifier


def set_notifier(notifier: Notifier) -> None:
    """Override the notifier (for testing or production wiring)."""
    global _notifier
    _notifier = notifier
