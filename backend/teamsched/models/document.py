from __future__ import annotations

from typing import Any

import sqlalchemy as sa
from sqlmodel import Field

from teamsched.models.base import TimestampMixin


class EmployeeDocument(TimestampMixin, table=True):
    """One employee aggregate stored as a JSON document.

    ``version`` is bumped on every write and guards read-modify-write cycles.
    """

    __tablename__ = "employee_document"

    id: str = Field(primary_key=True, max_length=64)
    team_id: str = Field(default="", max_length=64, index=True)
    site_id: str = Field(default="", max_length=64, index=True)
    payload: dict[str, Any] = Field(default_factory=dict, sa_type=sa.JSON)
    version: int = Field(default=1, sa_column_kwargs={"server_default": "1"})
