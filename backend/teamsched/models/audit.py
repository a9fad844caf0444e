# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from teamsched.models.base import now_utc


class AuditLog(SQLModel, table=True):
    """Immutable record of a significant change to an employee aggregate."""

    __tablename__ = "audit_log"
    __table_args__ = (sa.Index("ix_audit_entity", "entity_type", "entity_id"),)

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True, sa_type=sa.Uuid)
    employee_id: str = Field(max_length=64, index=True)
    site_id: str = Field(default="", max_length=64)
    actor: str = Field(default="", max_length=255)
    entity_type: str = Field(max_length=50)
    entity_id: str = Field(max_length=64)
    action: str = Field(max_length=50)
    category: str = Field(default="INFO", max_length=20)
    title: str = Field(default="", max_length=255)
    message: str = ""
    before_json: dict[str, Any] | None = Field(default=None, sa_type=sa.JSON)
    after_json: dict[str, Any] | None = Field(default=None, sa_type=sa.JSON)
    created_at: datetime = Field(
        default_factory=now_utc,
        index=True,
        sa_type=sa.DateTime(timezone=True),  # ty: ignore[invalid-argument-type]
        sa_column_kwargs={"server_default": sa.func.now()},
    )
