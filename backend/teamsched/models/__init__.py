from sqlmodel import SQLModel

from teamsched.models.audit import AuditLog
from teamsched.models.base import TimestampMixin
from teamsched.models.document import EmployeeDocument
from teamsched.models.enums import (
    AuditAction,
    AuditCategory,
    AuditEntityType,
    LeaveStatus,
    RequestStatus,
)

__all__ = [
    "AuditAction",
    "AuditCategory",
    "AuditEntityType",
    "AuditLog",
    "EmployeeDocument",
    "LeaveStatus",
    "RequestStatus",
    "SQLModel",
    "TimestampMixin",
]
