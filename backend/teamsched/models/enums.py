from __future__ import annotations

import enum


class LeaveStatus(enum.StrEnum):
    """Status of a single leave ledger entry."""

    DRAFT = "DRAFT"
    REQUESTED = "REQUESTED"
    APPROVED = "APPROVED"
    ACTUAL = "ACTUAL"


class RequestStatus(enum.StrEnum):
    """State machine for leave requests."""

    DRAFT = "DRAFT"
    REQUESTED = "REQUESTED"
    APPROVED = "APPROVED"


class AuditEntityType(enum.StrEnum):
    """Entity type recorded in the audit log."""

    EMPLOYEE = "EMPLOYEE"
    ASSIGNMENT = "ASSIGNMENT"
    LEAVE = "LEAVE"
    LEAVE_REQUEST = "LEAVE_REQUEST"
    BALANCE = "BALANCE"


class AuditAction(enum.StrEnum):
    """Action recorded in the audit log."""

    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    SUBMIT = "SUBMIT"
    APPROVE = "APPROVE"
    UNAPPROVE = "UNAPPROVE"
    PURGE = "PURGE"


class AuditCategory(enum.StrEnum):
    """Severity bucket of an audit entry."""

    INFO = "INFO"
    DEBUG = "DEBUG"
