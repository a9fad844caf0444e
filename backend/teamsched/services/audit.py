from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from teamsched.config import get_settings
from teamsched.models.audit import AuditLog
from teamsched.models.enums import AuditCategory

if TYPE_CHECKING:
    from pydantic import BaseModel
    from sqlalchemy.ext.asyncio import AsyncSession

    from teamsched.config import Settings
    from teamsched.models.enums import AuditAction, AuditEntityType
    from teamsched.schemas.employee import Employee


@dataclass(frozen=True)
class AuditSettings:
    """Audit verbosity, passed to the recorder explicitly."""

    include_debug: bool = False

    @classmethod
    def from_settings(cls, settings: Settings) -> AuditSettings:
        return cls(include_debug=settings.audit_include_debug)


def model_to_audit_dict(model: BaseModel | None) -> dict[str, Any] | None:
    """Serialize a record to a JSON-safe dict for audit logging."""
    if model is None:
        return None
    return model.model_dump(mode="json")


class AuditRecorder:
    """Writes immutable audit rows within the caller's transaction."""

    def __init__(self, settings: AuditSettings) -> None:
        self.settings = settings

    def accepts(self, category: AuditCategory) -> bool:
        return category != AuditCategory.DEBUG or self.settings.include_debug

    async def record(
        self,
        session: AsyncSession,
        *,
        employee: Employee,
        entity_type: AuditEntityType,
        entity_id: object,
        action: AuditAction,
        actor: str = "",
        title: str = "",
        message: str = "",
        category: AuditCategory = AuditCategory.INFO,
        before_json: dict[str, Any] | None = None,
        after_json: dict[str, Any] | None = None,
    ) -> AuditLog | None:
        """Add an audit row, or return None when the category is filtered out."""
        if not self.accepts(category):
            return None
        entry = AuditLog(
            employee_id=employee.id,
            site_id=employee.site_id,
            actor=actor,
            entity_type=entity_type.value,
            entity_id=str(entity_id),
            action=action.value,
            category=category.value,
            title=title,
            message=message,
            before_json=before_json,
            after_json=after_json,
        )
        session.add(entry)
        return entry


_recorder: AuditRecorder | None = None


def get_audit_recorder() -> AuditRecorder:
    """Return the shared recorder, configured from settings on first use."""
    global _recorder
    if _recorder is None:
        _recorder = AuditRecorder(AuditSettings.from_settings(get_settings()))
    return _recorder


def set_audit_recorder(recorder: AuditRecorder | None) -> None:
    """Override the recorder (for testing or production wiring)."""
    global _recorder
    _recorder = recorder
