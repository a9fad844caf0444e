from __future__ import annotations

from http import HTTPStatus


class AppError(Exception):
    """Base application exception."""

    def __init__(self, message: str, status_code: int = HTTPStatus.INTERNAL_SERVER_ERROR) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class InvalidInputError(AppError):
    """Malformed input, unknown field name or an illegal state transition."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=HTTPStatus.BAD_REQUEST)


class NotFoundError(AppError):
    """The requested record does not exist."""

    def __init__(self, entity: str, entity_id: object) -> None:
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} not found: {entity_id}", status_code=HTTPStatus.NOT_FOUND)


class ConflictError(AppError):
    """The stored document changed underneath the caller, or already exists."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=HTTPStatus.CONFLICT)
