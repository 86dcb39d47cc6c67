"""Application exceptions rendered as RFC 7807 problem details.

Service-level failures (duplicate names, invalid workflow transitions,
tags still in use) raise these. Structural failures from the nested-set and
association layers raise ``core.database.exceptions.RepositoryError``
subclasses instead; both families are translated by
``app.exception_handlers``.
"""

from __future__ import annotations

from typing import Any


class AppException(Exception):
    """Base application exception.

    Follows RFC 7807 Problem Details for HTTP APIs.

    Attributes:
        status_code: HTTP status code for the error.
        detail: Human-readable error message.
        type: Error type identifier (used in RFC 7807 problem details).
        title: Short, human-readable summary of the problem type.
        instance: URI reference that identifies the specific occurrence of the problem.
        extra: Additional context-specific information about the error.

    Example:
        raise AppException(
            status_code=404,
            detail="Category not found",
            type="category-not-found",
            extra={"category_id": 7},
        )
    """

    def __init__(
        self,
        status_code: int,
        detail: str,
        type: str = "about:blank",
        title: str | None = None,
        instance: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        self.status_code = status_code
        self.detail = detail
        self.type = type
        self.title = title or default_title(status_code)
        self.instance = instance
        self.extra = extra or {}
        super().__init__(detail)


def default_title(status_code: int) -> str:
    """Get default title for an HTTP status code."""
    titles = {
        400: "Bad Request",
        404: "Not Found",
        409: "Conflict",
        422: "Unprocessable Entity",
        500: "Internal Server Error",
        503: "Service Unavailable",
    }
    return titles.get(status_code, "Error")


class NotFoundException(AppException):
    """Exception raised when a resource is not found."""

    def __init__(
        self,
        detail: str,
        type: str = "not-found",
        instance: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            status_code=404,
            detail=detail,
            type=type,
            title="Not Found",
            instance=instance,
            extra=extra,
        )


class ValidationException(AppException):
    """Exception raised for domain validation errors.

    Example:
        raise ValidationException(
            detail="Reply must belong to the same post as its parent",
            type="comment-post-mismatch",
            extra={"post_id": 3, "parent_post_id": 4},
        )
    """

    def __init__(
        self,
        detail: str,
        type: str = "validation-error",
        instance: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            status_code=422,
            detail=detail,
            type=type,
            title="Validation Error",
            instance=instance,
            extra=extra,
        )


class ConflictException(AppException):
    """Exception raised for resource conflicts.

    Example:
        raise ConflictException(
            detail="Tag 'python' already exists",
            type="tag-name-exists",
            extra={"name": "python"},
        )
    """

    def __init__(
        self,
        detail: str,
        type: str = "conflict",
        instance: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            status_code=409,
            detail=detail,
            type=type,
            title="Conflict",
            instance=instance,
            extra=extra,
        )


class InvalidTransitionError(ConflictException):
    """Raised when a status workflow transition is not allowed.

    Args:
        entity: Entity name ("Post", "Comment")
        from_status: Current status
        to_status: Requested status
        entity_id: Identifier of the entity, if known
    """

    def __init__(
        self,
        entity: str,
        from_status: str,
        to_status: str,
        entity_id: Any = None,
    ) -> None:
        self.entity = entity
        self.from_status = from_status
        self.to_status = to_status
        self.entity_id = entity_id
        super().__init__(
            detail=(
                f"Invalid {entity} transition from {from_status} to {to_status}"
                + (f" for id {entity_id}" if entity_id is not None else "")
            ),
            type="invalid-status-transition",
            extra={
                "entity": entity,
                "from_status": str(from_status),
                "to_status": str(to_status),
            },
        )


__all__ = [
    "AppException",
    "ConflictException",
    "InvalidTransitionError",
    "NotFoundException",
    "ValidationException",
    "default_title",
]
