"""Global exception handlers for FastAPI application."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError

from content_service.core.database.exceptions import (
    CircularReferenceError,
    ConcurrentModificationError,
    HasChildrenError,
    InvalidAttachableKindError,
    InvalidOwnerTypeError,
    InvalidParentError,
    NotFoundError,
    RepositoryError,
    TreeIntegrityError,
)
from content_service.core.exceptions import AppException, default_title
from content_service.core.schemas.problem_details import (
    ProblemDetails,
    ValidationErrorItem,
    ValidationProblemDetails,
)

logger = logging.getLogger(__name__)

PROBLEM_JSON = "application/problem+json"

# Seconds a client should wait before retrying a contended forest write
RETRY_AFTER_SECONDS = 1

# Ordered: first isinstance match wins
_REPOSITORY_ERROR_MAP: tuple[tuple[type[RepositoryError], int, str], ...] = (
    (NotFoundError, status.HTTP_404_NOT_FOUND, "not-found"),
    (InvalidParentError, status.HTTP_422_UNPROCESSABLE_ENTITY, "invalid-parent"),
    (CircularReferenceError, status.HTTP_422_UNPROCESSABLE_ENTITY, "circular-reference"),
    (HasChildrenError, status.HTTP_409_CONFLICT, "has-children"),
    (InvalidOwnerTypeError, status.HTTP_422_UNPROCESSABLE_ENTITY, "invalid-owner-type"),
    (
        InvalidAttachableKindError,
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "invalid-attachable-kind",
    ),
    (ConcurrentModificationError, status.HTTP_409_CONFLICT, "concurrent-modification"),
    (TreeIntegrityError, status.HTTP_500_INTERNAL_SERVER_ERROR, "tree-integrity"),
)


def _get_request_id(request: Request) -> str | None:
    """Extract request ID from request state.

    Args:
        request: The FastAPI request object.

    Returns:
        Request ID if available, None otherwise.
    """
    return getattr(request.state, "request_id", None)


def _create_problem_detail(
    status_code: int,
    detail: str,
    type_: str = "about:blank",
    title: str | None = None,
    instance: str | None = None,
    extra: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Create RFC 7807 Problem Details response.

    Args:
        status_code: HTTP status code.
        detail: Human-readable error description.
        type_: Error type identifier.
        title: Short human-readable summary.
        instance: URI identifying this occurrence.
        extra: Additional context information.

    Returns:
        Dictionary representing the problem detail.
    """
    problem = ProblemDetails(
        type=type_,
        title=title or default_title(status_code),
        status=status_code,
        detail=detail,
        instance=instance,
    )

    response_data = problem.model_dump(exclude_none=True)
    if extra:
        # Details can carry UUID menu ids and enum members
        response_data.update(jsonable_encoder(extra))

    return response_data


def _problem_response(
    request: Request,
    status_code: int,
    content: dict[str, Any],
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    request_id = _get_request_id(request)
    if request_id:
        content["request_id"] = request_id
    return JSONResponse(
        status_code=status_code,
        content=content,
        headers=headers,
        media_type=PROBLEM_JSON,
    )


def _validation_items(errors: Any) -> list[ValidationErrorItem]:
    return [
        ValidationErrorItem(
            field=".".join(str(loc) for loc in error["loc"]),
            message=error["msg"],
            type=error["type"],
            value=jsonable_encoder(error.get("input")),
        )
        for error in errors
    ]


def classify_repository_error(exc: RepositoryError) -> tuple[int, str]:
    """Map a repository error to its HTTP status and problem type.

    Args:
        exc: Structural error raised by a repository.

    Returns:
        Tuple of (status_code, problem type).
    """
    for error_type, status_code, problem_type in _REPOSITORY_ERROR_MAP:
        if isinstance(exc, error_type):
            return status_code, problem_type
    return status.HTTP_500_INTERNAL_SERVER_ERROR, "repository-error"


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Handle custom application exceptions.

    This handler converts AppException instances into RFC 7807 Problem
    Details responses.

    Args:
        request: The FastAPI request object.
        exc: The application exception that was raised.

    Returns:
        JSONResponse with RFC 7807 Problem Details format.
    """
    logger.warning(
        "Application exception occurred",
        extra={
            "request_id": _get_request_id(request),
            "path": request.url.path,
            "method": request.method,
            "exception_type": exc.type,
            "status_code": exc.status_code,
            "detail": exc.detail,
        },
    )

    problem_data = _create_problem_detail(
        status_code=exc.status_code,
        detail=exc.detail,
        type_=exc.type,
        title=exc.title,
        instance=exc.instance or str(request.url),
        extra=exc.extra,
    )
    return _problem_response(request, exc.status_code, problem_data)


async def repository_error_handler(request: Request, exc: RepositoryError) -> JSONResponse:
    """Handle structural errors from the hierarchy and association layers.

    Retryable errors carry a ``Retry-After`` header and ``retryable: true``
    in the body.

    Args:
        request: The FastAPI request object.
        exc: The repository error that was raised.

    Returns:
        JSONResponse with RFC 7807 Problem Details format.
    """
    status_code, problem_type = classify_repository_error(exc)
    log = logger.error if status_code >= 500 else logger.warning
    log(
        "Repository error occurred",
        extra={
            "request_id": _get_request_id(request),
            "path": request.url.path,
            "method": request.method,
            "exception_type": problem_type,
            "status_code": status_code,
            "detail": exc.message,
        },
    )

    extra = dict(exc.details)
    headers = None
    if exc.retryable:
        extra["retryable"] = True
        headers = {"Retry-After": str(RETRY_AFTER_SECONDS)}

    problem_data = _create_problem_detail(
        status_code=status_code,
        detail=exc.message,
        type_=problem_type,
        instance=str(request.url),
        extra=extra,
    )
    return _problem_response(request, status_code, problem_data, headers)


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle FastAPI request validation errors.

    Args:
        request: The FastAPI request object.
        exc: The validation error that was raised.

    Returns:
        JSONResponse with RFC 7807 Problem Details format.
    """
    validation_errors = _validation_items(exc.errors())

    logger.warning(
        "Request validation failed",
        extra={
            "request_id": _get_request_id(request),
            "path": request.url.path,
            "method": request.method,
            "error_count": len(validation_errors),
            "errors": [e.model_dump() for e in validation_errors],
        },
    )

    problem = ValidationProblemDetails(
        type="validation-error",
        title="Validation Error",
        status=status.HTTP_422_UNPROCESSABLE_ENTITY,
        detail=f"Request validation failed for {len(validation_errors)} field(s)",
        instance=str(request.url),
        errors=validation_errors,
    )
    return _problem_response(
        request, status.HTTP_422_UNPROCESSABLE_ENTITY, problem.model_dump(exclude_none=True)
    )


async def pydantic_validation_exception_handler(
    request: Request, exc: PydanticValidationError
) -> JSONResponse:
    """Handle Pydantic validation errors raised outside request parsing.

    Services build schemas from stored rows; a failure there is reported
    like a request validation error.
    """
    validation_errors = _validation_items(exc.errors())

    logger.warning(
        "Pydantic validation failed",
        extra={
            "request_id": _get_request_id(request),
            "path": request.url.path,
            "method": request.method,
            "error_count": len(validation_errors),
        },
    )

    problem = ValidationProblemDetails(
        type="validation-error",
        title="Validation Error",
        status=status.HTTP_422_UNPROCESSABLE_ENTITY,
        detail=f"Data validation failed for {len(validation_errors)} field(s)",
        instance=str(request.url),
        errors=validation_errors,
    )
    return _problem_response(
        request, status.HTTP_422_UNPROCESSABLE_ENTITY, problem.model_dump(exclude_none=True)
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions.

    Logs the full traceback and returns a generic 500 without internal
    details.
    """
    logger.error(
        "Unexpected exception occurred",
        extra={
            "request_id": _get_request_id(request),
            "path": request.url.path,
            "method": request.method,
            "exception_type": type(exc).__name__,
            "exception_message": str(exc),
        },
        exc_info=True,
    )

    problem_data = _create_problem_detail(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="An unexpected error occurred while processing your request",
        type_="internal-error",
        title="Internal Server Error",
        instance=str(request.url),
    )
    return _problem_response(request, status.HTTP_500_INTERNAL_SERVER_ERROR, problem_data)


def configure_exception_handlers(app: FastAPI) -> None:
    """Register the RFC 7807 exception handlers.

    Args:
        app: The FastAPI application instance.

    Example:
        app = FastAPI()
        configure_exception_handlers(app)
    """
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(RepositoryError, repository_error_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(PydanticValidationError, pydantic_validation_exception_handler)

    # Catch-all for unexpected exceptions
    app.add_exception_handler(Exception, generic_exception_handler)

    logger.info("Exception handlers configured")
