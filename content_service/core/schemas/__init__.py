"""Shared API schemas."""

from .base import CustomBase, TimestampedResponse, TreeNodeResponse
from .problem_details import ProblemDetails, ValidationErrorItem, ValidationProblemDetails

__all__ = [
    "CustomBase",
    "ProblemDetails",
    "TimestampedResponse",
    "TreeNodeResponse",
    "ValidationErrorItem",
    "ValidationProblemDetails",
]
