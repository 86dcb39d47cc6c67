"""Database repository exceptions.

Custom exceptions for repository operations that provide better
error messages and typing than raw SQLAlchemy exceptions.

The hierarchy (nested-set) and polymorphic association layers raise the
structural errors defined here. They all derive from RepositoryError so
callers can translate the whole family in one place; only
ConcurrentModificationError is safe to retry.
"""

from __future__ import annotations

from typing import Any


class RepositoryError(Exception):
    """Base exception for repository operations.

    Raised when a repository operation fails due to programming
    errors, configuration issues, or unexpected states.

    Attributes:
        message: Human-readable description.
        details: Structured context (ids, model names) for logs and responses.
        retryable: Whether the caller may safely retry the whole operation.
    """

    retryable: bool = False

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        """Initialize repository error.

        Args:
            message: Error description
            details: Additional context about the error
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Format error message with details."""
        if self.details:
            details_str = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message


class NotFoundError(RepositoryError):
    """Entity not found in database.

    Raised when a node, association or entity id does not exist.

    Attributes:
        model_name: Name of the model class that wasn't found
        identifier: The key/value that was searched for
    """

    def __init__(self, model_name: str, identifier: dict[str, Any]):
        """Initialize not found error.

        Args:
            model_name: Name of the model (e.g., "Category", "Menu")
            identifier: Key-value pairs used in the search (e.g., {"id": 123})
        """
        self.model_name = model_name
        self.identifier = identifier

        id_str = ", ".join(f"{k}={v!r}" for k, v in identifier.items())
        message = f"{model_name} not found with {id_str}"

        super().__init__(message, details={"model": model_name, **identifier})

    def __repr__(self) -> str:
        """Repr for debugging."""
        return f"NotFoundError(model={self.model_name!r}, identifier={self.identifier!r})"


class InvalidParentError(RepositoryError):
    """Requested parent is missing or not a valid parent for the node.

    Covers a parent id that is absent from the forest and a parent that
    exists but cannot own the node (for example a reply whose parent
    comment belongs to another post).
    """

    def __init__(
        self,
        model_name: str,
        parent_id: Any,
        reason: str = "parent does not exist",
    ) -> None:
        """Initialize invalid parent error.

        Args:
            model_name: Name of the hierarchical model
            parent_id: The rejected parent id
            reason: Why the parent was rejected
        """
        self.model_name = model_name
        self.parent_id = parent_id
        self.reason = reason
        super().__init__(
            f"Invalid parent for {model_name}: {reason}",
            details={"model": model_name, "parent_id": parent_id},
        )


class CircularReferenceError(RepositoryError):
    """Operation would make a node its own ancestor."""

    def __init__(self, model_name: str, node_id: Any, parent_id: Any) -> None:
        """Initialize circular reference error.

        Args:
            model_name: Name of the hierarchical model
            node_id: Node being created or moved
            parent_id: Parent that would close the cycle
        """
        self.model_name = model_name
        self.node_id = node_id
        self.parent_id = parent_id
        super().__init__(
            f"{model_name} cannot be placed under itself or its own descendant",
            details={"model": model_name, "id": node_id, "parent_id": parent_id},
        )


class HasChildrenError(RepositoryError):
    """Non-cascading delete requested on a node that still has descendants."""

    def __init__(self, model_name: str, node_id: Any, descendant_count: int) -> None:
        """Initialize has-children error.

        Args:
            model_name: Name of the hierarchical model
            node_id: Node whose delete was refused
            descendant_count: Number of descendants blocking the delete
        """
        self.model_name = model_name
        self.node_id = node_id
        self.descendant_count = descendant_count
        super().__init__(
            f"{model_name} has {descendant_count} descendant(s); delete with cascade",
            details={"model": model_name, "id": node_id, "descendants": descendant_count},
        )


class ConcurrentModificationError(RepositoryError):
    """Another writer holds or has advanced the forest.

    Raised when the per-forest lock cannot be acquired within the configured
    timeout or when the forest version changed between read and write.
    Nothing has been written when this is raised.
    """

    retryable = True

    def __init__(self, forest: str, reason: str) -> None:
        """Initialize concurrent modification error.

        Args:
            forest: Forest (table) being mutated
            reason: Lock timeout or stale version description
        """
        self.forest = forest
        self.reason = reason
        super().__init__(
            f"Concurrent modification of {forest}: {reason}",
            details={"forest": forest},
        )


class TreeIntegrityError(RepositoryError):
    """Stored intervals violate a nested-set invariant."""

    def __init__(self, model_name: str, violation: str, node_id: Any = None) -> None:
        """Initialize tree integrity error.

        Args:
            model_name: Name of the hierarchical model
            violation: Description of the first violated invariant
            node_id: Offending node, when one can be singled out
        """
        self.model_name = model_name
        self.violation = violation
        self.node_id = node_id
        details: dict[str, Any] = {"model": model_name}
        if node_id is not None:
            details["id"] = node_id
        super().__init__(f"{model_name} tree is inconsistent: {violation}", details=details)


class InvalidOwnerTypeError(RepositoryError):
    """Owner kind is unknown or not permitted for an attachable kind."""

    def __init__(
        self,
        owner_type: Any,
        attachable_kind: str | None = None,
        allowed: tuple[str, ...] = (),
    ) -> None:
        """Initialize invalid owner type error.

        Args:
            owner_type: The rejected owner type value
            attachable_kind: Partition the owner was checked against
            allowed: Owner types permitted for that partition
        """
        self.owner_type = owner_type
        self.attachable_kind = attachable_kind
        self.allowed = allowed
        if attachable_kind:
            message = f"Owner type {owner_type!r} is not allowed for {attachable_kind}"
        else:
            message = f"Unknown owner type {owner_type!r}"
        details: dict[str, Any] = {"owner_type": owner_type}
        if allowed:
            details["allowed"] = list(allowed)
        super().__init__(message, details=details)


class InvalidAttachableKindError(RepositoryError):
    """Attachable kind is not registered."""

    def __init__(self, kind: Any) -> None:
        """Initialize invalid attachable kind error.

        Args:
            kind: The rejected attachable kind value
        """
        self.kind = kind
        super().__init__(f"Unknown attachable kind {kind!r}", details={"kind": kind})


__all__ = [
    "CircularReferenceError",
    "ConcurrentModificationError",
    "HasChildrenError",
    "InvalidAttachableKindError",
    "InvalidOwnerTypeError",
    "InvalidParentError",
    "NotFoundError",
    "RepositoryError",
    "TreeIntegrityError",
]
