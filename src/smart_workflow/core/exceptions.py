"""Custom exceptions for smart-workflow.

All exceptions derive from :class:`WorkflowError` so callers can catch the
entire family with a single ``except WorkflowError`` clause.

Hierarchy::

    WorkflowError
    ├── ValidationFailedError
    │   └── ImmutableFieldError
    ├── RecordNotFoundError
    ├── ConflictError
    │   ├── DuplicateEmailError
    │   └── AdminAlreadyExistsError
    ├── ForbiddenOperationError
    ├── ConfigurationError
    └── CollaboratorError
        ├── StoreError
        ├── SuggestionGenerationError
        └── SideEffectError
"""

from __future__ import annotations

from typing import Any


class WorkflowError(Exception):
    """Base exception for all smart-workflow errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details: dict[str, Any] = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | details={self.details}"
        return self.message

    def __repr__(self) -> str:
        return f"{type(self).__name__}(message={self.message!r})"


class ValidationFailedError(WorkflowError):
    """Raised when a request is missing a required field or carries a bad value."""


class ImmutableFieldError(ValidationFailedError):
    """Raised when an update tries to overwrite a field fixed at creation."""

    def __init__(
        self,
        fields: list[str],
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message or f"Cannot modify immutable field(s): {', '.join(fields)}",
            details,
        )
        self.fields = fields


class RecordNotFoundError(WorkflowError):
    """Raised when an id has no matching record in a collection."""

    def __init__(
        self,
        collection: str,
        record_id: str | None = None,
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        if message is None:
            message = (
                f"{collection} record not found: {record_id!r}"
                if record_id
                else f"{collection} record not found"
            )
        super().__init__(message, details)
        self.collection = collection
        self.record_id = record_id


class ConflictError(WorkflowError):
    """Raised when a write would break a uniqueness rule."""


class DuplicateEmailError(ConflictError):
    """Raised when registering an email that already belongs to a user."""

    def __init__(self, email: str, details: dict[str, Any] | None = None) -> None:
        super().__init__("User with this email already exists", details)
        self.email = email


class AdminAlreadyExistsError(ConflictError):
    """Raised when a second admin account is requested."""

    def __init__(self, details: dict[str, Any] | None = None) -> None:
        super().__init__("Admin already exists", details)


class ForbiddenOperationError(WorkflowError):
    """Raised when the operation is never allowed for the target record."""


class ConfigurationError(WorkflowError):
    """Raised when :class:`~smart_workflow.core.config.WorkflowConfig` is inconsistent."""

    def __init__(
        self,
        parameter: str,
        reason: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(f"Invalid configuration for {parameter!r}: {reason}", details)
        self.parameter = parameter
        self.reason = reason


class CollaboratorError(WorkflowError):
    """Raised when an external collaborator (store, AI model) fails."""


class StoreError(CollaboratorError):
    """Raised when the record store cannot complete an operation."""

    def __init__(
        self,
        operation: str,
        collection: str,
        reason: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            f"Store operation {operation!r} on {collection!r} failed: {reason}",
            details,
        )
        self.operation = operation
        self.collection = collection
        self.reason = reason


class SuggestionGenerationError(CollaboratorError):
    """Raised when the generative-language model call fails."""

    def __init__(self, reason: str, details: dict[str, Any] | None = None) -> None:
        super().__init__("Failed to generate AI suggestions.", details)
        self.reason = reason


class SideEffectError(CollaboratorError):
    """Raised when a mutation committed but one of its follow-up steps failed.

    The primary write is **not** rolled back. ``details["committed"]`` is
    always ``True`` so clients can tell this apart from a failed write.
    """

    def __init__(
        self,
        operation: str,
        record_id: str,
        step: str,
        reason: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        merged = {
            "operation": operation,
            "recordId": record_id,
            "step": step,
            "committed": True,
            **(details or {}),
        }
        super().__init__(
            f"{operation} for {record_id!r} was saved but {step} failed: {reason}",
            merged,
        )
        self.operation = operation
        self.record_id = record_id
        self.step = step
        self.reason = reason


__all__ = [
    "AdminAlreadyExistsError",
    "CollaboratorError",
    "ConfigurationError",
    "ConflictError",
    "DuplicateEmailError",
    "ForbiddenOperationError",
    "ImmutableFieldError",
    "RecordNotFoundError",
    "SideEffectError",
    "StoreError",
    "SuggestionGenerationError",
    "ValidationFailedError",
    "WorkflowError",
]
