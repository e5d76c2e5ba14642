"""General-purpose domain errors shared by every resource."""

from __future__ import annotations

from signflow.domain.exceptions import SignflowError


class NotFoundError(SignflowError):
    """Raised when a requested resource does not exist.

    Attributes:
        resource: Kind of resource (e.g. "document", "certificate").
        resource_id: Identifier that was looked up.
    """

    def __init__(self, resource: str, resource_id: object) -> None:
        self.resource = resource
        self.resource_id = resource_id
        super().__init__(f"{resource.capitalize()} not found: {resource_id}")


class PermissionDeniedError(SignflowError):
    """Raised when the actor may not act on a resource."""


class ValidationError(SignflowError):
    """Raised when input fails a business validation rule.

    Attributes:
        field: Name of the offending field, when known.
    """

    def __init__(self, message: str, field: str | None = None) -> None:
        self.field = field
        super().__init__(message)


class ConflictError(SignflowError):
    """Raised when an operation conflicts with existing state."""


class AuthenticationError(SignflowError):
    """Raised when credentials or a session are missing or invalid."""
