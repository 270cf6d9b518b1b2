"""Domain exceptions for the user management backend.

Defines domain-level exceptions that represent business rule violations.
These exceptions are independent of infrastructure concerns. Callers (HTTP
controllers, scripts) map them to responses or exit codes.
"""

from typing import Any


class UserManagementException(Exception):
    """Base exception for all user management errors.

    All custom exceptions inherit from this class to allow consistent
    error handling and logging. Callers map these to responses using
    message, error_code, and details.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. field, resource_id).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)


class ValidationException(UserManagementException):
    """Raised when input validation fails (e.g. invalid page or limit)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        """Initialize with message and optional field name.

        Args:
            message: Description of the validation failure.
            field: Optional field or attribute that failed validation.
        """
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class AuthenticationException(UserManagementException):
    """Raised when a credential is rejected (bad password, invalid or spent token)."""

    def __init__(self, message: str = "Authentication failed") -> None:
        super().__init__(message, "AUTHENTICATION_ERROR")


class ConfigurationException(UserManagementException):
    """Raised when required configuration is missing (fatal in production)."""

    def __init__(self, missing: list[str]) -> None:
        """Initialize with the names of the missing environment variables.

        Args:
            missing: Environment variable names that are unset or empty.
        """
        super().__init__(
            f"Missing required environment variables: {', '.join(missing)}",
            "CONFIGURATION_ERROR",
            {"missing": list(missing)},
        )


class ResourceNotFoundException(UserManagementException):
    """Raised when update/delete targets a row that does not exist."""

    def __init__(self, resource_type: str, resource_id: str) -> None:
        """Initialize with resource type and id.

        Args:
            resource_type: Type of resource (e.g. 'user', 'refresh_token').
            resource_id: The ID or token that was not found.
        """
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            "RESOURCE_NOT_FOUND",
            {"resource_type": resource_type, "resource_id": resource_id},
        )


class ConstraintViolationException(UserManagementException):
    """Raised when the store rejects a write (unique key clash, dangling foreign key)."""

    def __init__(
        self,
        message: str = "Constraint violation",
        error_code: str = "CONSTRAINT_VIOLATION",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, error_code, details)


class DuplicateEmailException(ConstraintViolationException):
    """Raised when creating or updating a user to an email already registered."""

    def __init__(self, email: str | None = None) -> None:
        super().__init__(
            "Email is already registered",
            "DUPLICATE_EMAIL",
            {"email": email} if email else {},
        )


class DuplicateRoleNameException(ConstraintViolationException):
    """Raised when creating or renaming a role to a name that already exists."""

    def __init__(self, name: str) -> None:
        super().__init__(
            f"Role with name '{name}' already exists",
            "DUPLICATE_ROLE_NAME",
            {"name": name},
        )


class DuplicateTokenException(ConstraintViolationException):
    """Raised when issuing a credential whose token string is already stored."""

    def __init__(self, entity_type: str) -> None:
        super().__init__(
            f"{entity_type} token already exists",
            "DUPLICATE_TOKEN",
            {"entity_type": entity_type},
        )


class RoleInUseException(ConstraintViolationException):
    """Raised when deleting a role that is still assigned to users."""

    def __init__(self, role_id: str, user_count: int) -> None:
        """Initialize with the role and how many users still reference it.

        Args:
            role_id: Role that was not deleted.
            user_count: Number of users assigned to the role at check time.
        """
        super().__init__(
            f"Role {role_id} is assigned to {user_count} user(s) and cannot be deleted",
            "ROLE_IN_USE",
            {"role_id": role_id, "user_count": user_count},
        )
