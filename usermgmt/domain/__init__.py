"""Domain layer: exceptions shared by application and infrastructure.

No dependencies on infrastructure. Used by application and
infrastructure layers.
"""

from usermgmt.domain.exceptions import (
    AuthenticationException,
    ConfigurationException,
    ConstraintViolationException,
    DuplicateEmailException,
    DuplicateRoleNameException,
    DuplicateTokenException,
    ResourceNotFoundException,
    RoleInUseException,
    UserManagementException,
    ValidationException,
)

__all__ = [
    "AuthenticationException",
    "ConfigurationException",
    "ConstraintViolationException",
    "DuplicateEmailException",
    "DuplicateRoleNameException",
    "DuplicateTokenException",
    "ResourceNotFoundException",
    "RoleInUseException",
    "UserManagementException",
    "ValidationException",
]
