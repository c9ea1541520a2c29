"""Domain exceptions for tenancy-authz.

Configuration and validation failures. These indicate programming or
deployment mistakes (a misspelled permission constant, an unregistered
resource type) and are never produced by an ordinary access decision.
"""

from typing import Iterable, Optional

from .base import AuthzError


# Configuration Errors
class ConfigurationError(AuthzError):
    """Raised when the engine is wired or configured incorrectly."""
    pass


# Validation Errors
class ValidationError(AuthzError):
    """Raised when input validation fails."""
    pass


class InvalidPermissionCodeError(ValidationError):
    """Raised when permission codes are not present in the registry."""

    def __init__(self, codes: Iterable[str], message: Optional[str] = None):
        self.codes = sorted(set(codes))
        super().__init__(
            message or f"Unknown permission codes: {', '.join(self.codes)}",
            details={"codes": self.codes},
        )


class UnknownResourceTypeError(ValidationError):
    """Raised when no visibility rule is registered for a resource type."""

    def __init__(self, resource_type: str):
        self.resource_type = resource_type
        super().__init__(
            f"No visibility rule registered for resource type '{resource_type}'",
            details={"resource_type": resource_type},
        )
