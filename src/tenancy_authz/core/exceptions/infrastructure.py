"""Infrastructure-specific exceptions for tenancy-authz.

This module defines exceptions related to external systems the engine reads
from, chiefly the membership store.
"""

from typing import Any, Dict, Optional

from .base import AuthzError


class InfrastructureError(AuthzError):
    """Base class for failures of systems outside the engine."""
    pass


class StoreUnavailableError(InfrastructureError):
    """Raised when the membership store cannot be reached or returns malformed data.

    Distinct from an access denial: callers should answer with a retryable
    error, not with "forbidden".
    """

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.operation = operation
        merged = dict(details or {})
        if operation:
            merged.setdefault("operation", operation)
        super().__init__(message, details=merged)
