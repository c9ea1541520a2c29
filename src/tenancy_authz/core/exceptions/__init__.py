"""Exceptions module for tenancy-authz.

This module provides the complete exception hierarchy for tenancy-authz,
organized by domain concerns and infrastructure concerns.
"""

from .base import (
    AuthzError,
    get_http_status_code,
    create_error_response,
)

from .domain import (
    # Configuration Errors
    ConfigurationError,

    # Validation Errors
    ValidationError,
    InvalidPermissionCodeError,
    UnknownResourceTypeError,
)

from .infrastructure import (
    # Infrastructure Errors
    InfrastructureError,
    StoreUnavailableError,
)

from .http_mapping import HTTP_STATUS_MAP

__all__ = [
    # Base
    "AuthzError",
    "get_http_status_code",
    "create_error_response",
    "HTTP_STATUS_MAP",

    # Domain
    "ConfigurationError",
    "ValidationError",
    "InvalidPermissionCodeError",
    "UnknownResourceTypeError",

    # Infrastructure
    "InfrastructureError",
    "StoreUnavailableError",
]
