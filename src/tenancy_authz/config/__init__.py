"""Configuration for tenancy-authz: settings, constants and logging."""

from .constants import (
    DatabaseSchemas,
    DenialReason,
    MembershipStatus,
    ResourceType,
    SystemRoleNames,
)
from .logging_config import LoggingConfig, get_logger, setup_logging
from .settings import AuthzSettings, get_settings

__all__ = [
    # Settings
    "AuthzSettings",
    "get_settings",

    # Constants
    "DatabaseSchemas",
    "DenialReason",
    "MembershipStatus",
    "ResourceType",
    "SystemRoleNames",

    # Logging
    "LoggingConfig",
    "get_logger",
    "setup_logging",
]
