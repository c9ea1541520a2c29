"""Features module for tenancy-authz.

High-level feature packages orchestrating entities, services and
infrastructure adapters.
"""

from .permissions import AuthorizationEngine, create_authorization_engine

__all__ = [
    "AuthorizationEngine",
    "create_authorization_engine",
]
