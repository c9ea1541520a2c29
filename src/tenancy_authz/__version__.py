"""Version information for tenancy-authz."""

__version__ = "0.1.0"
