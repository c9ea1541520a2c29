"""Core building blocks shared across tenancy-authz features."""
