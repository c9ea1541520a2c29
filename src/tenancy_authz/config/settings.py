"""
Settings for the authorization engine.

Concrete pydantic-settings implementation read from ``AUTHZ_*`` environment
variables or a local ``.env`` file.
"""
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import DatabaseSchemas, SystemRoleNames


class AuthzSettings(BaseSettings):
    """Authorization engine settings."""

    model_config = SettingsConfigDict(
        env_prefix="AUTHZ_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Membership store
    store_schema: str = Field(default=DatabaseSchemas.DEFAULT)
    store_retry_after_seconds: int = Field(default=5, ge=0)

    # Decision logging
    log_permission_denials: bool = Field(default=False)
    warn_on_unknown_permission: bool = Field(default=True)

    # Roles
    super_admin_role_name: str = Field(default=SystemRoleNames.SUPER_ADMIN)

    @field_validator("store_schema")
    @classmethod
    def validate_store_schema(cls, value: str) -> str:
        """Schema names are interpolated into SQL, so keep them to plain identifiers."""
        if not value.isidentifier():
            raise ValueError(f"Invalid schema name: {value}")
        return value


@lru_cache()
def get_settings() -> AuthzSettings:
    """Get cached settings instance."""
    return AuthzSettings()
