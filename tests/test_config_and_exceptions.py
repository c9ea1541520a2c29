"""Tests for settings, logging configuration and the exception hierarchy."""

import logging

import pytest
from pydantic import ValidationError as PydanticValidationError

from tenancy_authz.config.logging_config import LoggingConfig, get_log_level_from_verbosity
from tenancy_authz.config.settings import AuthzSettings, get_settings
from tenancy_authz.core.exceptions import (
    AuthzError,
    ConfigurationError,
    InvalidPermissionCodeError,
    StoreUnavailableError,
    UnknownResourceTypeError,
    ValidationError,
    create_error_response,
    get_http_status_code,
)
from tenancy_authz.features.permissions.services import create_authorization_engine


class TestSettings:
    """Test AuthzSettings."""

    def test_defaults(self, settings):
        assert settings.store_schema == "public"
        assert settings.store_retry_after_seconds == 5
        assert settings.log_permission_denials is False
        assert settings.warn_on_unknown_permission is True
        assert settings.super_admin_role_name == "Super Admin"

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("AUTHZ_STORE_SCHEMA", "crm")
        monkeypatch.setenv("AUTHZ_LOG_PERMISSION_DENIALS", "true")
        monkeypatch.setenv("AUTHZ_STORE_RETRY_AFTER_SECONDS", "30")

        settings = AuthzSettings(_env_file=None)

        assert settings.store_schema == "crm"
        assert settings.log_permission_denials is True
        assert settings.store_retry_after_seconds == 30

    def test_rejects_unsafe_schema(self):
        with pytest.raises(PydanticValidationError):
            AuthzSettings(_env_file=None, store_schema="public;drop")

    def test_rejects_negative_retry_after(self):
        with pytest.raises(PydanticValidationError):
            AuthzSettings(_env_file=None, store_retry_after_seconds=-1)

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()


class TestLoggingConfig:
    """Test environment-driven logging setup."""

    def test_verbosity_mapping(self):
        assert get_log_level_from_verbosity("quiet") == "ERROR"
        assert get_log_level_from_verbosity("DEBUG") == "DEBUG"
        assert get_log_level_from_verbosity("nonsense") == "WARNING"

    def test_explicit_level_wins(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "INFO")
        monkeypatch.setenv("LOG_VERBOSITY", "QUIET")

        LoggingConfig.configure()
        try:
            assert logging.getLogger().level == logging.INFO
        finally:
            monkeypatch.delenv("LOG_LEVEL")
            monkeypatch.delenv("LOG_VERBOSITY")
            LoggingConfig.configure()

    def test_cache_module_is_quiet_below_debug(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "INFO")

        LoggingConfig.configure()
        try:
            cache_logger = logging.getLogger("tenancy_authz.features.permissions.cache")
            assert cache_logger.level == logging.WARNING
            assert cache_logger.propagate is False
        finally:
            monkeypatch.delenv("LOG_LEVEL")
            LoggingConfig.configure()


class TestExceptions:
    """Test the exception hierarchy and HTTP mapping."""

    def test_hierarchy(self):
        assert issubclass(InvalidPermissionCodeError, ValidationError)
        assert issubclass(UnknownResourceTypeError, ValidationError)
        assert issubclass(StoreUnavailableError, AuthzError)
        assert issubclass(ConfigurationError, AuthzError)

    def test_http_status_codes(self):
        assert get_http_status_code(InvalidPermissionCodeError(["x:y"])) == 400
        assert get_http_status_code(UnknownResourceTypeError("invoice")) == 400
        assert get_http_status_code(StoreUnavailableError("down")) == 503
        assert get_http_status_code(ConfigurationError("bad wiring")) == 500
        assert get_http_status_code(RuntimeError("other")) == 500

    def test_error_response(self):
        error = StoreUnavailableError("down", operation="get_membership")

        response = create_error_response(error)

        assert response["error"]["code"] == "StoreUnavailableError"
        assert response["error"]["message"] == "down"
        assert response["error"]["details"] == {"operation": "get_membership"}
        assert response["error"]["type"] == "StoreUnavailableError"

    def test_engine_rejects_non_store(self, settings):
        with pytest.raises(ConfigurationError):
            create_authorization_engine(object(), settings=settings)

    def test_engine_rejects_rules_with_unknown_codes(self, store, settings):
        from tenancy_authz.features.permissions.entities import ResourceVisibilityRule

        rule = ResourceVisibilityRule("invoice", "invoices:read", "invoices:assign")

        with pytest.raises(ConfigurationError) as exc_info:
            create_authorization_engine(store, settings=settings, rules=[rule])

        assert exc_info.value.details == {"codes": ["invoices:assign", "invoices:read"]}
