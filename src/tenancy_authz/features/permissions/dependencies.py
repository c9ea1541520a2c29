"""FastAPI authorization dependencies.

Turns engine decisions into HTTP answers: a denial becomes ``403
Forbidden`` carrying the decision message, a store outage becomes ``503
Service Unavailable`` with a ``Retry-After`` header. Identifying the caller
is left to the host application through ``principal_dependency``.
"""

import logging
from dataclasses import dataclass
from typing import Annotated, Any, Callable, List, Sequence

from fastapi import Depends, HTTPException, Request, status

from ...core.exceptions import ConfigurationError, StoreUnavailableError
from .services.authorization_engine import AuthorizationEngine

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AccessPrincipal:
    """The caller of a request: who, acting in which organization."""

    user_id: str
    organization_id: str


class AuthorizationDependencyError(HTTPException):
    """Base exception for authorization dependencies."""

    def __init__(self, detail: str, status_code: int = status.HTTP_403_FORBIDDEN, headers=None):
        super().__init__(status_code=status_code, detail=detail, headers=headers)


class AuthorizationDependencies:
    """FastAPI authorization dependencies factory."""

    def __init__(
        self,
        engine: AuthorizationEngine,
        principal_dependency: Callable[..., Any],
    ):
        """
        Initialize authorization dependencies.

        Args:
            engine: Authorization engine answering the checks
            principal_dependency: FastAPI dependency returning an AccessPrincipal
        """
        self.engine = engine
        self.principal_dependency = principal_dependency

    def _unavailable(self, error: StoreUnavailableError) -> AuthorizationDependencyError:
        logger.error(f"Authorization store unavailable: {error.message}")
        return AuthorizationDependencyError(
            "Authorization service temporarily unavailable",
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            headers={"Retry-After": str(self.engine.settings.store_retry_after_seconds)},
        )

    def require_permission(self, permission: str):
        """
        Require a specific permission.

        Raises:
            InvalidPermissionCodeError: at construction, for an unregistered code
        """
        code = str(permission)
        self.engine.registry.validate_codes([code])

        async def dependency(
            principal: Annotated[AccessPrincipal, Depends(self.principal_dependency)]
        ) -> AccessPrincipal:
            try:
                decision = await self.engine.check_permission(
                    principal.user_id, principal.organization_id, code
                )
            except StoreUnavailableError as e:
                raise self._unavailable(e) from e
            if not decision.allowed:
                raise AuthorizationDependencyError(decision.message)
            return principal

        return dependency

    def require_any_permission(self, permissions: Sequence[str]):
        """Require any of the specified permissions."""
        codes: List[str] = [str(p) for p in permissions]
        self.engine.registry.validate_codes(codes)

        async def dependency(
            principal: Annotated[AccessPrincipal, Depends(self.principal_dependency)]
        ) -> AccessPrincipal:
            try:
                allowed = await self.engine.has_any_permission(
                    principal.user_id, principal.organization_id, codes
                )
            except StoreUnavailableError as e:
                raise self._unavailable(e) from e
            if not allowed:
                raise AuthorizationDependencyError(
                    f"One of these permissions required: {', '.join(codes)}"
                )
            return principal

        return dependency

    def require_all_permissions(self, permissions: Sequence[str]):
        """Require all of the specified permissions; reports the first one missing."""
        codes: List[str] = [str(p) for p in permissions]
        self.engine.registry.validate_codes(codes)

        async def dependency(
            principal: Annotated[AccessPrincipal, Depends(self.principal_dependency)]
        ) -> AccessPrincipal:
            try:
                for code in codes:
                    decision = await self.engine.check_permission(
                        principal.user_id, principal.organization_id, code
                    )
                    if not decision.allowed:
                        raise AuthorizationDependencyError(decision.message)
            except StoreUnavailableError as e:
                raise self._unavailable(e) from e
            return principal

        return dependency

    def require_resource_access(self, resource_type: str, path_param: str = "resource_id"):
        """
        Require visibility of the record named by a path parameter.

        Raises:
            UnknownResourceTypeError: at construction, for an unregistered type
        """
        rule = self.engine.guard.get_rule(resource_type)

        async def dependency(
            request: Request,
            principal: Annotated[AccessPrincipal, Depends(self.principal_dependency)],
        ) -> AccessPrincipal:
            resource_id = request.path_params.get(path_param)
            if resource_id is None:
                raise ConfigurationError(
                    f"Route has no path parameter '{path_param}' for {rule.resource_type} access check"
                )
            try:
                allowed = await self.engine.can_access(
                    rule.resource_type, principal.user_id, principal.organization_id, str(resource_id)
                )
            except StoreUnavailableError as e:
                raise self._unavailable(e) from e
            if not allowed:
                raise AuthorizationDependencyError(f"Access to {rule.resource_type} denied")
            return principal

        return dependency
