"""HTTP status code mapping for exceptions.

Used by the FastAPI integration and by host applications that translate
engine failures into responses.
"""

from typing import Dict, Type

from .base import AuthzError
from .domain import (
    ConfigurationError,
    InvalidPermissionCodeError,
    UnknownResourceTypeError,
    ValidationError,
)
from .infrastructure import InfrastructureError, StoreUnavailableError


HTTP_STATUS_MAP: Dict[Type[Exception], int] = {
    # 400 Bad Request
    ValidationError: 400,
    InvalidPermissionCodeError: 400,
    UnknownResourceTypeError: 400,

    # 500 Internal Server Error
    ConfigurationError: 500,
    InfrastructureError: 500,

    # 503 Service Unavailable
    StoreUnavailableError: 503,

    # Default for AuthzError
    AuthzError: 500,
}


def get_http_status_code(exception: Exception) -> int:
    """Get HTTP status code for an exception.

    Walks the exception's MRO so subclasses inherit the closest mapping.

    Args:
        exception: The exception instance

    Returns:
        HTTP status code (500 when nothing matches)
    """
    for exc_type in type(exception).__mro__:
        if exc_type in HTTP_STATUS_MAP:
            return HTTP_STATUS_MAP[exc_type]
    return 500
