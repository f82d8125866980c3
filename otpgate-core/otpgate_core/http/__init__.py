from .client import BaseProviderClient
from .exceptions import (
    ProviderError,
    ServiceUnavailableError,
    ServiceTimeoutError,
    AuthenticationError,
    NotFoundError,
    ProviderValidationError,
)

__all__ = [
    "BaseProviderClient",
    "ProviderError",
    "ServiceUnavailableError",
    "ServiceTimeoutError",
    "AuthenticationError",
    "NotFoundError",
    "ProviderValidationError",
]
