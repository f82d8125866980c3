from typing import Optional, Any


class ProviderError(Exception):
    """Base exception for all external provider communication errors."""
    def __init__(self, message: str, service: str = "unknown", status_code: Optional[int] = None, details: Any = None):
        self.message = message
        self.service = service
        self.status_code = status_code
        self.details = details
        super().__init__(f"[{service}] {message} (Status: {status_code})")


class ServiceUnavailableError(ProviderError):
    """Raised when the provider is unreachable or returns a 5xx."""
    pass


class ServiceTimeoutError(ServiceUnavailableError):
    """Raised specifically on timeouts."""
    pass


class AuthenticationError(ProviderError):
    """Raised when the provider rejects our credentials (401/403)."""
    pass


class NotFoundError(ProviderError):
    """Raised when the requested resource is not found (404)."""
    pass


class ProviderValidationError(ProviderError):
    """Raised when the provider rejects the request payload (400/422)."""
    pass
