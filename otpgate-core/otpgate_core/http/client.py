import logging
import httpx
from typing import Optional, Type, TypeVar, Any, Dict, Union
from pydantic import BaseModel
from tenacity import AsyncRetrying, stop_after_attempt, wait_exponential, retry_if_exception_type, before_sleep_log

from .exceptions import (
    ProviderError,
    ServiceUnavailableError,
    ServiceTimeoutError,
    AuthenticationError,
    NotFoundError,
    ProviderValidationError,
)

# Generic type for Pydantic models
T = TypeVar("T", bound=BaseModel)

logger = logging.getLogger(__name__)


class BaseProviderClient:
    """
    Resilient Async HTTP Client for external identity providers.

    Features:
    - Retries on network errors and 5xx responses for idempotent calls.
    - Connection pooling (via httpx.AsyncClient).
    - Pydantic model deserialization.
    - Standardized exception mapping.
    """

    def __init__(
        self,
        base_url: str,
        service_name: str,
        headers: Optional[Dict[str, str]] = None,
        timeout: float = 10.0,
        max_attempts: int = 3,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.service_name = service_name
        self.timeout = timeout
        self.max_attempts = max_attempts

        default_headers = {
            "User-Agent": f"otpgate/{service_name}",
            "Accept": "application/json",
        }
        default_headers.update(headers or {})

        # An injected client (tests, shared pools) keeps its own transport
        self.client = client or httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            headers=default_headers,
        )
        if client is not None:
            self.client.headers.update(default_headers)

    async def aclose(self):
        """Close the underlying HTTP client."""
        await self.client.aclose()

    def _url(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        return f"{self.base_url}/{path.lstrip('/')}"

    def _map_exception(self, exc: Exception) -> Exception:
        """Map httpx exceptions to provider exceptions."""
        if isinstance(exc, httpx.TimeoutException):
            return ServiceTimeoutError("Request timed out", service=self.service_name)
        if isinstance(exc, (httpx.ConnectError, httpx.NetworkError)):
            return ServiceUnavailableError(f"Failed to connect: {str(exc)}", service=self.service_name)
        if isinstance(exc, httpx.HTTPStatusError):
            status = exc.response.status_code
            text = exc.response.text
            if status == 401:
                return AuthenticationError("Unauthorized", service=self.service_name, status_code=status, details=text)
            if status == 403:
                return AuthenticationError("Forbidden", service=self.service_name, status_code=status, details=text)
            if status == 404:
                return NotFoundError("Resource not found", service=self.service_name, status_code=status, details=text)
            if status in (400, 422):
                return ProviderValidationError("Validation error", service=self.service_name, status_code=status, details=text)
            if status >= 500:
                return ServiceUnavailableError("Server error", service=self.service_name, status_code=status, details=text)

            return ProviderError(f"HTTP {status} Error", service=self.service_name, status_code=status, details=text)

        return ProviderError(f"Unexpected error: {str(exc)}", service=self.service_name)

    async def _send(
        self,
        method: str,
        path: str,
        response_model: Optional[Type[T]] = None,
        **kwargs
    ) -> Union[T, Dict[str, Any], list, None]:
        """Execute a single request with error mapping."""
        try:
            response = await self.client.request(method, self._url(path), **kwargs)
            response.raise_for_status()

            if response.status_code == 204 or not response.content:
                return None

            if response_model:
                return response_model.model_validate(response.json())

            return response.json()

        except httpx.HTTPError as e:
            raise self._map_exception(e)
        except ProviderError:
            raise
        except Exception as e:
            logger.exception(f"Unexpected provider client error for {self.service_name}")
            raise ProviderError(str(e), service=self.service_name)

    async def _request(
        self,
        method: str,
        path: str,
        response_model: Optional[Type[T]] = None,
        retry: bool = True,
        **kwargs
    ) -> Union[T, Dict[str, Any], list, None]:
        """Execute request, retrying transient failures when ``retry`` is set."""
        if not retry or self.max_attempts <= 1:
            return await self._send(method, path, response_model=response_model, **kwargs)

        async for attempt in AsyncRetrying(
            retry=retry_if_exception_type((ServiceUnavailableError, ServiceTimeoutError)),
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=1, min=1, max=10),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        ):
            with attempt:
                return await self._send(method, path, response_model=response_model, **kwargs)

    async def get(self, path: str, params: Optional[Dict] = None, response_model: Optional[Type[T]] = None, **kwargs) -> Union[T, Dict, list, None]:
        return await self._request("GET", path, params=params, response_model=response_model, **kwargs)

    async def post(self, path: str, json: Any = None, response_model: Optional[Type[T]] = None, **kwargs) -> Union[T, Dict, list, None]:
        return await self._request("POST", path, json=json, response_model=response_model, **kwargs)

    async def put(self, path: str, json: Any = None, response_model: Optional[Type[T]] = None, **kwargs) -> Union[T, Dict, list, None]:
        return await self._request("PUT", path, json=json, response_model=response_model, **kwargs)
