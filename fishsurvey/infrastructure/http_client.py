"""
Infrastructure layer: base HTTP client for collaborator services with retry logic.
"""
import logging
from typing import Any, Dict, Optional

import httpx
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from fishsurvey.config import settings
from fishsurvey.infrastructure.api_constants import APIConstants

logger = logging.getLogger(__name__)


class ExternalServiceError(Exception):
    """A collaborator service call failed."""

    def __init__(self, message: str, status_code: int = 502):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ExternalServiceClient:
    """
    Async HTTP client for a collaborator service.

    Server errors (5xx) and transport errors are retried with exponential
    backoff; client errors (4xx) fail immediately with their status code.
    """

    service_name = "External service"

    def __init__(self, base_url: str, api_key: str = "", timeout: Optional[float] = None):
        """
        Initialize the client.

        Args:
            base_url: Root URL of the service
            api_key: Bearer token, omitted from headers when empty
            timeout: Request timeout in seconds (settings default when None)
        """
        self.base_url = base_url
        headers = {"accept": APIConstants.CONTENT_TYPE_JSON}
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"
        self.client = httpx.AsyncClient(
            base_url=base_url,
            headers=headers,
            timeout=timeout or settings.request_timeout,
        )

    async def close(self):
        """Close the HTTP client."""
        await self.client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    @retry(
        stop=stop_after_attempt(settings.max_retry_attempts),
        wait=wait_exponential(
            multiplier=settings.retry_backoff_multiplier,
            min=settings.retry_min_wait,
            max=settings.retry_max_wait,
        ),
        retry=retry_if_exception_type((httpx.HTTPStatusError, httpx.RequestError)),
        reraise=True,
    )
    async def _send(self, method: str, endpoint: str, **kwargs) -> httpx.Response:
        response = await self.client.request(method, endpoint, **kwargs)
        if response.status_code >= 500:
            logger.warning(f"{self.service_name} returned {response.status_code} for {method} {endpoint}")
            response.raise_for_status()
        return response

    async def _request(self, method: str, endpoint: str, **kwargs) -> httpx.Response:
        """
        Make an HTTP request with retry logic.

        Args:
            method: HTTP method (GET, POST, etc.)
            endpoint: Path relative to the base URL
            **kwargs: Additional arguments for the request

        Returns:
            The successful response

        Raises:
            ExternalServiceError: If the request fails (after retries for 5xx)
        """
        try:
            response = await self._send(method, endpoint, **kwargs)
        except httpx.HTTPStatusError as e:
            raise ExternalServiceError(
                f"{self.service_name} request failed: {e.response.status_code} - {e.response.text}",
                status_code=502,
            ) from e
        except httpx.RequestError as e:
            raise ExternalServiceError(
                f"{self.service_name} request error: {str(e)}",
                status_code=503,
            ) from e

        if response.is_error:
            raise ExternalServiceError(
                f"{self.service_name} request failed: {response.status_code} - {response.text}",
                status_code=response.status_code,
            )
        return response

    async def _make_request(self, method: str, endpoint: str, **kwargs) -> Dict[str, Any]:
        """Make a request and return the decoded JSON body."""
        response = await self._request(method, endpoint, **kwargs)
        return response.json()
