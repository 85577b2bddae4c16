# runway_ops/ingestion/http.py
"""
HTTP client for external weather calls.

Uses httpx with an explicit timeout and tenacity for optional retries.
The default is a single attempt: a failed fetch surfaces to the caller
and is recorded as staleness rather than retried in-line.
"""

from typing import Any, Dict, Optional

import httpx
from tenacity import (
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ..errors import FetchError

# Default timeout for HTTP requests (seconds)
DEFAULT_TIMEOUT = 10.0

DEFAULT_MAX_ATTEMPTS = 1
DEFAULT_WAIT_MIN = 1
DEFAULT_WAIT_MAX = 10


class HttpClientError(FetchError):
    """Base exception for HTTP client errors."""
    pass


class HttpTimeoutError(HttpClientError):
    """Raised when request times out."""
    pass


class HttpStatusError(HttpClientError):
    """Raised when response has non-2xx status."""
    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        super().__init__(f"HTTP {status_code}: {message}")


class HttpClient:
    """
    HTTP client for external API calls.

    Args:
        base_url: Prefix for relative paths
        timeout: Request timeout in seconds
        headers: Default headers for all requests
        max_attempts: Total attempts for timeouts and 5xx/4xx status errors
        transport: Optional httpx transport (tests pass httpx.MockTransport)
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
        headers: Optional[Dict[str, str]] = None,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.base_url = base_url or ""
        self.timeout = timeout
        self.headers = headers or {}
        self.max_attempts = max(1, max_attempts)
        self.transport = transport

    def _request_once(
        self,
        method: str,
        url: str,
        params: Optional[Dict[str, Any]],
        headers: Dict[str, str],
    ) -> httpx.Response:
        # Exceptions must bubble so tenacity can see them
        with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
            response = client.request(method=method, url=url, params=params, headers=headers)
            response.raise_for_status()
            return response

    def request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> httpx.Response:
        """
        Send a request, retrying transient failures up to max_attempts.

        Raises:
            HttpTimeoutError: Timed out on every attempt
            HttpStatusError: Non-2xx response on every attempt
            HttpClientError: Connection or protocol failure
        """
        url = f"{self.base_url}{path}" if self.base_url else path
        merged_headers = {**self.headers, **(headers or {})}

        retrying = Retrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=1, min=DEFAULT_WAIT_MIN, max=DEFAULT_WAIT_MAX),
            retry=retry_if_exception_type((httpx.TimeoutException, httpx.HTTPStatusError)),
            reraise=True,
        )
        try:
            return retrying(self._request_once, method, url, params, merged_headers)
        except httpx.TimeoutException as e:
            raise HttpTimeoutError(
                f"Timeout fetching {url} after {self.max_attempts} attempt(s): {e}"
            )
        except httpx.HTTPStatusError as e:
            raise HttpStatusError(
                e.response.status_code,
                f"{url} after {self.max_attempts} attempt(s)",
            )
        except httpx.HTTPError as e:
            raise HttpClientError(f"Request to {url} failed: {e}")

    def get_json(
        self,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        """
        GET request returning parsed JSON.

        Raises:
            HttpClientError: On transport failure or a non-JSON body
        """
        response = self.request("GET", path, params, headers)
        try:
            return response.json()
        except ValueError as e:
            raise HttpClientError(f"Invalid JSON from {path}: {e}")
