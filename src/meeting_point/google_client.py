"""
Google Maps Platform client wrapper with async support, rate limiting and retries.

The legacy `googlemaps` client serves geocoding and the distance matrix; the
Routes API (routes.googleapis.com/directions/v2) is called over httpx. One
instance is shared by the geocoder and the travel metric provider.
"""

import asyncio
import logging
from typing import Any

import googlemaps
import httpx
import requests
from googlemaps.exceptions import ApiError, HTTPError, Timeout, TransportError

from .config import Settings
from .errors import ProviderError, ProviderTransientFailure
from .retry import RetryPolicy, call_with_retries

logger = logging.getLogger(__name__)

# Google status values worth another attempt
TRANSIENT_API_STATUSES = frozenset({"OVER_QUERY_LIMIT", "UNKNOWN_ERROR"})
RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})


def raise_for_retryable_status(response: requests.Response, *args, **kwargs) -> None:
    """
    requests response hook: fail fast on a retryable HTTP status.

    googlemaps otherwise retries 5xx responses itself with blocking sleeps,
    stacking a second retry loop under RetryPolicy.
    """
    if response.status_code in RETRYABLE_STATUS_CODES:
        raise requests.HTTPError(f"HTTP {response.status_code}", response=response)


def translate_googlemaps_error(error: Exception, provider: str) -> Exception:
    """
    Map a googlemaps exception onto the service error taxonomy.

    Args:
        error: Exception raised by the googlemaps client
        provider: Provider label for the error message

    Returns:
        ProviderTransientFailure or ProviderError
    """
    if isinstance(error, Timeout):
        return ProviderTransientFailure(provider, "request timed out")
    if isinstance(error, HTTPError):
        if error.status_code in RETRYABLE_STATUS_CODES:
            return ProviderTransientFailure(provider, f"HTTP {error.status_code}")
        return ProviderError(provider, f"HTTP {error.status_code}")
    if isinstance(error, TransportError):
        cause = error.base_exception
        if isinstance(cause, requests.HTTPError) and cause.response is not None:
            return ProviderTransientFailure(provider, f"HTTP {cause.response.status_code}")
        return ProviderTransientFailure(provider, str(error))
    if isinstance(error, ApiError):
        if error.status in TRANSIENT_API_STATUSES:
            return ProviderTransientFailure(provider, str(error))
        return ProviderError(provider, str(error))
    return error


class GoogleMapsClient:
    """
    Async wrapper around Google Maps APIs with built-in:
    - Rate limiting (semaphore-based)
    - Bounded retries for transient failures
    - Translation of provider exceptions into service errors
    """

    def __init__(self, settings: Settings, http_client: httpx.AsyncClient | None = None):
        """
        Initialize the Google Maps client.

        Args:
            settings: Process-wide settings carrying the API key and limits
            http_client: Optional preconfigured httpx client (tests inject a mock transport)
        """
        self.api_key = settings.google_maps_api_key

        # Legacy client for geocoding and distance matrix. Retryable statuses
        # raise from the session hook, so RetryPolicy is the only retry loop.
        session = requests.Session()
        session.hooks["response"].append(raise_for_retryable_status)
        self.client = googlemaps.Client(
            key=self.api_key,
            timeout=settings.provider_timeout_seconds,
            retry_timeout=settings.provider_timeout_seconds,
            retry_over_query_limit=False,
            requests_session=session,
        )

        # HTTP client for the Routes API
        self.http_client = http_client or httpx.AsyncClient(timeout=settings.provider_timeout_seconds)

        self.semaphore = asyncio.Semaphore(settings.max_concurrent_requests)
        self.retry_policy = RetryPolicy.from_settings(settings)
        self.api_call_count = 0

    async def _rate_limited_call(self, func, *args, provider: str, **kwargs):
        """
        Execute one blocking googlemaps call in the default executor.

        Args:
            func: googlemaps client method
            provider: Provider label for errors and logs
            *args, **kwargs: Arguments to pass to the function

        Returns:
            Result of the function call
        """
        async with self.semaphore:
            loop = asyncio.get_running_loop()
            self.api_call_count += 1
            try:
                return await loop.run_in_executor(None, lambda: func(*args, **kwargs))
            except (ApiError, Timeout, TransportError) as e:
                raise translate_googlemaps_error(e, provider) from e

    async def call(self, func, *args, provider: str, **kwargs):
        """Rate-limited googlemaps call, retried on transient failures"""
        return await call_with_retries(
            lambda: self._rate_limited_call(func, *args, provider=provider, **kwargs),
            self.retry_policy,
            provider,
        )

    async def _post_once(self, url: str, body: dict, headers: dict, provider: str) -> dict:
        async with self.semaphore:
            self.api_call_count += 1
            try:
                response = await self.http_client.post(
                    url,
                    json=body,
                    headers={"Content-Type": "application/json", "X-Goog-Api-Key": self.api_key, **headers},
                )
            except httpx.TimeoutException as e:
                raise ProviderTransientFailure(provider, "request timed out") from e
            except httpx.TransportError as e:
                raise ProviderTransientFailure(provider, str(e)) from e

        if response.status_code in RETRYABLE_STATUS_CODES:
            raise ProviderTransientFailure(provider, f"HTTP {response.status_code}")
        if response.status_code != 200:
            raise ProviderError(provider, f"HTTP {response.status_code}: {response.text}")

        try:
            return response.json()
        except ValueError as e:
            raise ProviderError(provider, "response is not valid JSON") from e

    async def post_json(self, url: str, body: dict, headers: dict[str, str], provider: str) -> dict[str, Any]:
        """
        POST a JSON body to a Google REST endpoint, retried on transient failures.

        Args:
            url: Endpoint URL
            body: JSON request body
            headers: Extra headers (e.g. X-Goog-FieldMask)
            provider: Provider label for errors and logs

        Returns:
            Decoded JSON response body
        """
        return await call_with_retries(
            lambda: self._post_once(url, body, headers, provider),
            self.retry_policy,
            provider,
        )

    def get_api_call_count(self) -> int:
        """Get the number of API calls made in this session"""
        return self.api_call_count

    async def aclose(self) -> None:
        await self.http_client.aclose()
