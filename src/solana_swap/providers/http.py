"""Shared plumbing for providers reached over a REST API."""

import logging
from typing import Any, Optional

import httpx

from solana_swap.errors import NoRouteFoundError, ProviderError
from solana_swap.providers.base import SwapProvider

logger = logging.getLogger(__name__)

# Body fragments providers use to report an unroutable pair
NO_ROUTE_MARKERS = ("No route found", "could not find any route", "route_not_found", "No route")


class HttpSwapProvider(SwapProvider):
    """Base for REST providers: headers, client creation and error mapping."""

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the provider.

        Args:
            base_url: API base URL
            api_key: Optional API key, sent as x-api-key
            timeout: Request timeout in seconds
            transport: Custom httpx transport (used by tests)
        """
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self._transport = transport

    def _get_headers(self) -> dict:
        """Get API headers."""
        headers = {"Accept": "application/json"}
        if self.api_key:
            headers["x-api-key"] = self.api_key
        return headers

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    async def _request(self, phase: str, method: str, path: str, **kwargs: Any) -> dict:
        """Send one request and return the decoded JSON object.

        Raises:
            NoRouteFoundError: provider reports no route for the pair
            ProviderError: transport failure, error status or malformed body
        """
        url = f"{self.base_url}{path}"
        logger.debug(f"{self.provider} {phase}: {method} {url}")

        try:
            async with self._client() as client:
                response = await client.request(method, url, headers=self._get_headers(), **kwargs)
        except httpx.HTTPError as e:
            raise ProviderError(self.provider, phase, f"{type(e).__name__}: {e}") from e

        if response.status_code != 200:
            body = response.text
            lowered = body.lower()
            if any(marker.lower() in lowered for marker in NO_ROUTE_MARKERS):
                raise NoRouteFoundError(self.provider, phase)
            logger.warning(f"{self.provider} API error: {response.status_code} - {body}")
            raise ProviderError(
                self.provider,
                phase,
                f"HTTP {response.status_code}: {body}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise ProviderError(self.provider, phase, f"invalid JSON response: {e}") from e

        if not isinstance(data, dict):
            raise ProviderError(self.provider, phase, "expected a JSON object")
        return data
