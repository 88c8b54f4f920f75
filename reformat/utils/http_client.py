"""
HTTP client factory for the conversion endpoint.

This module creates and closes the httpx client used to reach the remote
conversion service, with consistent timeout and connection pool settings.
Conversion requests are never retried here; retrying is left to the caller.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

import httpx

from ..config import Settings, get_settings

logger = logging.getLogger(__name__)


class HTTPClientFactory:
    """
    Creates and tracks the AsyncClient used for conversion requests.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self._client: Optional[httpx.AsyncClient] = None

    def _get_connection_limits(self) -> httpx.Limits:
        return httpx.Limits(
            max_keepalive_connections=20,
            max_connections=100,
            keepalive_expiry=30.0
        )

    def _get_timeout(self) -> httpx.Timeout:
        # read=None waits as long as the remote service needs
        return httpx.Timeout(
            connect=10.0,
            read=self.settings.http_timeout,
            write=600.0,  # Large uploads
            pool=10.0
        )

    def create_client(self, **overrides) -> httpx.AsyncClient:
        """
        Create the conversion client.

        Args:
            **overrides: Override default client configuration (e.g. transport)

        Returns:
            Configured AsyncClient instance
        """
        config = {
            'timeout': self._get_timeout(),
            'limits': self._get_connection_limits(),
            'follow_redirects': False,
        }
        config.update(overrides)

        self._client = httpx.AsyncClient(**config)
        logger.debug(f"Created conversion client for {self.settings.conversion_url}")
        return self._client

    def get_client(self) -> Optional[httpx.AsyncClient]:
        return self._client

    async def close(self) -> None:
        """Close the managed client, if any."""
        if self._client is None:
            return
        try:
            await self._client.aclose()
        except httpx.HTTPError as e:
            logger.warning(f"Error closing HTTP client: {e}")
        self._client = None


@asynccontextmanager
async def lifespan_http_client(factory: HTTPClientFactory, **overrides):
    """
    Context manager for HTTP client lifecycle management.

    Use this in FastAPI lifespan events to ensure proper client cleanup.
    """
    client = factory.create_client(**overrides)
    try:
        yield client
    finally:
        await factory.close()
