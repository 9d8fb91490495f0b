"""HTTP client with connection pooling for claudemonitor."""

from contextlib import asynccontextmanager

import httpx

from claudemonitor.config.settings import get_config

# Global HTTP client
_client: httpx.AsyncClient | None = None


def get_timeout_config() -> httpx.Timeout:
    """Get timeout configuration from settings."""
    config = get_config()
    return httpx.Timeout(config.fetch.timeout, connect=10.0)


@asynccontextmanager
async def get_http_client():
    """Get or create the shared HTTP client.

    Usage:
        async with get_http_client() as client:
            response = await client.get(...)
    """
    global _client

    if _client is None or _client.is_closed:
        _client = httpx.AsyncClient(
            timeout=get_timeout_config(),
            limits=httpx.Limits(max_connections=4, max_keepalive_connections=2),
            follow_redirects=True,
        )

    # Kept open for reuse across refresh cycles
    yield _client


async def cleanup() -> None:
    """Close the HTTP client.

    Should be called on application shutdown.
    """
    global _client
    if _client is not None:
        await _client.aclose()
        _client = None
