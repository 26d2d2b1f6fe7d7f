"""Process-wide httpx client used by the REST code store.

Opened once in the app lifespan and shared by every RestUnitOfWork, so
requests reuse one connection pool to the store. The timeout comes from
HTTP_TIMEOUT_SECONDS.
"""

from __future__ import annotations

from typing import Optional
import httpx

from license_verifier.settings import get_settings

_client: Optional[httpx.AsyncClient] = None


async def open_http_client() -> httpx.AsyncClient:
    """Create a single shared AsyncClient (if not already created)."""
    global _client
    if _client is None:
        _client = httpx.AsyncClient(timeout=get_settings().http_timeout_seconds)
    return _client


def get_http_client() -> httpx.AsyncClient:
    """Return the client the REST code store talks through (opened at startup)."""
    if _client is None:
        raise RuntimeError(
            "HTTP client not opened yet. Call open_http_client() at startup."
        )
    return _client


async def close_http_client() -> None:
    """Close and drop the shared client."""
    global _client
    if _client is not None:
        await _client.aclose()
        _client = None
