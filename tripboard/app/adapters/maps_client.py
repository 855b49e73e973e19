"""Process-wide HTTP client for external providers.

Created lazily on first use and shared by every adapter, so connection pools
and default options are configured exactly once. Only adapters depend on it;
the scheduling core never performs I/O.
"""

import httpx

_client: httpx.AsyncClient | None = None

DEFAULT_TIMEOUT_S = 4.0


def get_maps_client() -> httpx.AsyncClient:
    """Return the shared client, creating it on first call."""
    global _client
    if _client is None or _client.is_closed:
        _client = httpx.AsyncClient(
            timeout=DEFAULT_TIMEOUT_S,
            headers={"Accept-Language": "en"},
        )
    return _client


async def close_maps_client() -> None:
    """Close the shared client (application shutdown)."""
    global _client
    if _client is not None:
        await _client.aclose()
        _client = None
