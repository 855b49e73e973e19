"""Provenance helpers for provider adapters."""

from datetime import UTC, datetime

from tripboard.app.models.common import Provenance


def provenance_for_http(source: str, url: str, cache_hit: bool = False) -> Provenance:
    """Create provenance for HTTP-based provider results.

    Args:
        source: Source identifier (e.g., "directions.google")
        url: URL of the HTTP request, without credentials
        cache_hit: Whether result came from cache

    Returns:
        Provenance with source=provider-specific string, fetched_at=now(UTC)
    """
    return Provenance(
        source=f"provider.{source}",
        ref_id=source,
        source_url=url,
        fetched_at=datetime.now(UTC),
        cache_hit=cache_hit,
    )
