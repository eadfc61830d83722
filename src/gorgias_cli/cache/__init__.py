"""In-memory response caching for gorgias-cli.

This package provides :class:`ResponseCache`, a namespaced TTL store used
by :class:`~gorgias_cli.client.GorgiasClient` to avoid refetching tickets
and customers within one session, together with :func:`create_cache_key`
and the standard :class:`TTL` lifetimes.
"""

from gorgias_cli.cache.cache import TTL, CacheEntry, ResponseCache, create_cache_key

__all__ = ["ResponseCache", "CacheEntry", "TTL", "create_cache_key"]
