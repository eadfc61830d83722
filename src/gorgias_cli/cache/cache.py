"""In-memory response cache with per-entry TTL.

:class:`ResponseCache` keeps decoded API payloads in a process-local dict.
Read operations of :class:`~gorgias_cli.client.GorgiasClient` go through
:meth:`ResponseCache.get_or_fetch`; mutations call :meth:`~ResponseCache.invalidate`
or :meth:`~ResponseCache.invalidate_pattern` afterwards.

Keys come from :func:`create_cache_key`: the operation name plus the
parameters with keys sorted and ``None`` values dropped, so
``{"limit": 10, "status": None}`` and ``{"limit": 10}`` share an entry.

Expiry is checked lazily on read against an injectable monotonic clock.
Nothing is persisted; each CLI invocation starts cold.
"""

from __future__ import annotations

import json
import re
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, Union

from gorgias_cli.models import CacheStats
from gorgias_cli.output import get_output


class TTL:
    """Standard lifetimes, in seconds."""

    MINUTE = 60
    FIVE_MINUTES = 5 * 60
    FIFTEEN_MINUTES = 15 * 60


def create_cache_key(operation: str, params: Optional[dict[str, Any]] = None) -> str:
    """Build a deterministic cache key.

    Values are JSON-encoded so that strings containing separators cannot
    collide with a different parameter set.

    Example::

        >>> create_cache_key("ticket", {"id": 42})
        'ticket/{id:42}'
        >>> create_cache_key("tickets", {"status": "open", "limit": 10, "cursor": None})
        'tickets/{limit:10,status:"open"}'
    """
    items = sorted((k, v) for k, v in (params or {}).items() if v is not None)
    body = ",".join(
        f"{k}:{json.dumps(v, sort_keys=True, separators=(',', ':'))}" for k, v in items
    )
    return f"{operation}/{{{body}}}"


@dataclass
class CacheEntry:
    value: Any
    expires_at: float


class ResponseCache:
    """Namespaced key-value store with TTL, used in a get-or-fetch pattern.

    Only successful fetches are stored: if the producer raises, the
    exception propagates and the key stays empty. Concurrent misses on the
    same key each call their producer; requests are not coalesced.

    While disabled the cache neither reads nor writes, and the hit/miss
    counters are left alone. :meth:`clear` empties the store but keeps the
    counters.

    Args:
        namespace: Label reported in :meth:`stats` and debug output.
        default_ttl: Lifetime in seconds used when ``get_or_fetch`` gets no ``ttl``.
        enabled: Initial state of the enable/disable toggle.
        clock: Zero-argument callable returning seconds. Tests pass a fake.

    Example::

        cache = ResponseCache(namespace="gorgias-support-manager")
        ticket = await cache.get_or_fetch(
            create_cache_key("ticket", {"id": 42}),
            lambda: fetch_ticket(42),
            ttl=TTL.MINUTE,
        )
    """

    def __init__(
        self,
        namespace: str = "gorgias-support-manager",
        default_ttl: float = TTL.FIVE_MINUTES,
        enabled: bool = True,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._namespace = namespace
        self._default_ttl = default_ttl
        self._enabled = enabled
        self._clock = clock
        self._store: dict[str, CacheEntry] = {}
        self._hits = 0
        self._misses = 0

    @property
    def namespace(self) -> str:
        return self._namespace

    @property
    def enabled(self) -> bool:
        return self._enabled

    def disable(self) -> None:
        """Stop reading from and writing to the store until :meth:`enable`."""
        self._enabled = False

    def enable(self) -> None:
        self._enabled = True

    async def get_or_fetch(
        self,
        key: str,
        producer: Callable[[], Awaitable[Any]],
        ttl: Optional[float] = None,
        bypass_cache: bool = False,
    ) -> Any:
        """Return the cached value for *key*, or fetch and store it.

        Args:
            key: Cache key, normally from :func:`create_cache_key`.
            producer: Coroutine factory performing the real fetch.
            ttl: Lifetime in seconds of a newly stored value. Defaults to
                ``default_ttl``.
            bypass_cache: Skip the lookup but still store the fresh value.

        Returns:
            The cached or freshly produced value. Hits return the stored
            object itself, not a copy; callers must not mutate it.
        """
        output = get_output()
        if not self._enabled:
            output.debug(f"Cache disabled: {key}")
            return await producer()

        if not bypass_cache:
            entry = self._store.get(key)
            if entry is not None:
                if self._clock() < entry.expires_at:
                    self._hits += 1
                    output.debug(f"Cache hit: {key}")
                    return entry.value
                del self._store[key]
                output.debug(f"Cache expired: {key}")

        self._misses += 1
        output.debug(f"Cache miss: {key}")
        value = await producer()

        lifetime = self._default_ttl if ttl is None else ttl
        self._store[key] = CacheEntry(value=value, expires_at=self._clock() + lifetime)
        return value

    def invalidate(self, key: str) -> bool:
        """Remove one entry. Returns ``True`` if it existed."""
        removed = self._store.pop(key, None) is not None
        if removed:
            get_output().debug(f"Cache invalidated: {key}")
        return removed

    def invalidate_pattern(self, pattern: Union[str, re.Pattern[str]]) -> int:
        """Remove every entry whose key matches *pattern*.

        Args:
            pattern: A key prefix, or a compiled regex matched with
                :meth:`re.Pattern.search`.

        Returns:
            The number of entries removed.
        """
        if isinstance(pattern, str):
            matches: Callable[[str], Any] = lambda key: key.startswith(pattern)  # noqa: E731
            label = f"{pattern}*"
        else:
            matches = pattern.search
            label = pattern.pattern

        doomed = [key for key in self._store if matches(key)]
        for key in doomed:
            del self._store[key]
        get_output().debug(f"Cache invalidated {len(doomed)} entries matching {label}")
        return len(doomed)

    def clear(self) -> int:
        """Remove all entries. Returns the number removed."""
        count = len(self._store)
        self._store.clear()
        return count

    def stats(self) -> CacheStats:
        return CacheStats(
            namespace=self._namespace,
            enabled=self._enabled,
            hits=self._hits,
            misses=self._misses,
            entry_count=len(self._store),
        )
