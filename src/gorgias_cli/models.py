"""Pydantic models shared across gorgias-cli.

**Configuration models** -- deserialised from the JSON config file:
    :class:`GorgiasConfig`, :class:`RequestConfig`, :class:`CacheConfig`
    and the top-level :class:`Settings`.

**Cache models** -- :class:`CacheStats`, returned by
:meth:`~gorgias_cli.cache.ResponseCache.stats`.

Gorgias resources (tickets, customers, messages, tags) are not modelled.
The client passes the decoded JSON through untouched, so they are plain
dict aliases here.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


Ticket = dict[str, Any]
Customer = dict[str, Any]
Message = dict[str, Any]
Tag = dict[str, Any]
ListResponse = dict[str, Any]
"""Pagination envelope: ``{"data": [...], "meta": {"total_count": ..., "cursor": ...}}``."""


# --- Config ---


class GorgiasConfig(BaseModel):
    """Account credentials, stored under the ``gorgias`` key of the config file.

    ``api_key`` is read from ``apiKey`` in the file. It may be a literal key
    or a credential source (``env:VAR`` / ``file:/path``), resolved by
    :func:`~gorgias_cli.config.load_settings`.

    Example::

        GorgiasConfig(domain="acme", email="agent@acme.com", apiKey="s3cret")
    """

    model_config = ConfigDict(populate_by_name=True)

    domain: str = Field(min_length=1, description="Gorgias subdomain: <domain>.gorgias.com")
    email: str = Field(min_length=1, description="Email of the API user")
    api_key: str = Field(alias="apiKey", min_length=1, description="REST API key")

    @property
    def base_url(self) -> str:
        """Root URL of the account's REST API."""
        return f"https://{self.domain}.gorgias.com/api"


class RequestConfig(BaseModel):
    """HTTP request settings applied to every API call."""

    timeout: float = Field(default=30, gt=0, description="Request timeout in seconds")


class CacheConfig(BaseModel):
    """In-memory response cache settings."""

    enabled: bool = Field(default=True, description="Enable response caching")
    namespace: str = Field(
        default="gorgias-support-manager", description="Label of the cache namespace"
    )


class Settings(BaseModel):
    """The whole config file."""

    gorgias: GorgiasConfig
    request: RequestConfig = Field(default_factory=RequestConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)


# --- Cache ---


class CacheStats(BaseModel):
    """Counters reported by ``cache-stats``.

    ``hits`` and ``misses`` accumulate for the lifetime of the cache
    instance; ``entry_count`` is the number of entries currently stored.
    """

    namespace: str
    enabled: bool = True
    hits: int = 0
    misses: int = 0
    entry_count: int = 0
