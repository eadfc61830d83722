"""Asynchronous Gorgias REST API client with response caching.

:class:`GorgiasClient` wraps :class:`httpx.AsyncClient` and exposes the six
helpdesk operations the CLI needs. It layers on:

- **Basic auth** -- ``email:api_key`` injected into every request.
- **Timeout** -- each request is aborted after ``RequestConfig.timeout``
  seconds (30 by default) with :class:`~gorgias_cli.exceptions.RequestTimeoutError`.
- **Error mapping** -- non-2xx responses raise a
  :class:`~gorgias_cli.exceptions.RemoteAPIError` subclass carrying the
  status code and the response body.
- **Caching** -- reads go through
  :meth:`~gorgias_cli.cache.ResponseCache.get_or_fetch`; writes invalidate
  the entries they make stale.

There is no retry: a 429 or a 5xx is reported to the caller,
who decides whether to run the command again.
"""

from __future__ import annotations

import asyncio
from typing import Any, Optional

import httpx

from gorgias_cli.auth import auth_headers
from gorgias_cli.cache import TTL, ResponseCache, create_cache_key
from gorgias_cli.exceptions import (
    AuthError,
    NotFoundError,
    RateLimitError,
    RemoteAPIError,
    RequestTimeoutError,
    ServerError,
)
from gorgias_cli.models import (
    CacheStats,
    Customer,
    GorgiasConfig,
    ListResponse,
    Message,
    RequestConfig,
    Ticket,
)
from gorgias_cli.output import get_output

TOOLS: list[dict[str, str]] = [
    {"name": "list-tickets", "description": "List tickets with optional filters"},
    {"name": "get-ticket", "description": "Get a specific ticket by ID"},
    {"name": "create-ticket", "description": "Create a new ticket"},
    {"name": "add-message", "description": "Add a message to an existing ticket"},
    {"name": "list-customers", "description": "List customers with optional filters"},
    {"name": "get-customer", "description": "Get a specific customer by ID"},
    {"name": "cache-stats", "description": "Show cache statistics"},
    {"name": "cache-clear", "description": "Clear all cached data"},
]


class GorgiasClient:
    """Client for one Gorgias account.

    Must be used as an async context manager so the underlying transport is
    opened and closed properly. The same instance (and so the same cache)
    may serve any number of calls inside the ``async with`` block.

    Args:
        config: Account domain and credentials.
        cache: Response cache to use. A private one is created when omitted.
        request: Request settings (timeout).
        transport: Optional httpx transport, e.g. :class:`httpx.MockTransport`
            in tests.

    Example::

        async with GorgiasClient(settings.gorgias) as client:
            page = await client.list_tickets(limit=10, status="open")
            ticket = await client.get_ticket(page["data"][0]["id"])
    """

    def __init__(
        self,
        config: GorgiasConfig,
        cache: Optional[ResponseCache] = None,
        request: Optional[RequestConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._config = config
        self._cache = cache if cache is not None else ResponseCache()
        self._request_config = request or RequestConfig()
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def base_url(self) -> str:
        return self._config.base_url

    @property
    def cache(self) -> ResponseCache:
        return self._cache

    # ------------------------------------------------------------------ #
    # Async context manager
    # ------------------------------------------------------------------ #

    async def __aenter__(self) -> GorgiasClient:
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self._request_config.timeout,
            transport=self._transport,
            follow_redirects=True,
        )
        return self

    async def __aexit__(self, *args: object) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    # ------------------------------------------------------------------ #
    # Cache control
    # ------------------------------------------------------------------ #

    def disable_cache(self) -> None:
        """Send every subsequent read to the API, without touching the cache."""
        self._cache.disable()

    def enable_cache(self) -> None:
        self._cache.enable()

    def cache_stats(self) -> CacheStats:
        return self._cache.stats()

    def clear_cache(self) -> int:
        """Drop all cached data. Returns the number of entries removed."""
        return self._cache.clear()

    def invalidate_cache_key(self, key: str) -> bool:
        return self._cache.invalidate(key)

    # ------------------------------------------------------------------ #
    # Tickets
    # ------------------------------------------------------------------ #

    async def list_tickets(
        self,
        limit: Optional[int] = None,
        status: Optional[str] = None,
        order_by: Optional[str] = None,
        cursor: Optional[str] = None,
    ) -> ListResponse:
        """List tickets, newest first unless ``order_by`` says otherwise.

        The API has no status filter (``status`` as a query parameter is
        rejected with a 400), so ``status`` is matched here, exactly and
        case-sensitively, against each ticket's ``status`` field. The
        filtered page is then capped at ``limit``.

        Args:
            limit: Page size requested from the API.
            status: Keep only tickets with this status, e.g. ``"open"``.
            order_by: Sort field, e.g. ``"created_datetime:desc"``.
            cursor: Pagination cursor from a previous response's ``meta``.

        Returns:
            The ``{"data": [...], "meta": {...}}`` envelope.

        Cached for 5 minutes, keyed on all four arguments. Unset and empty
        arguments are left out of the key, as they are left out of the query.
        """
        params = _query({"limit": limit, "order_by": order_by, "cursor": cursor})
        key = create_cache_key("tickets", _query({**params, "status": status}))

        async def fetch() -> ListResponse:
            result = await self._request("GET", "/tickets", params=params)
            if status:
                result["data"] = [t for t in result.get("data", []) if t.get("status") == status]
            if limit is not None:
                result["data"] = result.get("data", [])[:limit]
            return result

        return await self._cache.get_or_fetch(key, fetch, ttl=TTL.FIVE_MINUTES)

    async def get_ticket(self, ticket_id: int) -> Ticket:
        """Fetch one ticket with its messages and customer.

        Cached for 1 minute.
        """
        return await self._cache.get_or_fetch(
            _ticket_key(ticket_id),
            lambda: self._request("GET", f"/tickets/{ticket_id}"),
            ttl=TTL.MINUTE,
        )

    async def create_ticket(self, customer_email: str, subject: str, message: str) -> Ticket:
        """Open a ticket on behalf of a customer.

        On success every cached ticket and ticket list is invalidated, since
        the new ticket changes list contents and counts.

        Args:
            customer_email: The customer's address; Gorgias creates the
                customer if it does not exist yet.
            subject: Ticket subject line.
            message: Body of the first (customer) message.

        Returns:
            The created ticket.
        """
        body = {
            "channel": "api",
            "customer": {"email": customer_email},
            "messages": [
                {
                    "channel": "api",
                    "body_text": message,
                    "from_agent": False,
                    "via": "api",
                }
            ],
            "subject": subject,
        }
        result = await self._request("POST", "/tickets", json_body=body)
        self._cache.invalidate_pattern("ticket")
        return result

    async def add_message(self, ticket_id: int, message: str, from_agent: bool) -> Message:
        """Append a message to a ticket.

        Only the cached copy of that ticket is invalidated; list entries
        stay, as a new message changes neither ticket existence nor order.
        """
        body = {
            "channel": "api",
            "body_text": message,
            "from_agent": from_agent,
            "via": "api",
        }
        result = await self._request("POST", f"/tickets/{ticket_id}/messages", json_body=body)
        self._cache.invalidate(_ticket_key(ticket_id))
        return result

    # ------------------------------------------------------------------ #
    # Customers
    # ------------------------------------------------------------------ #

    async def list_customers(
        self,
        limit: Optional[int] = None,
        email: Optional[str] = None,
        cursor: Optional[str] = None,
    ) -> ListResponse:
        """List customers, optionally only the one with an exact ``email``.

        Cached for 15 minutes.
        """
        params = _query({"limit": limit, "email": email, "cursor": cursor})
        return await self._cache.get_or_fetch(
            create_cache_key("customers", params),
            lambda: self._request("GET", "/customers", params=params),
            ttl=TTL.FIFTEEN_MINUTES,
        )

    async def get_customer(self, customer_id: int) -> Customer:
        """Fetch one customer. Cached for 15 minutes."""
        return await self._cache.get_or_fetch(
            create_cache_key("customer", {"id": customer_id}),
            lambda: self._request("GET", f"/customers/{customer_id}"),
            ttl=TTL.FIFTEEN_MINUTES,
        )

    def tools(self) -> list[dict[str, str]]:
        """Commands available on the CLI, with one-line descriptions."""
        return [dict(tool) for tool in TOOLS]

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    async def _request(
        self,
        method: str,
        path: str,
        params: Optional[dict[str, Any]] = None,
        json_body: Optional[Any] = None,
    ) -> Any:
        """Send one request and return the decoded JSON body.

        Raises:
            RequestTimeoutError: The request did not finish within the timeout.
            RemoteAPIError: Any non-2xx status (see :meth:`_map_response_error`).
            httpx.TransportError: Other network failures, unwrapped.
        """
        assert self._client is not None, "Client not initialised -- use as async context manager"

        headers = {
            **auth_headers(self._config),
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        kwargs: dict[str, Any] = {"headers": headers}
        if params:
            kwargs["params"] = params
        if json_body is not None:
            kwargs["json"] = json_body

        timeout = self._request_config.timeout
        get_output().debug(f"{method} {self.base_url}{path} {params or ''}".rstrip())
        try:
            response = await asyncio.wait_for(
                self._client.request(method, path, **kwargs), timeout=timeout
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
            raise RequestTimeoutError(
                f"Gorgias API request timed out after {timeout:g}s"
            ) from exc

        self._map_response_error(response)
        return _decode(response)

    def _map_response_error(self, response: httpx.Response) -> None:
        """Raise a typed exception for non-success HTTP status codes."""
        status = response.status_code
        if 200 <= status < 300:
            return

        body = response.text
        if status in (401, 403):
            raise AuthError(status, body)
        if status == 404:
            raise NotFoundError(status, body)
        if status == 429:
            raise RateLimitError(status, body)
        if status >= 500:
            raise ServerError(status, body)
        raise RemoteAPIError(status, body)


def _ticket_key(ticket_id: int) -> str:
    return create_cache_key("ticket", {"id": ticket_id})


def _query(params: dict[str, Any]) -> dict[str, Any]:
    """Drop unset query parameters."""
    return {k: v for k, v in params.items() if v is not None and v != ""}


def _decode(response: httpx.Response) -> Any:
    """Decode a JSON body; an empty body decodes to ``None``."""
    if not response.content:
        return None
    return response.json()
