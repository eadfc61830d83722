"""HTTP client module for gorgias-cli.

Provides :class:`GorgiasClient`, an asynchronous client backed by
:class:`httpx.AsyncClient` that handles Basic auth, the request timeout,
error mapping and response caching for the Gorgias REST API.

Example::

    from gorgias_cli.client import GorgiasClient

    async with GorgiasClient(settings.gorgias) as client:
        ticket = await client.get_ticket(42)
"""

from gorgias_cli.client.client import TOOLS, GorgiasClient

__all__ = ["GorgiasClient", "TOOLS"]
