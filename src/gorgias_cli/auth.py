"""HTTP Basic authentication for the Gorgias REST API.

Gorgias authenticates API users with ``email:api_key`` sent as an
``Authorization: Basic <encoded>`` header per :rfc:`7617`. There is no
token exchange and nothing to refresh: bad credentials surface as an
:class:`~gorgias_cli.exceptions.AuthError` on every request.
"""

from __future__ import annotations

import base64

from gorgias_cli.models import GorgiasConfig


def basic_auth_header(email: str, api_key: str) -> str:
    """Return the ``Authorization`` header value for *email* / *api_key*."""
    raw = f"{email}:{api_key}"
    encoded = base64.b64encode(raw.encode("utf-8")).decode("ascii")
    return f"Basic {encoded}"


def auth_headers(config: GorgiasConfig) -> dict[str, str]:
    """Headers to merge into every request made with *config*."""
    return {"Authorization": basic_auth_header(config.email, config.api_key)}
