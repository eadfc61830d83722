"""Exception hierarchy for gorgias-cli.

All exceptions inherit from :class:`GorgiasError`, which carries an
``exit_code`` attribute mapped to a constant from
:mod:`gorgias_cli.exit_codes`. Neither the client nor the cache catches
these; the command runner in :mod:`gorgias_cli.app` turns them into an
error line on stderr and the matching exit code.

Subclass hierarchy::

    GorgiasError (exit 1)
    +-- InvalidUsageError    (exit 2)
    +-- ConfigError          (exit 1)
    +-- RequestTimeoutError  (exit 6)
    +-- RemoteAPIError       (exit 5)
        +-- AuthError        (exit 3)
        +-- NotFoundError    (exit 4)
        +-- RateLimitError   (exit 7)
        +-- ServerError      (exit 5)

Network failures that are not timeouts (DNS, connection refused) are not
wrapped: the underlying :class:`httpx.TransportError` propagates as-is.
"""

from gorgias_cli.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_NOT_FOUND,
    EXIT_RATE_LIMITED,
    EXIT_REMOTE_ERROR,
)


class GorgiasError(Exception):
    """Base exception for all gorgias-cli errors.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(GorgiasError):
    """Raised for invalid CLI arguments (bad email, empty subject, ...)."""

    exit_code = EXIT_INVALID_USAGE


class ConfigError(GorgiasError):
    """Raised when the config file is missing, malformed, or lacks credentials."""

    exit_code = EXIT_GENERIC_FAILURE


class RequestTimeoutError(GorgiasError):
    """Raised when a request does not complete within the configured timeout."""

    exit_code = EXIT_CONNECTION_ERROR


class RemoteAPIError(GorgiasError):
    """Raised when the Gorgias API answers with a non-success status.

    Args:
        status_code: The HTTP status code of the response.
        body: The raw response body text, kept verbatim.
    """

    exit_code = EXIT_REMOTE_ERROR

    def __init__(self, status_code: int, body: str = ""):
        super().__init__(f"Gorgias API error ({status_code}): {body}")
        self.status_code = status_code
        self.body = body


class AuthError(RemoteAPIError):
    """HTTP 401 / 403 -- the email / API key pair was rejected."""

    exit_code = EXIT_AUTH_FAILURE


class NotFoundError(RemoteAPIError):
    """HTTP 404."""

    exit_code = EXIT_NOT_FOUND


class RateLimitError(RemoteAPIError):
    """HTTP 429. Never retried automatically."""

    exit_code = EXIT_RATE_LIMITED


class ServerError(RemoteAPIError):
    """HTTP 5xx."""

    exit_code = EXIT_REMOTE_ERROR
