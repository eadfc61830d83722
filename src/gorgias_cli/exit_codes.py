"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~gorgias_cli.exceptions.GorgiasError` subclass.
Shell wrappers can inspect the exit code to tell a rate-limited request
from a bad ticket ID without parsing stderr.

Example::

    $ gorgias-cli get-ticket 999999
    $ echo $?
    4   # EXIT_NOT_FOUND
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred, or the configuration is unusable."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments."""

EXIT_AUTH_FAILURE = 3
"""Gorgias rejected the credentials (HTTP 401 / 403)."""

EXIT_NOT_FOUND = 4
"""The requested ticket or customer does not exist (HTTP 404)."""

EXIT_REMOTE_ERROR = 5
"""The Gorgias API answered with any other non-success status."""

EXIT_CONNECTION_ERROR = 6
"""The request timed out or never reached the API (DNS, refused connection)."""

EXIT_RATE_LIMITED = 7
"""The API answered HTTP 429. Wait and retry manually."""
