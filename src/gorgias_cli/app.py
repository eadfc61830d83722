"""Typer application and CLI entry point for gorgias-cli.

Every command maps onto one :class:`~gorgias_cli.client.GorgiasClient`
method: the command validates its arguments, loads the settings, runs the
client call inside :func:`asyncio.run` and renders the result with
:func:`~gorgias_cli.output.format_response`. One command runs per process,
so the response cache only lives for that command.

Errors from the client are reported on stderr and mapped to the exit codes
of :mod:`gorgias_cli.exit_codes`. Unexpected exceptions are written to a
crash log under the data directory by :func:`main`.
"""

from __future__ import annotations

import asyncio
import re
import signal
import sys
import traceback
from datetime import datetime
from enum import Enum
from typing import Any, Awaitable, Callable, Optional

import httpx
import typer

from gorgias_cli import __version__
from gorgias_cli.exit_codes import EXIT_CONNECTION_ERROR, EXIT_GENERIC_FAILURE

app = typer.Typer(
    name="gorgias-cli",
    help="Gorgias support ticket management.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

# Tickets fetched per page when filtering locally, before applying --limit.
_FILTER_FETCH_LIMIT = 100


class TicketStatus(str, Enum):
    OPEN = "open"
    CLOSED = "closed"


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"gorgias-cli {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    config: Optional[str] = typer.Option(
        None, "--config", "-c", help="Path to config.json."
    ),
    no_cache: bool = typer.Option(
        False, "--no-cache", help="Bypass the response cache."
    ),
    json_output: bool = typer.Option(
        False, "--json", help="JSON output format."
    ),
    plain_output: bool = typer.Option(
        False, "--plain", help="Plain text output."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output."
    ),
    output_file: Optional[str] = typer.Option(
        None, "-o", "--output", help="Output file path."
    ),
) -> None:
    """Root callback executed before every command.

    Installs the global :class:`~gorgias_cli.output.OutputManager` from the
    formatting flags and stores ``config`` and ``no_cache`` in ``ctx.obj``
    for the commands.
    """
    from gorgias_cli.output import OutputFormat, OutputManager, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    set_output(
        OutputManager(
            format=fmt,
            no_color=no_color,
            quiet=quiet,
            verbose=verbose,
            output_file=output_file,
        )
    )

    ctx.ensure_object(dict)
    ctx.obj["config"] = config
    ctx.obj["no_cache"] = no_cache


# ------------------------------------------------------------------ #
# Command plumbing
# ------------------------------------------------------------------ #


def _run(ctx: typer.Context, call: Callable[[Any], Awaitable[Any]]) -> None:
    """Build a client from the active settings, await *call* on it, print the result.

    :class:`~gorgias_cli.exceptions.GorgiasError` and network failures are
    reported on stderr and turned into the matching exit code.
    """
    from gorgias_cli.cache import ResponseCache
    from gorgias_cli.client import GorgiasClient
    from gorgias_cli.config import load_settings
    from gorgias_cli.exceptions import GorgiasError, RateLimitError
    from gorgias_cli.output import error, format_response, suggest

    obj = ctx.obj or {}

    async def _invoke() -> Any:
        settings = load_settings(obj.get("config"))
        cache = ResponseCache(
            namespace=settings.cache.namespace,
            enabled=settings.cache.enabled,
        )
        async with GorgiasClient(settings.gorgias, cache=cache, request=settings.request) as client:
            if obj.get("no_cache"):
                client.disable_cache()
            return await call(client)

    try:
        result = asyncio.run(_invoke())
    except GorgiasError as exc:
        error(str(exc))
        if isinstance(exc, RateLimitError):
            suggest("Gorgias is rate limiting this account. Wait a few seconds and run the command again.")
        raise typer.Exit(code=exc.exit_code) from None
    except httpx.TransportError as exc:
        error(f"Could not reach Gorgias: {exc}")
        raise typer.Exit(code=EXIT_CONNECTION_ERROR) from None

    format_response(result)


def _fail_usage(message: str) -> None:
    from gorgias_cli.exceptions import InvalidUsageError
    from gorgias_cli.output import error

    exc = InvalidUsageError(message)
    error(str(exc))
    raise typer.Exit(code=exc.exit_code)


def _matches_search(ticket: dict[str, Any], term: str) -> bool:
    subject = (ticket.get("subject") or "").lower()
    excerpt = (ticket.get("excerpt") or "").lower()
    return term in subject or term in excerpt


# ------------------------------------------------------------------ #
# Commands
# ------------------------------------------------------------------ #


@app.command("list-tools")
def list_tools() -> None:
    """List all available CLI commands."""
    from gorgias_cli.client import TOOLS
    from gorgias_cli.output import format_response

    format_response([dict(tool) for tool in TOOLS])


@app.command("list-tickets")
def list_tickets(
    ctx: typer.Context,
    limit: int = typer.Option(50, "--limit", min=1, max=250, help="Maximum tickets to return."),
    status: Optional[TicketStatus] = typer.Option(
        None, "--status", case_sensitive=False, help="Filter by status (client-side)."
    ),
    search: Optional[str] = typer.Option(
        None, "--search", help="Search subject and excerpt by keyword (client-side)."
    ),
    order_by: Optional[str] = typer.Option(
        None, "--order-by", help="Order by field (e.g. created_datetime:desc)."
    ),
    cursor: Optional[str] = typer.Option(None, "--cursor", help="Pagination cursor."),
) -> None:
    """List tickets with optional filtering.

    The API filters on neither status nor keyword, so when either is given
    a larger page is fetched, filtered locally, then cut to ``--limit``.
    Status comparison ignores case, so ``Open`` matches ``--status open``.
    """
    fetch_limit = _FILTER_FETCH_LIMIT if (status or search) else limit

    async def call(client: Any) -> Any:
        result = await client.list_tickets(limit=fetch_limit, order_by=order_by, cursor=cursor)
        tickets = result.get("data") or []
        if status:
            tickets = [t for t in tickets if (t.get("status") or "").lower() == status.value]
        if search:
            term = search.lower()
            tickets = [t for t in tickets if _matches_search(t, term)]
        return {**result, "data": tickets[:limit]}

    _run(ctx, call)


@app.command("get-ticket")
def get_ticket(
    ctx: typer.Context,
    ticket_id: int = typer.Argument(..., min=1, metavar="ID", help="Ticket ID."),
) -> None:
    """Get ticket details by ID."""
    _run(ctx, lambda client: client.get_ticket(ticket_id))


@app.command("create-ticket")
def create_ticket(
    ctx: typer.Context,
    customer_email: str = typer.Option(..., "--customer-email", help="Customer email address."),
    subject: str = typer.Option(..., "--subject", help="Ticket subject."),
    message: str = typer.Option(..., "--message", help="Initial message content."),
) -> None:
    """Create a new support ticket."""
    if not _EMAIL_RE.match(customer_email):
        _fail_usage(f"Invalid customer email: {customer_email!r}")
    if not subject.strip():
        _fail_usage("Subject must not be empty")
    if not message.strip():
        _fail_usage("Message must not be empty")

    _run(ctx, lambda client: client.create_ticket(customer_email, subject, message))


@app.command("add-message")
def add_message(
    ctx: typer.Context,
    ticket_id: int = typer.Argument(..., min=1, metavar="TICKET_ID", help="Ticket ID."),
    message: str = typer.Option(..., "--message", help="Message text."),
    from_agent: bool = typer.Option(
        False, "--from-agent/--from-customer", help="Whether the message is from an agent."
    ),
) -> None:
    """Add a message to an existing ticket."""
    if not message.strip():
        _fail_usage("Message must not be empty")

    _run(ctx, lambda client: client.add_message(ticket_id, message, from_agent))


@app.command("list-customers")
def list_customers(
    ctx: typer.Context,
    limit: int = typer.Option(50, "--limit", min=1, max=250, help="Maximum customers to return."),
    email: Optional[str] = typer.Option(None, "--email", help="Filter by email address."),
    cursor: Optional[str] = typer.Option(None, "--cursor", help="Pagination cursor."),
) -> None:
    """List customers with optional email filter."""
    _run(ctx, lambda client: client.list_customers(limit=limit, email=email, cursor=cursor))


@app.command("get-customer")
def get_customer(
    ctx: typer.Context,
    customer_id: int = typer.Argument(..., min=1, metavar="ID", help="Customer ID."),
) -> None:
    """Get customer details by ID."""
    _run(ctx, lambda client: client.get_customer(customer_id))


@app.command("cache-stats")
def cache_stats(ctx: typer.Context) -> None:
    """Show cache statistics."""

    async def call(client: Any) -> Any:
        return client.cache_stats().model_dump()

    _run(ctx, call)


@app.command("cache-clear")
def cache_clear(ctx: typer.Context) -> None:
    """Clear all cached data."""

    async def call(client: Any) -> Any:
        return {"cleared": client.clear_cache()}

    _run(ctx, call)


# ------------------------------------------------------------------ #
# Entry point
# ------------------------------------------------------------------ #


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write the current traceback to the data directory and return the log path."""
    from gorgias_cli.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(traceback.format_exc())
    return str(log_path)


def main() -> None:
    """Console-script entry point.

    Unhandled :class:`~gorgias_cli.exceptions.GorgiasError` instances exit
    with the error's ``exit_code``. Anything else produces a crash log and
    a generic failure exit.
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from gorgias_cli.exceptions import GorgiasError
        from gorgias_cli.output import error

        if isinstance(exc, GorgiasError):
            error(str(exc))
            sys.exit(exc.exit_code)
        log_path = _write_crash_log(exc)
        error(f"Unexpected error. Debug log: {log_path}")
        sys.exit(EXIT_GENERIC_FAILURE)
