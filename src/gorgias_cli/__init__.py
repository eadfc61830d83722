"""gorgias-cli -- command-line access to the Gorgias helpdesk REST API.

Lists, reads and creates support tickets, posts messages and looks up
customers, with an in-memory response cache in front of the read calls.

Typical use::

    gorgias-cli list-tickets --status open --limit 20
    gorgias-cli get-ticket 12345
    gorgias-cli add-message 12345 --message "Thanks, shipped today" --from-agent

Modules:
    app: Typer application and CLI entry point.
    client: Async API client with timeout, error mapping and caching.
    cache: In-memory TTL cache and cache-key construction.
    config: Config file discovery, env overrides and credential sources.
    models: Pydantic models for configuration and cache statistics.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
"""

__version__ = "0.1.0"
