"""Configuration loading with XDG paths, env overrides, and credential sources.

The CLI needs three values before it can talk to Gorgias: the account
subdomain, the API user's email and its API key. They come from a JSON
file shaped like::

    {
      "gorgias": {"domain": "acme", "email": "agent@acme.com", "apiKey": "env:GORGIAS_KEY"},
      "request": {"timeout": 30},
      "cache": {"enabled": true}
    }

* **File discovery** -- :func:`find_config_file` checks, in order, an
  explicit path (``--config``), ``$GORGIAS_CONFIG``, ``./config.json`` and
  ``<config_dir>/config.json``.
* **Environment overrides** -- ``GORGIAS_DOMAIN``, ``GORGIAS_EMAIL`` and
  ``GORGIAS_API_KEY`` replace the matching field of the file.
* **Credential sources** -- ``apiKey`` may be ``env:VAR`` or
  ``file:/path`` instead of the literal key; see :func:`resolve_credential`.

Anything missing or malformed raises :class:`~gorgias_cli.exceptions.ConfigError`.
"""

from __future__ import annotations

import json
import os
import platform
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from gorgias_cli.exceptions import ConfigError
from gorgias_cli.models import Settings

_APP_NAME = "gorgias-cli"
_CONFIG_FILENAME = "config.json"

_ENV_CONFIG = "GORGIAS_CONFIG"
_ENV_OVERRIDES = {
    "GORGIAS_DOMAIN": "domain",
    "GORGIAS_EMAIL": "email",
    "GORGIAS_API_KEY": "apiKey",
}


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform follows XDG Base Directory conventions (Linux/BSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    """Fallback base directory for non-XDG platforms (macOS, Windows)."""
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from an env var with fallback segments under $HOME."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_config_dir() -> Path:
    """Return the configuration directory. It is not created.

    On Linux/BSD: ``$XDG_CONFIG_HOME/gorgias-cli/`` (default
    ``~/.config/gorgias-cli/``). On macOS/Windows: ``~/.gorgias-cli/``.
    """
    if _is_xdg_platform():
        return _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    return _fallback_base_dir()


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/gorgias-cli/`` (default
    ``~/.local/share/gorgias-cli/``). On macOS/Windows: ``~/.gorgias-cli/logs/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Config file ---


def find_config_file(explicit: Optional[str] = None) -> Optional[Path]:
    """Locate the config file.

    Precedence (high to low):
        1. ``explicit`` (the ``--config`` flag)
        2. ``$GORGIAS_CONFIG``
        3. ``./config.json``
        4. ``<config_dir>/config.json``

    Args:
        explicit: Path given on the command line, if any.

    Returns:
        The first candidate that exists, or ``None`` when there is none.

    Raises:
        ConfigError: If an explicitly requested file (flag or env var) does
            not exist.
    """
    for requested, origin in ((explicit, "--config"), (os.environ.get(_ENV_CONFIG), _ENV_CONFIG)):
        if requested:
            path = Path(requested).expanduser()
            if not path.is_file():
                raise ConfigError(f"Config file not found: {path} (from {origin})")
            return path

    for candidate in (Path.cwd() / _CONFIG_FILENAME, get_config_dir() / _CONFIG_FILENAME):
        if candidate.is_file():
            return candidate
    return None


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigError(f"Invalid config at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid config at {path}: expected a JSON object")
    return data


def load_settings(config_path: Optional[str] = None) -> Settings:
    """Load, merge and validate the configuration.

    Args:
        config_path: Explicit config file path (``--config``).

    Returns:
        The validated :class:`~gorgias_cli.models.Settings` with the API key
        resolved to its literal value.

    Raises:
        ConfigError: If no source supplies ``domain``, ``email`` and
            ``apiKey``, the file is not valid JSON, or a credential source
            cannot be resolved.
    """
    path = find_config_file(config_path)
    raw: dict[str, Any] = _read_json(path) if path is not None else {}

    gorgias = raw.get("gorgias") or {}
    if not isinstance(gorgias, dict):
        raise ConfigError(f"Invalid config at {path}: 'gorgias' must be an object")
    gorgias = dict(gorgias)
    for env_var, field in _ENV_OVERRIDES.items():
        value = os.environ.get(env_var)
        if value:
            gorgias[field] = value

    missing = [field for field in ("domain", "email", "apiKey") if not gorgias.get(field)]
    if missing:
        where = str(path) if path is not None else "no config file found"
        raise ConfigError(
            "Missing required config: "
            + ", ".join(f"gorgias.{field}" for field in missing)
            + f" ({where})"
        )

    not_text = [field for field in ("domain", "email", "apiKey") if not isinstance(gorgias[field], str)]
    if not_text:
        raise ConfigError(
            f"Invalid config at {path}: "
            + ", ".join(f"gorgias.{field}" for field in not_text)
            + " must be a string"
        )

    gorgias["apiKey"] = resolve_credential(gorgias["apiKey"])
    raw["gorgias"] = gorgias

    try:
        return Settings.model_validate(raw)
    except ValidationError as exc:
        raise ConfigError(f"Invalid config at {path}: {exc}") from exc


# --- Credential source resolution ---


def resolve_credential(source: str) -> str:
    """Resolve an API key from its source descriptor.

    Supported formats:
        - ``"env:VAR_NAME"`` -- reads ``os.environ["VAR_NAME"]``
        - ``"file:/path/to/file"`` -- reads file content, stripped of whitespace
        - anything else is taken as the literal key

    Raises:
        ConfigError: If the variable is unset or the file is unreadable.
    """
    if source.startswith("env:"):
        var_name = source[4:]
        value = os.environ.get(var_name)
        if value is None:
            raise ConfigError(
                f"Environment variable '{var_name}' is not set (source: {source})"
            )
        return value

    if source.startswith("file:"):
        path = Path(source[5:]).expanduser()
        if not path.is_file():
            raise ConfigError(f"Credential file not found: {path} (source: {source})")
        try:
            return path.read_text(encoding="utf-8").strip()
        except OSError as exc:
            raise ConfigError(f"Cannot read credential file {path}: {exc}") from exc

    return source
