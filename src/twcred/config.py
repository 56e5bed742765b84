"""Configuration management with XDG paths and precedence resolution.

This module handles the small amount of persistent configuration twcred
reads:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.twcred/`` on macOS and Windows. See :func:`get_config_dir` and
  :func:`get_data_dir` (crash logs).
* **Tool config** -- an optional ``config.json`` deserialised into a
  :class:`~twcred.models.ToolConfig` (redirect URL, scopes, timeout).
* **Precedence resolution** -- :func:`resolve_settings` merges CLI flags,
  environment variables, ``config.json`` and built-in defaults, in that
  order.
* **Credential resolution** -- :func:`resolve_credential` reads the client
  id and secret from env vars, files, or the literal option value.
"""

from __future__ import annotations

import json
import os
import platform
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from twcred.exceptions import ConfigError
from twcred.models import ToolConfig

_APP_NAME = "twcred"
_CONFIG_FILENAME = "config.json"

ENV_CLIENT_ID = "TWCRED_CLIENT_ID"
ENV_CLIENT_SECRET = "TWCRED_CLIENT_SECRET"
ENV_REDIRECT_URL = "TWCRED_REDIRECT_URL"
ENV_TIMEOUT = "TWCRED_TIMEOUT"
ENV_CONFIG = "TWCRED_CONFIG"


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
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
    """Return the configuration directory without creating it.

    On Linux/BSD: ``$XDG_CONFIG_HOME/twcred/`` (default ``~/.config/twcred/``).
    On macOS/Windows: ``~/.twcred/``.
    """
    if _is_xdg_platform():
        return _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    return _fallback_base_dir()


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/twcred/`` (default ``~/.local/share/twcred/``).
    On macOS/Windows: ``~/.twcred/``.

    Returns:
        Absolute path to the data directory (guaranteed to exist).
    """
    if _is_xdg_platform():
        base = _xdg_base("XDG_DATA_HOME", (".local", "share"))
        path = base / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def config_path() -> Path:
    """Path of ``config.json``; ``$TWCRED_CONFIG`` overrides the default."""
    override = os.environ.get(ENV_CONFIG)
    if override:
        return Path(override).expanduser()
    return get_config_dir() / _CONFIG_FILENAME


# --- Tool config ---


def load_tool_config(path: Optional[Path] = None) -> ToolConfig:
    """Load ``config.json``, returning defaults if it does not exist.

    Args:
        path: Explicit config path; defaults to :func:`config_path`.

    Raises:
        ConfigError: If the file exists but is not valid JSON or does not
            match :class:`~twcred.models.ToolConfig`.
    """
    path = path or config_path()
    if not path.is_file():
        return ToolConfig()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return ToolConfig.model_validate(data)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Invalid JSON in {path}: {exc}") from exc
    except ValidationError as exc:
        raise ConfigError(f"Invalid config in {path}: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"Cannot read config file {path}: {exc}") from exc


@dataclass(frozen=True)
class Settings:
    """Effective settings after precedence resolution."""

    redirect_url: Optional[str]
    scopes: tuple[str, ...]
    timeout: float


def resolve_settings(
    redirect_url: Optional[str] = None,
    scopes: Optional[list[str]] = None,
    timeout: Optional[float] = None,
    config: Optional[ToolConfig] = None,
) -> Settings:
    """Resolve effective settings from all configuration sources.

    Precedence (highest first):

    1. Explicit arguments (CLI flags).
    2. Environment variables (``TWCRED_REDIRECT_URL``, ``TWCRED_TIMEOUT``).
    3. ``config.json``.
    4. Built-in defaults.

    Args:
        redirect_url: CLI ``--redirect-url`` value.
        scopes: CLI ``--scope`` values; empty or ``None`` means not given.
        timeout: CLI ``--timeout`` value.
        config: Pre-loaded tool config; loaded from disk when omitted.

    Raises:
        ConfigError: If ``TWCRED_TIMEOUT`` is not a positive number, or
            ``config.json`` is invalid.
    """
    config = config or load_tool_config()

    resolved_redirect = (
        redirect_url or os.environ.get(ENV_REDIRECT_URL) or config.redirect_url
    )

    resolved_timeout = timeout
    if resolved_timeout is None:
        env_timeout = os.environ.get(ENV_TIMEOUT)
        if env_timeout:
            try:
                resolved_timeout = float(env_timeout)
            except ValueError:
                raise ConfigError(
                    f"{ENV_TIMEOUT} must be a number of seconds, got {env_timeout!r}"
                ) from None
            if resolved_timeout <= 0:
                raise ConfigError(f"{ENV_TIMEOUT} must be positive")
        else:
            resolved_timeout = config.timeout

    return Settings(
        redirect_url=resolved_redirect,
        scopes=tuple(scopes) if scopes else tuple(config.scopes),
        timeout=resolved_timeout,
    )


# --- Credential source resolution ---


def resolve_credential(source: str) -> str:
    """Resolve a client credential from its source descriptor.

    Supported formats:
        - ``"env:VAR_NAME"`` -- reads ``os.environ["VAR_NAME"]``
        - ``"file:/path/to/file"`` -- reads file content, stripped of whitespace
        - anything else -- used as the literal value

    Args:
        source: The source descriptor string.

    Returns:
        The resolved credential string.

    Raises:
        ConfigError: If the source can't be resolved or resolves to an
            empty value.
    """
    if source.startswith("env:"):
        var_name = source[4:]
        value = os.environ.get(var_name)
        if value is None:
            raise ConfigError(
                f"Environment variable '{var_name}' is not set (source: {source})"
            )
    elif source.startswith("file:"):
        path = Path(source[5:]).expanduser()
        if not path.is_file():
            raise ConfigError(f"Credential file not found: {path} (source: {source})")
        try:
            value = path.read_text(encoding="utf-8").strip()
        except OSError as exc:
            raise ConfigError(f"Cannot read credential file {path}: {exc}") from exc
    else:
        value = source

    if not value:
        raise ConfigError("Client credential resolved to an empty value")
    return value
