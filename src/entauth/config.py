"""Configuration: XDG paths, atomic writes, and environment settings.

This module handles everything entauth reads from its surroundings:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.entauth/`` on macOS and Windows. See :func:`get_data_dir`.
* **Settings** -- :func:`load_settings` reads the ``ENTAUTH_*`` environment
  variables exactly once into an :class:`~entauth.models.AuthSettings`.
* **Domains** -- :func:`normalize_domain` validates and canonicalises the
  enterprise domain passed on the command line.

All file writes use an atomic temp-file-then-rename strategy
(:func:`atomic_write`) so that a crash never leaves a half-written file.
"""

from __future__ import annotations

import os
import platform
import tempfile
from collections.abc import Mapping
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

from entauth.exceptions import ConfigError
from entauth.models import DEFAULT_LOGIN_TIMEOUT, AuthSettings

_APP_NAME = "entauth"

ENV_AUTH_TOKEN = "ENTAUTH_AUTH_TOKEN"
ENV_SCHEDULED = "ENTAUTH_SCHEDULED"
ENV_LOGIN_TIMEOUT = "ENTAUTH_LOGIN_TIMEOUT"
ENV_CALLBACK_PORT = "ENTAUTH_CALLBACK_PORT"
ENV_DOMAIN = "ENTAUTH_DOMAIN"

_TRUTHY = {"1", "true", "yes", "on"}


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


def get_data_dir() -> Path:
    """Return the data directory (stored token, crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/entauth/`` (default ``~/.local/share/entauth/``).
    On macOS/Windows: ``~/.entauth/data/``.

    Returns:
        Absolute path to the data directory (guaranteed to exist).
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir() / "data"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def atomic_write(path: Path, data: str, mode: int = 0o600) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is an atomic rename on POSIX systems. Permissions are
    restricted before any content is written. On any failure the temp file
    is removed and *path* is left untouched.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = fd.name
        os.chmod(tmp_path, mode)
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None  # prevent double-close below
        os.replace(tmp_path, path)
    except BaseException:
        # Clean up the temp file on any error (including KeyboardInterrupt).
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


# --- Environment settings ---


def _parse_flag(value: Optional[str]) -> bool:
    return (value or "").strip().lower() in _TRUTHY


def _parse_timeout(value: Optional[str]) -> Optional[float]:
    """Parse ``ENTAUTH_LOGIN_TIMEOUT``; ``0`` or a negative value disables the bound."""
    if value is None or not value.strip():
        return DEFAULT_LOGIN_TIMEOUT
    try:
        seconds = float(value)
    except ValueError as exc:
        raise ConfigError(
            f"{ENV_LOGIN_TIMEOUT} must be a number of seconds, got {value!r}"
        ) from exc
    if seconds <= 0:
        return None
    return seconds


def _parse_port(value: Optional[str]) -> Optional[int]:
    if value is None or not value.strip():
        return None
    try:
        port = int(value)
    except ValueError as exc:
        raise ConfigError(f"{ENV_CALLBACK_PORT} must be an integer, got {value!r}") from exc
    if not 0 < port < 65536:
        raise ConfigError(f"{ENV_CALLBACK_PORT} out of range: {port}")
    return port


def load_settings(environ: Optional[Mapping[str, str]] = None) -> AuthSettings:
    """Read the ``ENTAUTH_*`` environment variables into :class:`AuthSettings`.

    Called once at process start; components receive the resulting value
    instead of consulting ``os.environ`` themselves.

    Args:
        environ: Mapping to read from. Defaults to ``os.environ``.

    Returns:
        The resolved settings.

    Raises:
        ConfigError: If a numeric variable cannot be parsed.
    """
    env = os.environ if environ is None else environ
    return AuthSettings(
        auth_token=env.get(ENV_AUTH_TOKEN) or None,
        scheduled=_parse_flag(env.get(ENV_SCHEDULED)),
        login_timeout=_parse_timeout(env.get(ENV_LOGIN_TIMEOUT)),
        callback_port=_parse_port(env.get(ENV_CALLBACK_PORT)),
    )


def normalize_domain(domain: Optional[str]) -> str:
    """Validate an enterprise domain URL and strip trailing slashes.

    Raises:
        ConfigError: If *domain* is empty or not an ``http(s)`` URL.
    """
    if not domain:
        raise ConfigError(
            f"No enterprise domain configured. Pass --domain or set {ENV_DOMAIN}."
        )
    parsed = urlparse(domain)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ConfigError(f"Invalid enterprise domain '{domain}': expected an http(s) URL")
    return domain.rstrip("/")
