"""Configuration management with XDG paths, atomic writes, and precedence resolution.

This module handles all persistent configuration for bnetexport:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.bnet-export/`` on macOS and Windows. See :func:`get_config_dir` and
  :func:`get_data_dir`.
* **Global config** -- A single :class:`~bnetexport.models.GlobalConfig`
  JSON file storing request timeouts, endpoints, and the output format.
* **Precedence resolution** -- :func:`resolve_config` merges CLI flags,
  environment variables, and the config file into the effective
  configuration.
* **Secret files** -- :func:`read_secret_file` reads a session token from
  disk.

Secrets (session tokens, restore codes, device secrets) are never written
by this module. All config writes use an atomic temp-file-then-rename
strategy (:func:`_atomic_write`).
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Optional

from bnetexport.exceptions import ConfigError
from bnetexport.models import GlobalConfig

_APP_NAME = "bnet-export"
_CONFIG_FILENAME = "config.json"

ENV_TIMEOUT = "BNET_EXPORT_TIMEOUT"
ENV_SSO_URL = "BNET_EXPORT_SSO_URL"
ENV_AUTHENTICATOR_URL = "BNET_EXPORT_AUTHENTICATOR_URL"


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
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/bnet-export/`` (default
    ``~/.config/bnet-export/``). On macOS/Windows: ``~/.bnet-export/``.

    Returns:
        Absolute path to the configuration directory (guaranteed to exist).
    """
    if _is_xdg_platform():
        base = _xdg_base("XDG_CONFIG_HOME", (".config",))
        path = base / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/bnet-export/`` (default
    ``~/.local/share/bnet-export/``). On macOS/Windows: ``~/.bnet-export/data/``.

    Returns:
        Absolute path to the data directory (guaranteed to exist).
    """
    if _is_xdg_platform():
        base = _xdg_base("XDG_DATA_HOME", (".local", "share"))
        path = base / _APP_NAME
    else:
        path = _fallback_base_dir() / "data"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is an atomic rename on POSIX systems. On any failure the
    temp file is removed.
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
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None  # prevent double-close in finally
        os.replace(tmp_path, path)
    except BaseException:
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


# --- Global config ---


def global_config_path() -> Path:
    """Path to the global config file."""
    return get_config_dir() / _CONFIG_FILENAME


def load_global_config() -> GlobalConfig:
    """Load the global configuration from the XDG config directory.

    Returns:
        The deserialised :class:`~bnetexport.models.GlobalConfig`. If the
        file does not exist, a default instance is returned.

    Raises:
        ConfigError: If the file exists but contains invalid JSON or fails
            Pydantic validation.
    """
    path = global_config_path()
    if not path.is_file():
        return GlobalConfig()
    try:
        text = path.read_text(encoding="utf-8")
        data = json.loads(text)
        return GlobalConfig.model_validate(data)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


def save_global_config(config: GlobalConfig) -> None:
    """Persist the global configuration atomically to disk.

    Args:
        config: The configuration to save.
    """
    data = config.model_dump(mode="json")
    _atomic_write(global_config_path(), json.dumps(data, indent=2) + "\n")


# --- Precedence resolution ---


def resolve_config(
    cli_timeout: Optional[float] = None,
) -> GlobalConfig:
    """Resolve config with full precedence chain.

    Precedence (high to low):
        1. CLI flag (``cli_timeout``)
        2. Environment variables (``BNET_EXPORT_TIMEOUT``,
           ``BNET_EXPORT_SSO_URL``, ``BNET_EXPORT_AUTHENTICATOR_URL``)
        3. User config (``~/.config/bnet-export/config.json``)
        4. Defaults

    Returns:
        The effective :class:`~bnetexport.models.GlobalConfig`.

    Raises:
        ConfigError: If the config file is invalid or ``BNET_EXPORT_TIMEOUT``
            is not a number.
    """
    config = load_global_config()

    env_timeout = os.environ.get(ENV_TIMEOUT)
    if env_timeout:
        try:
            config.request.timeout = float(env_timeout)
        except ValueError as exc:
            raise ConfigError(
                f"{ENV_TIMEOUT} must be a number of seconds, got: {env_timeout}"
            ) from exc

    env_sso_url = os.environ.get(ENV_SSO_URL)
    if env_sso_url:
        config.endpoints.sso_url = env_sso_url

    env_auth_url = os.environ.get(ENV_AUTHENTICATOR_URL)
    if env_auth_url:
        config.endpoints.authenticator_base_url = env_auth_url.rstrip("/")

    if cli_timeout is not None:
        config.request.timeout = cli_timeout

    return config


# --- Secret inputs ---


def read_secret_file(file_path: str) -> str:
    """Read a secret (e.g. a session token) from *file_path*, stripped of whitespace.

    Args:
        file_path: Path to the file. ``~`` is expanded.

    Returns:
        The file content without surrounding whitespace.

    Raises:
        ConfigError: If the file does not exist or cannot be read.
    """
    path = Path(file_path).expanduser()
    if not path.is_file():
        raise ConfigError(f"Secret file not found: {path}")
    try:
        return path.read_text(encoding="utf-8").strip()
    except OSError as exc:
        raise ConfigError(f"Cannot read secret file {path}: {exc}") from exc
