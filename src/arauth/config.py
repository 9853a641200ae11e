"""Configuration management with XDG paths, atomic writes, and precedence resolution.

This module handles all persistent configuration for arauth:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.arauth/`` on macOS and Windows. See :func:`get_config_dir` and
  :func:`get_data_dir`.
* **Global config** -- A single :class:`~arauth.models.GlobalConfig`
  JSON file storing credential and plugin defaults.
* **Precedence resolution** -- :func:`resolve_config` merges CLI flags,
  environment variables, project-local config, and global config into the
  final effective configuration.
* **Build descriptions** -- :func:`load_build_config` reads a JSON or YAML
  build file into a :class:`~arauth.models.BuildConfig`;
  :func:`save_build_config` writes one back.

All file writes use an atomic temp-file-then-rename strategy
(:func:`_atomic_write`) to prevent data loss on crash or power failure.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import ValidationError

from arauth.exceptions import ConfigFileError
from arauth.models import BuildConfig, CredentialSource, GlobalConfig

_APP_NAME = "arauth"
_CONFIG_FILENAME = "config.json"
_PROJECT_CONFIG_FILENAME = "arauth.json"

ENV_CREDENTIAL_SOURCE = "ARAUTH_CREDENTIAL_SOURCE"
ENV_GCLOUD = "ARAUTH_GCLOUD"


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

    On Linux/BSD: ``$XDG_CONFIG_HOME/arauth/`` (default ``~/.config/arauth/``).
    On macOS/Windows: ``~/.arauth/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/arauth/`` (default ``~/.local/share/arauth/``).
    On macOS/Windows: ``~/.arauth/data/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir() / "data"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str, mode: Optional[int] = None) -> None:
    """Write data to file atomically using temp file + rename.

    When *mode* is given, permissions are applied to the temp file before
    any content is written.
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
        if mode is not None:
            os.chmod(tmp_path, mode)
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None  # prevent double-close below
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


def _global_config_path() -> Path:
    """Path to the global config file."""
    return get_config_dir() / _CONFIG_FILENAME


def load_global_config() -> GlobalConfig:
    """Load the global configuration from the config directory.

    Returns:
        The deserialised :class:`~arauth.models.GlobalConfig`, or a default
        instance when the file does not exist.

    Raises:
        ConfigFileError: If the file contains invalid JSON or fails
            validation.
    """
    path = _global_config_path()
    if not path.is_file():
        return GlobalConfig()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return GlobalConfig.model_validate(data)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigFileError(f"Invalid global config at {path}: {exc}") from exc


def save_global_config(config: GlobalConfig) -> None:
    """Persist the global configuration atomically to disk."""
    data = config.model_dump(mode="json")
    _atomic_write(_global_config_path(), json.dumps(data, indent=2) + "\n")


# --- Project-local config ---


def load_project_config() -> Optional[dict[str, Any]]:
    """Load project-local configuration from ``./arauth.json``.

    The file may set ``credential_source`` and ``gcloud_command`` so that a
    repository can pin how its builds authenticate.

    Returns:
        The parsed JSON object, or ``None`` if the file does not exist.

    Raises:
        ConfigFileError: If the file exists but is not a JSON object.
    """
    path = Path.cwd() / _PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigFileError(f"Invalid project config at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigFileError(f"Invalid project config at {path}: expected a JSON object")
    return data


# --- Precedence resolution ---


def _parse_source(value: str, origin: str) -> CredentialSource:
    try:
        return CredentialSource(value)
    except ValueError:
        choices = ", ".join(s.value for s in CredentialSource)
        raise ConfigFileError(
            f"Unknown credential source '{value}' from {origin} (expected one of: {choices})"
        ) from None


def resolve_config(cli_credential_source: Optional[str] = None) -> GlobalConfig:
    """Resolve the effective configuration.

    Precedence (high to low):
        1. CLI flag (``cli_credential_source``)
        2. Environment variables (``ARAUTH_CREDENTIAL_SOURCE``, ``ARAUTH_GCLOUD``)
        3. Project config (``./arauth.json``)
        4. User config (``<config_dir>/config.json``)
        5. Defaults

    Raises:
        ConfigFileError: If any layer holds an invalid value.
    """
    config = load_global_config()
    credentials = config.credentials

    project = load_project_config()
    if project is not None:
        if project.get("credential_source"):
            credentials.source = _parse_source(
                project["credential_source"], _PROJECT_CONFIG_FILENAME
            )
        if project.get("gcloud_command"):
            credentials.gcloud_command = project["gcloud_command"]

    env_source = os.environ.get(ENV_CREDENTIAL_SOURCE)
    if env_source:
        credentials.source = _parse_source(env_source, ENV_CREDENTIAL_SOURCE)
    env_gcloud = os.environ.get(ENV_GCLOUD)
    if env_gcloud:
        credentials.gcloud_command = env_gcloud

    if cli_credential_source is not None:
        credentials.source = _parse_source(cli_credential_source, "--credential-source")

    return config


# --- Build descriptions ---


def load_build_config(path: Path) -> BuildConfig:
    """Load a build description from a JSON or YAML file.

    ``.yaml`` and ``.yml`` files are parsed as YAML; everything else as
    JSON.

    Raises:
        ConfigFileError: If the file is missing, unparseable, or fails
            validation.
    """
    if not path.is_file():
        raise ConfigFileError(f"Build file not found: {path}")
    try:
        text = path.read_text(encoding="utf-8")
        if path.suffix.lower() in (".yaml", ".yml"):
            data = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ConfigFileError(f"Cannot read build file {path}: {exc}") from exc

    if data is None:
        data = {}
    try:
        return BuildConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigFileError(f"Invalid build file {path}: {exc}") from exc


def save_build_config(config: BuildConfig, path: Path) -> None:
    """Write a build description atomically with ``0o600`` permissions.

    The file may contain access tokens, so it is never world-readable.
    The format follows the file suffix, like :func:`load_build_config`.
    """
    data = config.model_dump(mode="json", exclude_none=True)
    if path.suffix.lower() in (".yaml", ".yml"):
        text = yaml.safe_dump(data, sort_keys=False)
    else:
        text = json.dumps(data, indent=2) + "\n"
    _atomic_write(path, text, mode=0o600)
